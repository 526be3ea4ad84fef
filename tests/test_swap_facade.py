"""
Test the string-in, JSON-out entry points.
"""

import json

import pytest

from astroport_math import concentrated_swap, stable_swap, xyk_swap
from astroport_math.config import EngineConfig
from astroport_math.exceptions import (
    ConvergenceFailure,
    InvalidInput,
    InvalidNumericLiteral,
    InvalidRampConfig,
)
from astroport_math.utils import load_result

XYK_RESERVES = '["499395163721","5007277236"]'
STABLE_RESERVES = '["530256812","100446728"]'
PCL_RESERVES = '["1000000000000","666666666666"]'


def stable_args(**overrides):
    args = {
        "offer_amount": "10000000",
        "offer_precision": "6",
        "ask_index": "0",
        "ask_precision": "6",
        "reserves": STABLE_RESERVES,
        "fee_rate": "0.0005",
        "block_time": "1700000000",
        "init_amp_time": "0",
        "init_amp": "10000",
        "next_amp_time": "0",
        "next_amp": "10000",
    }
    args.update(overrides)
    return args


def pcl_args(**overrides):
    args = {
        "offer_amount": "1000000000",
        "offer_precision": "6",
        "ask_index": "1",
        "ask_precision": "6",
        "reserves": PCL_RESERVES,
        "total_fee_rate": "1",
        "price_scale": "1.5",
        "fee_gamma": "0.00023",
        "mid_fee": "0.0026",
        "out_fee": "0.0045",
        "block_time": "1700000000",
        "initial_time": "1690000000",
        "initial_amp": "40",
        "initial_gamma": "0.000145",
        "future_time": "1690000000",
        "future_amp": "40",
        "future_gamma": "0.000145",
    }
    args.update(overrides)
    return args


class TestXykFacade:
    """Test cases for xyk_swap."""

    def test_golden_vector(self):
        """A quarter of the asset-1 reserve matches the contract exactly."""
        payload = xyk_swap("1251819309", "0", XYK_RESERVES, "0.003")
        assert json.loads(payload) == {
            "return_amount": "99579395646",
            "spread_amount": "24969758186",
            "commission_amount": "299637098",
        }

    def test_output_key_order(self):
        payload = xyk_swap("1251819309", "0", XYK_RESERVES, "0.003")
        assert list(json.loads(payload)) == [
            "return_amount",
            "spread_amount",
            "commission_amount",
        ]

    def test_reserves_as_sequence(self):
        from_text = xyk_swap("1000", "1", XYK_RESERVES, "0.003")
        from_list = xyk_swap("1000", "1", ["499395163721", "5007277236"], "0.003")
        assert from_text == from_list

    def test_ints_are_tolerated(self):
        assert xyk_swap(1000, 1, [499395163721, 5007277236], "0.003") == xyk_swap(
            "1000", "1", XYK_RESERVES, "0.003"
        )

    def test_zero_offer(self):
        with pytest.raises(InvalidInput):
            xyk_swap("0", "0", XYK_RESERVES, "0.003")

    def test_negative_offer(self):
        with pytest.raises(InvalidInput):
            xyk_swap("-1", "0", XYK_RESERVES, "0.003")

    def test_float_rejected(self):
        with pytest.raises(InvalidNumericLiteral):
            xyk_swap("1000", "0", XYK_RESERVES, 0.003)

    def test_unparsable_offer(self):
        with pytest.raises(InvalidNumericLiteral):
            xyk_swap("lots", "0", XYK_RESERVES, "0.003")

    def test_fractional_index(self):
        with pytest.raises(InvalidInput):
            xyk_swap("1000", "0.5", XYK_RESERVES, "0.003")

    def test_malformed_reserves(self):
        with pytest.raises(InvalidInput):
            xyk_swap("1000", "0", '["1", ', "0.003")
        with pytest.raises(InvalidInput):
            xyk_swap("1000", "0", '["1", "2", "3"]', "0.003")
        with pytest.raises(InvalidInput):
            xyk_swap("1000", "0", '{"a": "1"}', "0.003")

    def test_takes_no_solver_config(self):
        """The constant-product curve has no solver settings to accept."""
        with pytest.raises(TypeError):
            xyk_swap("1000", "0", XYK_RESERVES, "0.003", config=EngineConfig())


class TestStableFacade:
    """Test cases for stable_swap."""

    def test_reference_swap(self):
        result = load_result(stable_swap(**stable_args()))
        assert abs(result["return_amount"] - 10415162) <= 1
        assert abs(result["commission_amount"] - 5210) <= 1
        assert result["spread_amount"] == 0

    def test_positional_call(self):
        args = stable_args()
        assert stable_swap(*args.values()) == stable_swap(**args)

    def test_zero_offer(self):
        with pytest.raises(InvalidInput):
            stable_swap(**stable_args(offer_amount="0"))

    def test_degenerate_ramp(self):
        with pytest.raises(InvalidRampConfig):
            stable_swap(
                **stable_args(
                    init_amp_time="100",
                    init_amp="10000",
                    next_amp_time="100",
                    next_amp="20000",
                )
            )

    def test_fractional_amp(self):
        with pytest.raises(InvalidInput):
            stable_swap(**stable_args(init_amp="100.5"))

    def test_config_is_forwarded(self):
        with pytest.raises(ConvergenceFailure):
            stable_swap(**stable_args(), config=EngineConfig(max_iterations=1))


class TestConcentratedFacade:
    """Test cases for concentrated_swap."""

    def test_reference_swap(self):
        result = load_result(concentrated_swap(**pcl_args()))
        assert result == {
            "return_amount": 664919530,
            "spread_amount": 8341,
            "commission_amount": 1738794,
        }

    def test_oracle_price_keyword(self):
        result = load_result(concentrated_swap(**pcl_args(), oracle_price="1.6"))
        assert result["spread_amount"] == 0
        assert result["return_amount"] == 664919530

    def test_maker_fee_share_does_not_change_output(self):
        plain = concentrated_swap(**pcl_args())
        shared = concentrated_swap(**pcl_args(), maker_fee_share="0.5")
        assert plain == shared

    def test_zero_offer(self):
        with pytest.raises(InvalidInput):
            concentrated_swap(**pcl_args(offer_amount="0"))

    def test_degenerate_ramp(self):
        with pytest.raises(InvalidRampConfig):
            concentrated_swap(**pcl_args(future_amp="50"))

    def test_ramp_ending_before_start(self):
        with pytest.raises(InvalidRampConfig):
            concentrated_swap(**pcl_args(future_time="1680000000"))

    def test_unparsable_gamma(self):
        with pytest.raises(InvalidNumericLiteral):
            concentrated_swap(**pcl_args(initial_gamma="gamma"))
