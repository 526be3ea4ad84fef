"""
Test concentrated-liquidity (PCL) pricing.

Validates:
1. D and y solvers on balanced internal reserves
2. Dynamic fee moves from mid_fee to out_fee with imbalance
3. Full swaps against values derived with the contract's truncation rules
"""

import unittest

import pytest

from astroport_math.config import EngineConfig
from astroport_math.curves import concentrated
from astroport_math.decimal_core import FixedDecimal, to_fixed
from astroport_math.exceptions import ConvergenceFailure, InvalidInput, InvalidPoolState
from astroport_math.ramp import RampedParameter
from astroport_math.types import ConcentratedFeeConfig

AMP = RampedParameter.constant(to_fixed("40"), 1690000000)
GAMMA = RampedParameter.constant(to_fixed("0.000145"), 1690000000)
BLOCK_TIME = 1700000000
RESERVES = [FixedDecimal(1000000000000, 0), FixedDecimal(666666666666, 0)]
PRICE_SCALE = to_fixed("1.5")


def fee_config(mid="0.0026", out="0.0045", total="1", maker="0"):
    return ConcentratedFeeConfig(
        mid_fee=to_fixed(mid),
        out_fee=to_fixed(out),
        fee_gamma=to_fixed("0.00023"),
        total_fee_rate=to_fixed(total),
        maker_fee_share=to_fixed(maker),
    )


def run_swap(
    offer,
    ask_index,
    reserves=RESERVES,
    precisions=(6, 6),
    fees=None,
    price_scale=PRICE_SCALE,
    amp_ramp=AMP,
    gamma_ramp=GAMMA,
    **kwargs,
):
    return concentrated.swap(
        FixedDecimal(offer, 0),
        precisions[1 - ask_index],
        ask_index,
        precisions[ask_index],
        reserves,
        fees or fee_config(),
        price_scale,
        BLOCK_TIME,
        amp_ramp,
        gamma_ramp,
        **kwargs,
    )


class TestSolvers(unittest.TestCase):
    """Test cases for newton_d, newton_y and the fee curve."""

    def setUp(self):
        self.amp = to_fixed("40")
        self.gamma = to_fixed("0.000145")
        self.xs = [FixedDecimal(1000000), to_fixed("999999.999999")]

    def test_newton_d_balanced(self):
        """The geometric-mean start is already on the curve for a balanced pool."""
        d = concentrated.newton_d(self.xs, self.amp, self.gamma)
        self.assertEqual(d, to_fixed("1999999.999998999999999999"))

    def test_newton_y_recovers_balance(self):
        """Solving for a reserve at the current D gives back that reserve."""
        d = concentrated.newton_d(self.xs, self.amp, self.gamma)
        y = concentrated.newton_y(self.xs, self.amp, self.gamma, d, 1)
        self.assertLessEqual(y.abs_diff(self.xs[1]), to_fixed("0.0001"))

    def test_fee_balanced_pool_is_mid_fee(self):
        fee = concentrated.dynamic_fee([FixedDecimal(1000), FixedDecimal(1000)], fee_config())
        self.assertEqual(fee, to_fixed("0.0026"))

    def test_fee_imbalanced_pool_is_out_fee(self):
        fee = concentrated.dynamic_fee([FixedDecimal(1), FixedDecimal(1000000)], fee_config())
        self.assertEqual(fee, to_fixed("0.0045"))


class TestConcentratedSwap(unittest.TestCase):
    """Test cases for full swaps."""

    def test_ask_asset_one(self):
        result = run_swap(1000000000, 1)
        self.assertEqual(result.return_amount, 664919530)
        self.assertEqual(result.spread_amount, 8341)
        self.assertEqual(result.commission_amount, 1738794)
        self.assertEqual(result.return_amount_before_fee, 666658325)
        self.assertEqual(result.fee_rate, to_fixed("0.002608225005662894"))

    def test_ask_asset_zero_mixed_precisions(self):
        """Asset 1 with 8 decimals at price scale 2 against a 6-decimal asset 0."""
        reserves = [FixedDecimal(1000000000000, 0), FixedDecimal(50000000000000, 0)]
        result = run_swap(
            50000000000,
            0,
            reserves=reserves,
            precisions=(6, 8),
            price_scale=to_fixed("2"),
        )
        self.assertEqual(result.return_amount, 997379295)
        self.assertEqual(result.spread_amount, 6256)
        self.assertEqual(result.commission_amount, 2608192)
        self.assertEqual(result.return_amount_before_fee, 999987487)

    def test_large_trade_pays_near_out_fee(self):
        result = run_swap(300000000000, 1)
        self.assertEqual(result.return_amount, 155550776982)
        self.assertEqual(result.spread_amount, 43747101742)
        self.assertEqual(result.commission_amount, 702121275)
        self.assertGreater(result.fee_rate, to_fixed("0.0044"))

    def test_zero_fee_idempotence(self):
        result = run_swap(1000000000, 1, fees=fee_config(mid="0", out="0"))
        self.assertEqual(result.commission_amount, 0)
        self.assertEqual(result.return_amount, result.return_amount_before_fee)
        self.assertEqual(result.return_amount, 666658325)

    def test_total_fee_rate_caps_dynamic_fee(self):
        result = run_swap(1000000000, 1, fees=fee_config(total="0.001"))
        self.assertEqual(result.fee_rate, to_fixed("0.001"))
        self.assertEqual(result.commission_amount, 666658)

    def test_maker_fee_share(self):
        result = run_swap(1000000000, 1, fees=fee_config(maker="0.5"))
        self.assertEqual(result.maker_fee, 869397)
        self.assertEqual(result.to_dict()["commission_amount"], "1738794")

    def test_oracle_price_only_moves_spread(self):
        default = run_swap(1000000000, 1)
        explicit = run_swap(1000000000, 1, oracle_price=PRICE_SCALE)
        self.assertEqual(default, explicit)

        shifted = run_swap(1000000000, 1, oracle_price=to_fixed("1.6"))
        self.assertEqual(shifted.return_amount, default.return_amount)
        self.assertEqual(shifted.spread_amount, 0)

    def test_monotonic_in_offer(self):
        previous = 0
        for offer in (10**6, 10**8, 10**9, 10**10, 10**11):
            result = run_swap(offer, 1)
            self.assertGreaterEqual(result.return_amount_before_fee, previous)
            previous = result.return_amount_before_fee


class TestConcentratedFailures(unittest.TestCase):
    """Test cases for validation and solver failures."""

    def test_zero_offer(self):
        with self.assertRaises(InvalidInput):
            run_swap(0, 1)

    def test_zero_reserve(self):
        with self.assertRaises(InvalidInput):
            run_swap(1000, 1, reserves=[RESERVES[0], FixedDecimal(0, 0)])

    def test_non_positive_price_scale(self):
        with self.assertRaises(InvalidPoolState):
            run_swap(1000, 1, price_scale=to_fixed("0"))

    def test_non_positive_gamma(self):
        with self.assertRaises(InvalidPoolState):
            run_swap(1000, 1, gamma_ramp=RampedParameter.constant(to_fixed("0")))

    def test_non_positive_amp(self):
        with self.assertRaises(InvalidPoolState):
            run_swap(1000, 1, amp_ramp=RampedParameter.constant(to_fixed("0")))

    def test_non_positive_oracle_price(self):
        with self.assertRaises(InvalidPoolState):
            run_swap(1000, 1, oracle_price=to_fixed("0"))

    def test_iteration_cap(self):
        with self.assertRaises(ConvergenceFailure) as ctx:
            run_swap(1000000000, 1, config=EngineConfig(max_iterations=2))
        self.assertEqual(ctx.exception.solver, "newton_y")


@pytest.mark.parametrize(
    "name,kwargs",
    [
        ("mid_fee", {"mid": "1"}),
        ("out_fee", {"out": "-0.1"}),
        ("total_fee_rate", {"total": "1.5"}),
        ("maker_fee_share", {"maker": "2"}),
    ],
)
def test_fee_config_validation(name, kwargs):
    """Fee parameters outside their ranges are rejected up front."""
    with pytest.raises(InvalidInput) as exc_info:
        fee_config(**kwargs)
    assert exc_info.value.field == name


@pytest.mark.parametrize("price_scale", ["matched", "1"])
@pytest.mark.parametrize(
    "reserve0,reserve1",
    [
        (10**18, 10**12),
        (10**15, 10**12),
        (10**12, 10**12),
        (10**12, 10**15),
        (10**12, 10**18),
    ],
)
def test_converges_across_reserve_ratios(reserve0, reserve1, price_scale):
    """Newton loops settle for reserve ratios from 1e-6 to 1e6.

    The pool is priced both at its reserve ratio and at a mismatched scale
    of 1, which leaves the internal balances fully imbalanced.
    """
    if price_scale == "matched":
        price_scale = to_fixed(reserve0) / reserve1
    else:
        price_scale = to_fixed(price_scale)
    reserves = [FixedDecimal(reserve0, 0), FixedDecimal(reserve1, 0)]

    result = run_swap(reserve1 // 10**4, 0, reserves=reserves, price_scale=price_scale)

    assert 0 < result.return_amount_before_fee < reserve0
