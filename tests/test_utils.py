"""
Test logging and JSON helpers.
"""

import json
import logging

import pytest

from astroport_math import logging_config
from astroport_math.config import EngineConfig
from astroport_math.exceptions import InvalidInput
from astroport_math.utils import dump_result, get_logger, load_reserves, load_result


def test_get_logger_adds_single_handler():
    """Repeated calls reuse the configured handler."""
    logger = get_logger("astroport_math.tests.single", level=logging.DEBUG)
    get_logger("astroport_math.tests.single")
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG


def test_get_logger_with_extra_returns_adapter():
    logger = get_logger("astroport_math.tests.extra", extra={"curve": "stable"})
    assert isinstance(logger, logging.LoggerAdapter)
    assert logger.extra == {"extra_curve": "stable"}


def test_load_reserves_from_json_text():
    assert load_reserves('["1", "2"]') == ["1", "2"]


def test_load_reserves_keeps_json_numbers_exact():
    """JSON numbers with a fraction come back as text, never as floats."""
    assert load_reserves("[1, 2.5]") == [1, "2.5"]


def test_load_reserves_from_sequence():
    assert load_reserves(("1", "2")) == ["1", "2"]


@pytest.mark.parametrize("reserves", ["not json", '["1"]', '"12"', "{}", 12])
def test_load_reserves_rejects_bad_input(reserves):
    with pytest.raises(InvalidInput):
        load_reserves(reserves)


def test_result_round_trip():
    payload = dump_result({"return_amount": "5", "spread_amount": "0", "commission_amount": "1"})
    assert json.loads(payload)["return_amount"] == "5"
    assert load_result(payload) == {"return_amount": 5, "spread_amount": 0, "commission_amount": 1}


class TestLoggingConfig:
    """Test cases for logging setup helpers."""

    def teardown_method(self):
        logging.getLogger().handlers.clear()

    def test_setup_sets_levels(self):
        logging_config.setup(logging.INFO)
        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger("astroport_math").level == logging.INFO
        assert len(logging.getLogger().handlers) == 1

    def test_setup_accepts_level_name(self):
        logging_config.setup("warning")
        assert logging.getLogger("astroport_math").level == logging.WARNING

    def test_setup_debug_shows_curve_traces(self):
        logging_config.setup_debug()
        assert logging.getLogger("astroport_math.curves").level == logging.DEBUG

    def test_setup_keeps_curve_traces_quiet(self):
        logging_config.setup(logging.DEBUG)
        assert logging.getLogger("astroport_math.curves").level == logging.INFO

    def test_setup_minimal(self):
        logging_config.setup_minimal()
        assert logging.getLogger().level == logging.WARNING

    def test_setup_from_config(self):
        logging_config.setup_from_config(EngineConfig(log_level="error"))
        assert logging.getLogger("astroport_math").level == logging.ERROR
