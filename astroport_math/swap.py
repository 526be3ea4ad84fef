"""
Public entry points of the pricing engine.

Each function takes exact decimal text (ints are tolerated, binary floats are
rejected), coerces it into internal types, runs the curve and returns the
result as JSON text:

    {"return_amount": "...", "spread_amount": "...", "commission_amount": "..."}

Errors raised by parsing or by the curves propagate unchanged.
"""

import logging
from typing import Optional, Sequence, Union

from .config import DEFAULT_CONFIG, EngineConfig
from .curves import concentrated, stable, xyk
from .decimal_core import FixedDecimal, parse_integer, to_fixed
from .ramp import RampedParameter
from .types import ConcentratedFeeConfig, SwapResult
from .utils import dump_result, load_reserves

logger = logging.getLogger(__name__)

NumericText = Union[str, int]
Reserves = Union[str, Sequence[NumericText]]


def _parse_reserves(reserves: Reserves) -> list:
    return [
        to_fixed(value, f"reserves[{i}]")
        for i, value in enumerate(load_reserves(reserves))
    ]


def _render(result: SwapResult) -> str:
    payload = dump_result(result.to_dict())
    logger.debug(f"{result.curve} swap -> {payload}")
    return payload


def xyk_swap(
    offer_amount: NumericText,
    ask_index: NumericText,
    reserves: Reserves,
    fee_rate: NumericText,
) -> str:
    """
    Simulate a constant-product swap.

    Args:
        offer_amount: Offered amount in raw integer units
        ask_index: Index of the asked asset, "0" or "1"
        reserves: JSON array text (or sequence) of the two raw reserves
        fee_rate: Total fee rate, e.g. "0.003"

    Returns:
        JSON text with the three integer-string amounts
    """
    logger.debug(
        f"xyk_swap(offer={offer_amount}, ask_index={ask_index}, "
        f"reserves={reserves}, fee_rate={fee_rate})"
    )
    result = xyk.swap(
        to_fixed(offer_amount, "offer_amount"),
        parse_integer(ask_index, "ask_index"),
        _parse_reserves(reserves),
        to_fixed(fee_rate, "fee_rate"),
    )
    return _render(result)


def stable_swap(
    offer_amount: NumericText,
    offer_precision: NumericText,
    ask_index: NumericText,
    ask_precision: NumericText,
    reserves: Reserves,
    fee_rate: NumericText,
    block_time: NumericText,
    init_amp_time: NumericText,
    init_amp: NumericText,
    next_amp_time: NumericText,
    next_amp: NumericText,
    *,
    config: Optional[EngineConfig] = None,
) -> str:
    """
    Simulate a StableSwap swap.

    Amp values are the on-chain integers (the amplification multiplied by
    100); the ramp is evaluated at ``block_time``.

    Returns:
        JSON text with the three integer-string amounts
    """
    logger.debug(
        f"stable_swap(offer={offer_amount}, ask_index={ask_index}, "
        f"reserves={reserves}, amp={init_amp}@{init_amp_time}->{next_amp}@{next_amp_time}, "
        f"block_time={block_time})"
    )
    amp_ramp = RampedParameter(
        initial_value=FixedDecimal(parse_integer(init_amp, "init_amp"), 0),
        initial_time=parse_integer(init_amp_time, "init_amp_time"),
        future_value=FixedDecimal(parse_integer(next_amp, "next_amp"), 0),
        future_time=parse_integer(next_amp_time, "next_amp_time"),
    )
    result = stable.swap(
        to_fixed(offer_amount, "offer_amount"),
        parse_integer(offer_precision, "offer_precision"),
        parse_integer(ask_index, "ask_index"),
        parse_integer(ask_precision, "ask_precision"),
        _parse_reserves(reserves),
        to_fixed(fee_rate, "fee_rate"),
        parse_integer(block_time, "block_time"),
        amp_ramp,
        config or DEFAULT_CONFIG,
    )
    return _render(result)


def concentrated_swap(
    offer_amount: NumericText,
    offer_precision: NumericText,
    ask_index: NumericText,
    ask_precision: NumericText,
    reserves: Reserves,
    total_fee_rate: NumericText,
    price_scale: NumericText,
    fee_gamma: NumericText,
    mid_fee: NumericText,
    out_fee: NumericText,
    block_time: NumericText,
    initial_time: NumericText,
    initial_amp: NumericText,
    initial_gamma: NumericText,
    future_time: NumericText,
    future_amp: NumericText,
    future_gamma: NumericText,
    *,
    maker_fee_share: NumericText = "0",
    oracle_price: Optional[NumericText] = None,
    config: Optional[EngineConfig] = None,
) -> str:
    """
    Simulate a concentrated-liquidity (PCL) swap.

    ``total_fee_rate`` caps the dynamic fee. ``oracle_price`` only affects
    the reported spread and defaults to ``price_scale``.

    Returns:
        JSON text with the three integer-string amounts
    """
    logger.debug(
        f"concentrated_swap(offer={offer_amount}, ask_index={ask_index}, "
        f"reserves={reserves}, price_scale={price_scale}, block_time={block_time})"
    )
    fee_config = ConcentratedFeeConfig(
        mid_fee=to_fixed(mid_fee, "mid_fee"),
        out_fee=to_fixed(out_fee, "out_fee"),
        fee_gamma=to_fixed(fee_gamma, "fee_gamma"),
        total_fee_rate=to_fixed(total_fee_rate, "total_fee_rate"),
        maker_fee_share=to_fixed(maker_fee_share, "maker_fee_share"),
    )
    start = parse_integer(initial_time, "initial_time")
    end = parse_integer(future_time, "future_time")
    amp_ramp = RampedParameter(
        to_fixed(initial_amp, "initial_amp"), start, to_fixed(future_amp, "future_amp"), end
    )
    gamma_ramp = RampedParameter(
        to_fixed(initial_gamma, "initial_gamma"),
        start,
        to_fixed(future_gamma, "future_gamma"),
        end,
    )
    result = concentrated.swap(
        to_fixed(offer_amount, "offer_amount"),
        parse_integer(offer_precision, "offer_precision"),
        parse_integer(ask_index, "ask_index"),
        parse_integer(ask_precision, "ask_precision"),
        _parse_reserves(reserves),
        fee_config,
        to_fixed(price_scale, "price_scale"),
        parse_integer(block_time, "block_time"),
        amp_ramp,
        gamma_ramp,
        oracle_price=None if oracle_price is None else to_fixed(oracle_price, "oracle_price"),
        config=config or DEFAULT_CONFIG,
    )
    return _render(result)

