"""
Constant-product (x*y=k) pool pricing.

Works on raw integer units exactly as the pair contract does: the pool
identity is evaluated at 18-place fixed point and truncated to whole units,
and the fee is taken from the output side.
"""

import logging
from typing import Sequence

from ..constants import DECIMAL_PLACES
from ..decimal_core import FixedDecimal
from ..exceptions import InvalidInput
from ..types import SwapResult, check_index

logger = logging.getLogger(__name__)


def _check_units(value: FixedDecimal, field: str) -> FixedDecimal:
    if value != value.truncate(0):
        raise InvalidInput(
            f"{field} must be a whole number of units: {value}",
            field=field,
            value=str(value),
        )
    return value.truncate(0)


def compute_swap(
    offer_pool: FixedDecimal,
    ask_pool: FixedDecimal,
    offer_amount: FixedDecimal,
    fee_rate: FixedDecimal,
):
    """
    Calculate the output of a constant-product swap.

    Formula:
        return = ask_pool - offer_pool * ask_pool / (offer_pool + offer_amount)
        spread = offer_amount * (ask_pool / offer_pool) - return
        commission = return * fee_rate

    Args:
        offer_pool: Reserve of the offered asset (raw units)
        ask_pool: Reserve of the asked asset (raw units)
        offer_amount: Offered amount (raw units)
        fee_rate: Fee as decimal (e.g., 0.003 for 30 bps)

    Returns:
        Tuple of (return_amount, spread_amount, commission_amount,
        return_amount_before_fee), all scale-0 units
    """
    cp = (offer_pool * ask_pool).truncate(DECIMAL_PLACES)
    return_before_fee = (
        ask_pool.truncate(DECIMAL_PLACES) - cp / (offer_pool + offer_amount)
    ).truncate(0)

    # Linear-price output, floored at zero when rounding pushes it below
    price = ask_pool.truncate(DECIMAL_PLACES) / offer_pool
    linear_amount = (offer_amount * price).truncate(0)
    spread_amount = linear_amount.saturating_sub(return_before_fee)

    commission_amount = (return_before_fee * fee_rate).truncate(0)
    return_amount = return_before_fee - commission_amount

    return return_amount, spread_amount, commission_amount, return_before_fee


def swap(
    offer_amount: FixedDecimal,
    ask_index: int,
    reserves: Sequence[FixedDecimal],
    fee_rate: FixedDecimal,
) -> SwapResult:
    """
    Simulate a swap against an xyk pool.

    Args:
        offer_amount: Offered amount in raw units
        ask_index: Index of the asked asset (0 or 1)
        reserves: Raw reserves of asset 0 and asset 1
        fee_rate: Total fee rate in [0, 1)

    Returns:
        SwapResult in raw units of the ask asset

    Raises:
        InvalidInput: If any precondition fails
    """
    check_index(ask_index)
    if len(reserves) != 2:
        raise InvalidInput(
            f"xyk pools hold two assets, got {len(reserves)} reserves",
            field="reserves",
        )
    if offer_amount <= 0:
        raise InvalidInput(
            f"offer_amount must be positive: {offer_amount}",
            field="offer_amount",
            value=str(offer_amount),
        )
    if any(reserve <= 0 for reserve in reserves):
        raise InvalidInput(
            f"Reserves must be positive: {[str(r) for r in reserves]}",
            field="reserves",
        )
    if fee_rate < 0 or fee_rate >= 1:
        raise InvalidInput(
            f"fee_rate must be in [0, 1): {fee_rate}",
            field="fee_rate",
            value=str(fee_rate),
        )

    offer_amount = _check_units(offer_amount, "offer_amount")
    ask_pool = _check_units(reserves[ask_index], "reserves")
    offer_pool = _check_units(reserves[1 - ask_index], "reserves")

    return_amount, spread_amount, commission_amount, return_before_fee = compute_swap(
        offer_pool, ask_pool, offer_amount, fee_rate.truncate(DECIMAL_PLACES)
    )

    result = SwapResult(
        return_amount=int(return_amount),
        spread_amount=int(spread_amount),
        commission_amount=int(commission_amount),
        return_amount_before_fee=int(return_before_fee),
        fee_rate=fee_rate.truncate(DECIMAL_PLACES),
        curve="xyk",
    )
    logger.debug(result.format_log())
    return result
