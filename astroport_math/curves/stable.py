"""
StableSwap pool pricing with a time-ramped amplification.

The invariant D is solved at 18-place fixed point; the new ask reserve y is
solved in whole units of the pool's common precision (the larger of the two
asset precisions) and only then truncated to the ask asset's precision.

Invariant for two coins:
    A*n^n * sum(x) + D = A*n^n * D + D^(n+1) / (n^n * prod(x))
"""

import logging
from typing import Sequence

from ..config import DEFAULT_CONFIG, EngineConfig
from ..constants import DECIMAL_PLACES, N_COINS
from ..decimal_core import ZERO, FixedDecimal
from ..exceptions import ConvergenceFailure, InvalidInput, InvalidPoolState
from ..ramp import RampedParameter, resolve
from ..types import AssetAmount, PoolReserves, SwapResult, check_index, check_precision

logger = logging.getLogger(__name__)


def compute_current_amp(amp_ramp: RampedParameter, block_time: int) -> FixedDecimal:
    """On-chain amp (scaled by the amp precision) at ``block_time``, in whole units."""
    return resolve(amp_ramp, block_time).truncate(0)


def _d_step(
    d: FixedDecimal, leverage: FixedDecimal, sum_x: FixedDecimal, d_product: FixedDecimal
) -> FixedDecimal:
    """One Newton step: D = (Ann*S + n*D_P) * D / ((Ann - 1) * D + (n + 1) * D_P)."""
    l_val = (leverage * sum_x + d_product * N_COINS) * d
    r_val = d * (leverage - 1) + d_product * (N_COINS + 1)
    return l_val / r_val


def compute_d(
    amp: FixedDecimal,
    pools: Sequence[FixedDecimal],
    precision: int,
    config: EngineConfig = DEFAULT_CONFIG,
) -> FixedDecimal:
    """
    Solve the StableSwap invariant D with Newton's method.

    Args:
        amp: Current amp, scaled by ``config.stable_amp_precision``
        pools: Pool amounts as 18-place decimals
        precision: Common precision; iteration stops once D moves by at most
            one unit of it
        config: Iteration cap and amp scaling

    Returns:
        D at 18-place fixed point (zero for an empty pool)

    Raises:
        ConvergenceFailure: If D does not settle within the iteration cap
    """
    sum_x = pools[0] + pools[1]
    if sum_x.is_zero():
        return ZERO

    leverage = amp.truncate(DECIMAL_PLACES) / config.stable_amp_precision * N_COINS
    amount_a_times_coins = pools[0] * N_COINS
    amount_b_times_coins = pools[1] * N_COINS
    tolerance = FixedDecimal.from_units(1, precision)

    d = sum_x
    for iteration in range(1, config.max_iterations + 1):
        d_product = d**3 / (amount_a_times_coins * amount_b_times_coins)
        d_prev = d
        d = _d_step(d, leverage, sum_x, d_product)
        if d.abs_diff(d_prev) <= tolerance:
            logger.debug(f"compute_d converged in {iteration} iterations: D={d}")
            return d

    logger.warning(
        f"compute_d did not converge in {config.max_iterations} iterations "
        f"(amp={amp}, pools={[str(p) for p in pools]})"
    )
    raise ConvergenceFailure(
        f"Newton's method for D did not converge in {config.max_iterations} iterations",
        solver="compute_d",
        iterations=config.max_iterations,
        details={"amp": str(amp), "pools": [str(p) for p in pools]},
    )


def calc_y(
    amp: FixedDecimal,
    new_amount: FixedDecimal,
    pools: Sequence[FixedDecimal],
    precision: int,
    config: EngineConfig = DEFAULT_CONFIG,
) -> FixedDecimal:
    """
    Compute the ask reserve that keeps D constant after the offer lands.

    Solves ``y**2 + b*y = c`` by Newton's method in whole units of
    ``precision``.

    Args:
        amp: Current amp, scaled by ``config.stable_amp_precision``
        new_amount: Offer-side reserve including the offer (18-place decimal)
        pools: Current pool amounts (18-place decimals)
        precision: Common precision the result is expressed in
        config: Iteration cap and amp scaling

    Returns:
        New ask reserve in scale-0 units of ``precision``

    Raises:
        ConvergenceFailure: If y does not settle within the iteration cap
    """
    d = compute_d(amp, pools, precision, config).to_units(precision)
    x = new_amount.to_units(precision)
    ann = amp * N_COINS
    amp_precision = config.stable_amp_precision

    c = d * d / (x * N_COINS)
    c = c * d * amp_precision / (ann * N_COINS)
    b = x + d * amp_precision / ann

    y = d
    for iteration in range(1, config.max_iterations + 1):
        y_prev = y
        y = (y * y + c) / (y * N_COINS + b - d)
        if y.abs_diff(y_prev) <= 1:
            logger.debug(f"calc_y converged in {iteration} iterations: y={y}")
            return y

    logger.warning(
        f"calc_y did not converge in {config.max_iterations} iterations "
        f"(amp={amp}, new_amount={new_amount})"
    )
    raise ConvergenceFailure(
        f"Newton's method for y did not converge in {config.max_iterations} iterations",
        solver="calc_y",
        iterations=config.max_iterations,
        details={"amp": str(amp), "new_amount": str(new_amount)},
    )


def swap(
    offer_amount: FixedDecimal,
    offer_precision: int,
    ask_index: int,
    ask_precision: int,
    reserves: Sequence[FixedDecimal],
    fee_rate: FixedDecimal,
    block_time: int,
    amp_ramp: RampedParameter,
    config: EngineConfig = DEFAULT_CONFIG,
) -> SwapResult:
    """
    Simulate a swap against a stable pool.

    Args:
        offer_amount: Offered amount in raw units of the offer asset
        offer_precision: Decimal places of the offer asset
        ask_index: Index of the asked asset (0 or 1)
        ask_precision: Decimal places of the ask asset
        reserves: Raw reserves of asset 0 and asset 1
        fee_rate: Total fee rate in [0, 1)
        block_time: Unix timestamp the amp ramp is evaluated at
        amp_ramp: Amplification schedule (on-chain scaled values)
        config: Solver settings

    Returns:
        SwapResult in raw units of the ask asset

    Raises:
        InvalidInput: If any precondition fails
        InvalidPoolState: If the amp is not positive or the pool is inconsistent
        ConvergenceFailure: If a Newton loop exhausts its iteration cap
    """
    check_index(ask_index)
    check_precision(offer_precision, "offer_precision")
    check_precision(ask_precision, "ask_precision")
    if len(reserves) != 2:
        raise InvalidInput(
            f"Stable pools priced here hold two assets, got {len(reserves)} reserves",
            field="reserves",
        )
    if offer_amount <= 0:
        raise InvalidInput(
            f"offer_amount must be positive: {offer_amount}",
            field="offer_amount",
            value=str(offer_amount),
        )
    if fee_rate < 0 or fee_rate >= 1:
        raise InvalidInput(
            f"fee_rate must be in [0, 1): {fee_rate}",
            field="fee_rate",
            value=str(fee_rate),
        )
    if block_time < 0:
        raise InvalidInput(
            f"block_time must be non-negative: {block_time}", field="block_time"
        )

    offer = AssetAmount.from_raw(offer_amount, offer_precision)
    pool = PoolReserves(
        tuple(
            AssetAmount.from_raw(
                reserve, ask_precision if i == ask_index else offer_precision
            )
            for i, reserve in enumerate(reserves)
        )
    )
    if offer.is_zero():
        raise InvalidInput(
            f"offer_amount rounds to zero units: {offer_amount}",
            field="offer_amount",
            value=str(offer_amount),
        )
    if any(asset.is_zero() for asset in pool.assets):
        raise InvalidInput(
            f"Reserves must be positive: {[str(r) for r in reserves]}",
            field="reserves",
        )

    amp = compute_current_amp(amp_ramp, block_time)
    if amp <= 0:
        raise InvalidPoolState(f"Amplification must be positive: {amp}")

    precision = max(offer_precision, ask_precision)
    offer_side, ask_side = pool.offer_and_ask(ask_index)

    new_y = calc_y(
        amp, offer_side.amount + offer.amount, pool.amounts(), precision, config
    )
    new_ask_units = FixedDecimal.from_units(new_y, precision).to_units(ask_precision)
    ask_units = ask_side.amount.to_units(ask_precision)
    if new_ask_units > ask_units:
        raise InvalidPoolState(
            f"Solved ask reserve {new_ask_units} exceeds current reserve {ask_units}"
        )

    return_before_fee = ask_units - new_ask_units

    # Stable assets are priced 1:1, so any shortfall versus the offer is spread
    offer_in_ask_units = offer.amount.to_units(ask_precision)
    spread_amount = offer_in_ask_units.saturating_sub(return_before_fee)

    fee_rate = fee_rate.truncate(DECIMAL_PLACES)
    commission_amount = (return_before_fee * fee_rate).truncate(0)
    return_amount = return_before_fee - commission_amount

    result = SwapResult(
        return_amount=int(return_amount),
        spread_amount=int(spread_amount),
        commission_amount=int(commission_amount),
        return_amount_before_fee=int(return_before_fee),
        fee_rate=fee_rate,
        curve="stable",
    )
    logger.debug(f"{result.format_log()} amp={amp} block_time={block_time}")
    return result
