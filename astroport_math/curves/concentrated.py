"""
Concentrated-liquidity (PCL) pool pricing.

Implements the CryptoSwap invariant for two coins over internal balances
``[x0, x1 * price_scale]``:

    K0 = 4 * x0 * x1 / D^2
    K = A * gamma^2 * K0 / (gamma + 1 - K0)^2
    F(x, D) = K * D * (x0 + x1) + x0 * x1 - K * D^2 - D^2 / 4 = 0

D and the post-trade ask balance are found by Newton's method on signed
18-place decimals; the fee is dynamic, moving from ``mid_fee`` on a balanced
pool to ``out_fee`` on an imbalanced one.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..config import DEFAULT_CONFIG, EngineConfig
from ..constants import DECIMAL_PLACES, PCL_PADDING
from ..decimal_core import ONE, ZERO, FixedDecimal
from ..exceptions import ConvergenceFailure, InvalidInput, InvalidPoolState
from ..ramp import RampedParameter, resolve
from ..types import (
    AssetAmount,
    ConcentratedFeeConfig,
    PoolReserves,
    SwapResult,
    check_index,
    check_precision,
)

logger = logging.getLogger(__name__)

N = FixedDecimal(2)
N_POW2 = FixedDecimal(4)
PADDING = FixedDecimal(PCL_PADDING)


@dataclass(frozen=True)
class ConcentratedSwap:
    """
    Unrounded outcome of a concentrated swap, in ask-asset decimals.

    Attributes:
        return_amount: Output after the fee
        return_amount_before_fee: Curve output before the fee
        spread_amount: Shortfall versus the oracle price
        total_fee: Fee deducted from the output
        maker_fee: Maker share of ``total_fee``
        fee_rate: Dynamic fee rate applied
    """

    return_amount: FixedDecimal
    return_amount_before_fee: FixedDecimal
    spread_amount: FixedDecimal
    total_fee: FixedDecimal
    maker_fee: FixedDecimal
    fee_rate: FixedDecimal


def geometric_mean(x: Sequence[FixedDecimal]) -> FixedDecimal:
    return (x[0] * x[1]).sqrt()


def f(d: FixedDecimal, x: Sequence[FixedDecimal], a: FixedDecimal, gamma: FixedDecimal) -> FixedDecimal:
    """Invariant residual F(x, D); zero on the curve."""
    mul = x[0] * x[1]
    d_pow2 = d**2

    k0 = mul * N_POW2 / d_pow2
    k = a * gamma**2 * k0 / (gamma + ONE - k0) ** 2

    return k * d * (x[0] + x[1]) + mul - k * d_pow2 - d_pow2 / N_POW2


def df_dd(d: FixedDecimal, x: Sequence[FixedDecimal], a: FixedDecimal, gamma: FixedDecimal) -> FixedDecimal:
    """Partial derivative of F with respect to D."""
    mul = x[0] * x[1]
    a_gamma_pow2 = a * gamma**2

    k0 = mul * N_POW2 / d**2
    gamma_one_k0 = gamma + ONE - k0
    gamma_one_k0_pow2 = gamma_one_k0**2
    k = a_gamma_pow2 * k0 / gamma_one_k0_pow2

    k_d_denom = PADDING * d**3 * gamma_one_k0_pow2 * gamma_one_k0
    k_d = -mul * N**3 * a_gamma_pow2 * (gamma + ONE + k0)
    # PADDING keeps k_d / k_d_denom from truncating to zero
    k_d_term = k_d * d * PADDING / k_d_denom

    return (k_d_term + k) * (x[0] + x[1]) - (k_d_term + N * k) * d - d / N


def df_dx(
    d: FixedDecimal,
    x: Sequence[FixedDecimal],
    a: FixedDecimal,
    gamma: FixedDecimal,
    i: int,
) -> FixedDecimal:
    """Partial derivative of F with respect to ``x[i]``."""
    x_r = x[1 - i]
    d_pow2 = d**2

    k0 = x[0] * x[1] * N_POW2 / d_pow2
    gamma_one_k0 = gamma + ONE - k0
    gamma_one_k0_pow2 = gamma_one_k0**2
    a_gamma_pow2 = a * gamma**2
    k = a_gamma_pow2 * k0 / gamma_one_k0_pow2

    k0_x = x_r * N_POW2
    k_x = (
        k0_x * a_gamma_pow2 * (gamma + ONE + k0) * PADDING
        / (PADDING * d_pow2 * gamma_one_k0 * gamma_one_k0_pow2)
    )

    return (k_x * (x[0] + x[1]) + k) * d + x_r - k_x * d_pow2


def newton_d(
    x: Sequence[FixedDecimal],
    a: FixedDecimal,
    gamma: FixedDecimal,
    config: EngineConfig = DEFAULT_CONFIG,
) -> FixedDecimal:
    """
    Solve the invariant D for internal balances ``x``.

    Starts from ``2 * sqrt(x0 * x1)`` and stops once a step moves D by at
    most ``config.pcl_tolerance``.

    Raises:
        ConvergenceFailure: If D does not settle within the iteration cap
        InvalidPoolState: If the solver settles on a negative D
    """
    tolerance = FixedDecimal(config.pcl_tolerance)
    d_prev = N * geometric_mean(x)

    for iteration in range(1, config.max_iterations + 1):
        d = d_prev - f(d_prev, x, a, gamma) / df_dd(d_prev, x, a, gamma)
        if d.abs_diff(d_prev) <= tolerance:
            if d < 0:
                raise InvalidPoolState(
                    f"Invariant solver settled on a negative D: {d}",
                    details={"x": [str(v) for v in x]},
                )
            logger.debug(f"newton_d converged in {iteration} iterations: D={d}")
            return d
        d_prev = d

    logger.warning(
        f"newton_d did not converge in {config.max_iterations} iterations "
        f"(x={[str(v) for v in x]}, A={a}, gamma={gamma})"
    )
    raise ConvergenceFailure(
        f"Newton's method for D did not converge in {config.max_iterations} iterations",
        solver="newton_d",
        iterations=config.max_iterations,
        details={"x": [str(v) for v in x], "amp": str(a), "gamma": str(gamma)},
    )


def newton_y(
    xs: Sequence[FixedDecimal],
    a: FixedDecimal,
    gamma: FixedDecimal,
    d: FixedDecimal,
    j: int,
    config: EngineConfig = DEFAULT_CONFIG,
) -> FixedDecimal:
    """
    Solve for the balance ``x[j]`` that keeps the invariant at ``d``.

    Starts from ``D^2 / (4 * x[1 - j])``, the constant-product guess.

    Raises:
        ConvergenceFailure: If ``x[j]`` does not settle within the iteration cap
        InvalidPoolState: If the solver settles on a negative balance
    """
    tolerance = FixedDecimal(config.pcl_tolerance)
    x: List[FixedDecimal] = list(xs)
    xi_1 = d**2 / (N_POW2 * x[1 - j])
    x[j] = xi_1

    for iteration in range(1, config.max_iterations + 1):
        xi = xi_1 - f(d, x, a, gamma) / df_dx(d, x, a, gamma, j)
        if xi.abs_diff(xi_1) <= tolerance:
            if xi < 0:
                raise InvalidPoolState(
                    f"Balance solver settled on a negative value: {xi}",
                    details={"d": str(d), "index": j},
                )
            logger.debug(f"newton_y converged in {iteration} iterations: x[{j}]={xi}")
            return xi
        x[j] = xi
        xi_1 = xi

    logger.warning(
        f"newton_y did not converge in {config.max_iterations} iterations "
        f"(D={d}, index={j})"
    )
    raise ConvergenceFailure(
        f"Newton's method for y did not converge in {config.max_iterations} iterations",
        solver="newton_y",
        iterations=config.max_iterations,
        details={"d": str(d), "index": j, "amp": str(a), "gamma": str(gamma)},
    )


def dynamic_fee(
    xp: Sequence[FixedDecimal],
    fee_config: ConcentratedFeeConfig,
    config: EngineConfig = DEFAULT_CONFIG,
) -> FixedDecimal:
    """
    Fee rate for internal balances ``xp``.

    Formula:
        K = 4 * x0 * x1 / (x0 + x1)^2
        k = fee_gamma / (fee_gamma + 1 - K)
        fee = k * mid_fee + (1 - k) * out_fee
    """
    sum_x = xp[0] + xp[1]
    k = xp[0] * xp[1] * N_POW2 / sum_x**2
    k = fee_config.fee_gamma / (fee_config.fee_gamma + ONE - k)

    if k <= FixedDecimal(config.pcl_fee_tolerance):
        k = ZERO

    return k * fee_config.mid_fee + (ONE - k) * fee_config.out_fee


def compute_swap(
    xs: Sequence[FixedDecimal],
    offer_amount: FixedDecimal,
    ask_index: int,
    fee_config: ConcentratedFeeConfig,
    price_scale: FixedDecimal,
    amp: FixedDecimal,
    gamma: FixedDecimal,
    oracle_price: Optional[FixedDecimal] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> ConcentratedSwap:
    """
    Price a swap on decimal pool balances.

    Args:
        xs: Pool balances of asset 0 and asset 1 (decimal units)
        offer_amount: Offered amount (decimal units)
        ask_index: Index of the asked asset (0 or 1)
        fee_config: Dynamic fee parameters
        price_scale: Internal price of asset 1 in terms of asset 0
        amp: Resolved amplification
        gamma: Resolved gamma
        oracle_price: Reference price for the spread; defaults to price_scale
        config: Solver settings

    Returns:
        ConcentratedSwap with unrounded decimal amounts
    """
    offer_index = 1 - ask_index
    if oracle_price is None:
        oracle_price = price_scale

    ixs = [xs[0], xs[1] * price_scale]
    d = newton_d(ixs, amp, gamma, config)

    if offer_index == 1:
        ixs[1] = ixs[1] + offer_amount * price_scale
    else:
        ixs[0] = ixs[0] + offer_amount

    new_y = newton_y(ixs, amp, gamma, d, ask_index, config)
    if new_y > ixs[ask_index]:
        raise InvalidPoolState(
            f"Solved ask balance {new_y} exceeds current balance {ixs[ask_index]}",
            details={"d": str(d), "ask_index": ask_index},
        )
    dy = ixs[ask_index] - new_y
    ixs[ask_index] = new_y

    if ask_index == 1:
        dy = dy / price_scale
        spread_amount = (offer_amount / oracle_price).saturating_sub(dy)
    else:
        spread_amount = offer_amount.saturating_sub(dy / oracle_price)

    fee_rate = min(dynamic_fee(ixs, fee_config, config), fee_config.total_fee_rate)
    total_fee = fee_rate * dy
    maker_fee = total_fee * fee_config.maker_fee_share

    return ConcentratedSwap(
        return_amount=dy - total_fee,
        return_amount_before_fee=dy,
        spread_amount=spread_amount,
        total_fee=total_fee,
        maker_fee=maker_fee,
        fee_rate=fee_rate,
    )


def swap(
    offer_amount: FixedDecimal,
    offer_precision: int,
    ask_index: int,
    ask_precision: int,
    reserves: Sequence[FixedDecimal],
    fee_config: ConcentratedFeeConfig,
    price_scale: FixedDecimal,
    block_time: int,
    amp_ramp: RampedParameter,
    gamma_ramp: RampedParameter,
    oracle_price: Optional[FixedDecimal] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> SwapResult:
    """
    Simulate a swap against a concentrated pool.

    Args:
        offer_amount: Offered amount in raw units of the offer asset
        offer_precision: Decimal places of the offer asset
        ask_index: Index of the asked asset (0 or 1)
        ask_precision: Decimal places of the ask asset
        reserves: Raw reserves of asset 0 and asset 1
        fee_config: Dynamic fee parameters
        price_scale: Internal price of asset 1 in terms of asset 0
        block_time: Unix timestamp the ramps are evaluated at
        amp_ramp: Amplification schedule
        gamma_ramp: Gamma schedule
        oracle_price: Reference price for the spread; defaults to price_scale
        config: Solver settings

    Returns:
        SwapResult in raw units of the ask asset

    Raises:
        InvalidInput: If any precondition fails
        InvalidPoolState: If price scale, amp or gamma is not positive
        ConvergenceFailure: If a Newton loop exhausts its iteration cap
    """
    check_index(ask_index)
    check_precision(offer_precision, "offer_precision")
    check_precision(ask_precision, "ask_precision")
    if len(reserves) != 2:
        raise InvalidInput(
            f"Concentrated pools hold two assets, got {len(reserves)} reserves",
            field="reserves",
        )
    if offer_amount <= 0:
        raise InvalidInput(
            f"offer_amount must be positive: {offer_amount}",
            field="offer_amount",
            value=str(offer_amount),
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

    price_scale = price_scale.truncate(DECIMAL_PLACES)
    amp = resolve(amp_ramp, block_time).truncate(DECIMAL_PLACES)
    gamma = resolve(gamma_ramp, block_time).truncate(DECIMAL_PLACES)
    if price_scale <= 0:
        raise InvalidPoolState(f"price_scale must be positive: {price_scale}")
    if amp <= 0:
        raise InvalidPoolState(f"Amplification must be positive: {amp}")
    if gamma <= 0:
        raise InvalidPoolState(f"Gamma must be positive: {gamma}")
    if oracle_price is not None:
        oracle_price = oracle_price.truncate(DECIMAL_PLACES)
        if oracle_price <= 0:
            raise InvalidPoolState(f"oracle_price must be positive: {oracle_price}")

    outcome = compute_swap(
        pool.amounts(),
        offer.amount,
        ask_index,
        fee_config,
        price_scale,
        amp,
        gamma,
        oracle_price,
        config,
    )

    def ask_raw(amount: FixedDecimal) -> int:
        return AssetAmount(amount, ask_precision).to_raw()

    result = SwapResult(
        return_amount=ask_raw(outcome.return_amount),
        spread_amount=ask_raw(outcome.spread_amount),
        commission_amount=ask_raw(outcome.total_fee),
        return_amount_before_fee=ask_raw(outcome.return_amount_before_fee),
        fee_rate=outcome.fee_rate,
        maker_fee=ask_raw(outcome.maker_fee),
        curve="concentrated",
    )
    logger.debug(
        f"{result.format_log()} price_scale={price_scale} A={amp} gamma={gamma} "
        f"block_time={block_time}"
    )
    return result
