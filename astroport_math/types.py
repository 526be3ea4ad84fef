"""
Core data types for pool pricing.
"""

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Tuple

from .constants import MAX_ASSET_PRECISION
from .decimal_core import FixedDecimal
from .exceptions import InvalidInput

CurveKind = Literal["xyk", "stable", "concentrated"]


def check_precision(precision: int, field_name: str = "precision") -> int:
    """Validate an on-chain asset precision (number of decimal places)."""
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise InvalidInput(
            f"{field_name} must be an integer, got {precision!r}",
            field=field_name,
            value=precision,
        )
    if not 0 <= precision <= MAX_ASSET_PRECISION:
        raise InvalidInput(
            f"{field_name} must be in [0, {MAX_ASSET_PRECISION}]: {precision}",
            field=field_name,
            value=precision,
        )
    return precision


def check_index(index: int, field_name: str = "ask_index") -> int:
    """Validate a two-asset pool index."""
    if isinstance(index, bool) or not isinstance(index, int) or index not in (0, 1):
        raise InvalidInput(
            f"{field_name} must be 0 or 1, got {index!r}", field=field_name, value=index
        )
    return index


@dataclass(frozen=True)
class AssetAmount:
    """
    Non-negative amount of one pool asset.

    Attributes:
        amount: Human-readable amount (raw units shifted by ``precision``)
        precision: Number of on-chain decimal places of the asset
    """

    amount: FixedDecimal
    precision: int

    def __post_init__(self):
        check_precision(self.precision)
        if self.amount < 0:
            raise InvalidInput(f"Asset amount must be non-negative: {self.amount}")

    @classmethod
    def from_raw(cls, raw: FixedDecimal, precision: int) -> "AssetAmount":
        """
        Build from a raw on-chain integer amount.

        Fractional raw digits are dropped first, as the contract does when it
        reads a Decimal256 amount into integer units.
        """
        check_precision(precision)
        units = raw.truncate(0)
        return cls(FixedDecimal.from_units(units, precision), precision)

    def to_raw(self, precision: Optional[int] = None) -> int:
        """Raw integer units at ``precision`` (defaults to the asset's own)."""
        if precision is None:
            precision = self.precision
        return self.amount.to_int(precision)

    def is_zero(self) -> bool:
        return self.amount.is_zero()


@dataclass(frozen=True)
class PoolReserves:
    """Ordered reserves of a two-asset pool; index 0 and 1 are significant."""

    assets: Tuple[AssetAmount, AssetAmount]

    def __post_init__(self):
        if len(self.assets) != 2:
            raise InvalidInput(
                f"A pool holds exactly two assets, got {len(self.assets)}",
                field="reserves",
            )

    def __getitem__(self, index: int) -> AssetAmount:
        return self.assets[index]

    def __len__(self) -> int:
        return 2

    def amounts(self) -> Tuple[FixedDecimal, FixedDecimal]:
        return self.assets[0].amount, self.assets[1].amount

    def offer_and_ask(self, ask_index: int) -> Tuple[AssetAmount, AssetAmount]:
        """Return ``(offer_side, ask_side)`` for the given ask index."""
        check_index(ask_index)
        return self.assets[1 - ask_index], self.assets[ask_index]


@dataclass(frozen=True)
class ConcentratedFeeConfig:
    """
    Dynamic fee parameters of a concentrated pool.

    Attributes:
        mid_fee: Fee charged when the pool is balanced
        out_fee: Fee charged when the pool is fully imbalanced
        fee_gamma: Sharpness of the transition between mid and out fee
        total_fee_rate: Upper clamp on the applied fee rate
        maker_fee_share: Fraction of the collected fee attributed to the maker
    """

    mid_fee: FixedDecimal
    out_fee: FixedDecimal
    fee_gamma: FixedDecimal
    total_fee_rate: FixedDecimal = field(default_factory=lambda: FixedDecimal(1))
    maker_fee_share: FixedDecimal = field(default_factory=lambda: FixedDecimal(0))

    def __post_init__(self):
        for name in ("mid_fee", "out_fee"):
            value = getattr(self, name)
            if not 0 <= value < 1:
                raise InvalidInput(
                    f"{name} must be in [0, 1): {value}", field=name, value=str(value)
                )
        if self.fee_gamma <= 0:
            raise InvalidInput(
                f"fee_gamma must be positive: {self.fee_gamma}",
                field="fee_gamma",
                value=str(self.fee_gamma),
            )
        if not 0 <= self.total_fee_rate <= 1:
            raise InvalidInput(
                f"total_fee_rate must be in [0, 1]: {self.total_fee_rate}",
                field="total_fee_rate",
                value=str(self.total_fee_rate),
            )
        if not 0 <= self.maker_fee_share <= 1:
            raise InvalidInput(
                f"maker_fee_share must be in [0, 1]: {self.maker_fee_share}",
                field="maker_fee_share",
                value=str(self.maker_fee_share),
            )


@dataclass(frozen=True)
class SwapResult:
    """
    Outcome of a simulated swap, in raw integer units of the ask asset.

    Attributes:
        return_amount: Amount the trader receives after fees
        spread_amount: Price impact versus the no-slippage rate
        commission_amount: Fee deducted from the pre-fee output
        return_amount_before_fee: Curve output before the fee
        fee_rate: Fee rate actually applied
        maker_fee: Maker share of the commission (concentrated pools)
        curve: Curve family that produced the result
    """

    return_amount: int
    spread_amount: int
    commission_amount: int
    return_amount_before_fee: int
    fee_rate: FixedDecimal
    maker_fee: int = 0
    curve: Optional[CurveKind] = None

    def to_dict(self) -> Dict[str, str]:
        """Public amounts as integer strings, the shape the contracts return."""
        return {
            "return_amount": str(self.return_amount),
            "spread_amount": str(self.spread_amount),
            "commission_amount": str(self.commission_amount),
        }

    def format_log(self) -> str:
        return (
            f"{self.curve or 'swap'}: return={self.return_amount} "
            f"spread={self.spread_amount} commission={self.commission_amount} "
            f"(fee {self.fee_rate})"
        )
