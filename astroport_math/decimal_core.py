"""
Fixed-scale decimal arithmetic for the curve implementations.

All pool math goes through FixedDecimal so that rounding matches the integer
fixed-point arithmetic of the on-chain contracts.

Conversion policy:
- Input: decimal text is parsed exactly (parse_decimal); binary floats are
  rejected outright
- Internal: values are truncated toward zero to their scale after every
  mul/div/pow/sqrt; add/sub are exact
- Scale: a binary operation yields the larger of the two operand scales;
  plain ints count as scale 0, so scale-0 values behave like on-chain
  unsigned integers
"""

import decimal
from decimal import ROUND_DOWN, Decimal
from functools import lru_cache, total_ordering
from math import isqrt
from typing import Any, Union

from .constants import DECIMAL_PLACES
from .exceptions import DivisionByZero, InvalidInput, InvalidNumericLiteral

# Wide enough that every intermediate product is exact before truncation
_CONTEXT = decimal.Context(
    prec=256,
    rounding=ROUND_DOWN,
    Emax=decimal.MAX_EMAX,
    Emin=decimal.MIN_EMIN,
    traps=[decimal.InvalidOperation, decimal.Overflow, decimal.DivisionByZero],
)

Numeric = Union["FixedDecimal", int, Decimal]


@lru_cache(maxsize=None)
def _quantum(scale: int) -> Decimal:
    return Decimal(1).scaleb(-scale)


def _truncate(value: Decimal, scale: int) -> Decimal:
    return value.quantize(_quantum(scale), rounding=ROUND_DOWN, context=_CONTEXT)


# ============================================================================
# Parsing
# ============================================================================


def parse_decimal(literal: Any, field: str = "value") -> Decimal:
    """
    Parse caller-supplied decimal text without losing precision.

    Args:
        literal: Decimal string (ints and Decimals are accepted as-is)
        field: Argument name used in the error message

    Returns:
        Exact Decimal value

    Raises:
        InvalidNumericLiteral: If the literal is not a finite decimal number
            or is a binary float
    """
    if isinstance(literal, bool) or isinstance(literal, float):
        raise InvalidNumericLiteral(
            f"Invalid {field}: expected decimal text, got {type(literal).__name__}",
            literal=literal,
        )

    if isinstance(literal, int):
        return Decimal(literal)

    if isinstance(literal, Decimal):
        value = literal
    elif isinstance(literal, str):
        try:
            value = Decimal(literal.strip())
        except decimal.InvalidOperation as e:
            raise InvalidNumericLiteral(
                f"Invalid {field}: {literal!r} is not a decimal number",
                literal=literal,
            ) from e
    else:
        raise InvalidNumericLiteral(
            f"Invalid {field}: expected decimal text, got {type(literal).__name__}",
            literal=literal,
        )

    if not value.is_finite():
        raise InvalidNumericLiteral(
            f"Invalid {field}: {literal!r} is not a finite number", literal=literal
        )
    return value


def parse_integer(literal: Any, field: str = "value") -> int:
    """Parse an integer literal; fractional values are rejected."""
    value = parse_decimal(literal, field)
    if value != value.to_integral_value(rounding=ROUND_DOWN):
        raise InvalidInput(
            f"{field} must be an integer, got {literal!r}", field=field, value=literal
        )
    return int(value)


# ============================================================================
# FixedDecimal
# ============================================================================


@total_ordering
class FixedDecimal:
    """
    Immutable signed decimal with an explicit scale.

    Rounding is always truncation toward zero, which for non-negative values
    is the floor used by on-chain integer division.
    """

    __slots__ = ("_value", "_scale")

    def __init__(self, value: Any = 0, scale: int = DECIMAL_PLACES):
        if scale < 0:
            raise InvalidInput(f"scale must be non-negative: {scale}", field="scale")
        if isinstance(value, FixedDecimal):
            raw = value._value
        else:
            raw = parse_decimal(value)
        object.__setattr__(self, "_value", _truncate(raw, scale))
        object.__setattr__(self, "_scale", scale)

    def __setattr__(self, name, value):
        raise AttributeError("FixedDecimal is immutable")

    @classmethod
    def from_units(
        cls, units: Numeric, precision: int, scale: int = DECIMAL_PLACES
    ) -> "FixedDecimal":
        """Build a value from integer units at the given precision (raw / 10**precision)."""
        raw = _coerce(units).value
        return cls(raw.scaleb(-precision, context=_CONTEXT), scale)

    @property
    def value(self) -> Decimal:
        return self._value

    @property
    def scale(self) -> int:
        return self._scale

    def is_zero(self) -> bool:
        return self._value == 0

    def truncate(self, scale: int) -> "FixedDecimal":
        """Return this value at another scale, truncating extra digits."""
        return FixedDecimal(self._value, scale)

    def to_units(self, precision: int) -> "FixedDecimal":
        """Shift by ``precision`` places into scale-0 integer units (truncating)."""
        return FixedDecimal(self._value.scaleb(precision, context=_CONTEXT), 0)

    def to_int(self, precision: int = 0) -> int:
        """Integer units at ``precision``, e.g. raw on-chain amounts."""
        return int(self.to_units(precision)._value)

    def abs_diff(self, other: Numeric) -> "FixedDecimal":
        return abs(self - other)

    def saturating_sub(self, other: Numeric) -> "FixedDecimal":
        """Subtract, flooring the result at zero."""
        result = self - other
        if result._value < 0:
            return FixedDecimal(0, result._scale)
        return result

    def sqrt(self) -> "FixedDecimal":
        """Floor of the square root at this value's scale."""
        if self._value < 0:
            raise InvalidInput(f"Cannot take the square root of {self}")
        units = int(self._value.scaleb(self._scale, context=_CONTEXT))
        root = isqrt(units * 10**self._scale)
        return FixedDecimal.from_units(root, self._scale, self._scale)

    # Arithmetic ------------------------------------------------------------

    def __add__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        scale = max(self._scale, other._scale)
        return FixedDecimal(_CONTEXT.add(self._value, other._value), scale)

    __radd__ = __add__

    def __sub__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        scale = max(self._scale, other._scale)
        return FixedDecimal(_CONTEXT.subtract(self._value, other._value), scale)

    def __rsub__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return other - self

    def __mul__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        scale = max(self._scale, other._scale)
        return FixedDecimal(_CONTEXT.multiply(self._value, other._value), scale)

    __rmul__ = __mul__

    def __truediv__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        if other._value == 0:
            raise DivisionByZero(f"Division of {self} by zero")
        scale = max(self._scale, other._scale)
        return FixedDecimal(_CONTEXT.divide(self._value, other._value), scale)

    def __rtruediv__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return other / self

    def __pow__(self, exponent):
        if isinstance(exponent, bool) or not isinstance(exponent, int):
            return NotImplemented
        if exponent < 0:
            raise InvalidInput(f"Negative exponent not supported: {exponent}")
        one = FixedDecimal(1, self._scale)
        if exponent == 0:
            return one

        # Square-and-multiply, truncating after every product
        x, y, n = self, one, exponent
        while n > 1:
            if n % 2 == 0:
                x = x * x
                n //= 2
            else:
                y = x * y
                x = x * x
                n = (n - 1) // 2
        return x * y

    def __neg__(self):
        return FixedDecimal(-self._value, self._scale)

    def __abs__(self):
        return FixedDecimal(abs(self._value), self._scale)

    # Comparison ------------------------------------------------------------

    def __eq__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return False
        return self._value == other._value

    def __lt__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return self._value < other._value

    def __hash__(self):
        return hash(self._value)

    def __bool__(self):
        return self._value != 0

    # Conversion ------------------------------------------------------------

    def __int__(self):
        return int(self._value)

    def __str__(self):
        return format(self._value, "f")

    def __repr__(self):
        return f"FixedDecimal('{self}', scale={self._scale})"


def _coerce(other: Any) -> Any:
    if isinstance(other, FixedDecimal):
        return other
    if isinstance(other, bool):
        return NotImplemented
    if isinstance(other, int):
        return FixedDecimal(other, 0)
    if isinstance(other, Decimal):
        return FixedDecimal(other, DECIMAL_PLACES)
    return NotImplemented


def to_fixed(literal: Any, field: str = "value", scale: int = DECIMAL_PLACES) -> FixedDecimal:
    """Parse decimal text straight into a FixedDecimal at ``scale``."""
    return FixedDecimal(parse_decimal(literal, field), scale)


ZERO = FixedDecimal(0)
ONE = FixedDecimal(1)
