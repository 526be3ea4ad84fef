"""
Exception hierarchy for the Astroport pricing engine.

Every failure carries a ``kind`` naming its category and an optional
``details`` dict, so callers across a serialization boundary can turn any
error into a structured failure value with ``to_dict()``.
"""

from typing import Any, Dict, Optional


class AstroportMathError(Exception):
    """Base exception for all pricing engine errors."""

    kind = "AstroportMathError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Structured failure value: kind, message and details."""
        return {"kind": self.kind, "message": self.message, "details": self.details}


class InvalidInput(AstroportMathError):
    """Raised for malformed or out-of-range arguments."""

    kind = "InvalidInput"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidNumericLiteral(AstroportMathError):
    """Raised when a decimal string cannot be parsed."""

    kind = "InvalidNumericLiteral"

    def __init__(
        self,
        message: str,
        literal: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.literal = literal


class DivisionByZero(AstroportMathError):
    """Raised when a decimal division has a zero divisor."""

    kind = "DivisionByZero"


class InvalidRampConfig(AstroportMathError):
    """Raised when a ramp's time or value bounds are inconsistent."""

    kind = "InvalidRampConfig"


class InvalidPoolState(AstroportMathError):
    """Raised for structurally invalid pool parameters."""

    kind = "InvalidPoolState"


class ConvergenceFailure(AstroportMathError):
    """Raised when a Newton iteration exhausts its iteration cap."""

    kind = "ConvergenceFailure"

    def __init__(
        self,
        message: str,
        solver: Optional[str] = None,
        iterations: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.solver = solver
        self.iterations = iterations


class ConfigurationError(AstroportMathError):
    """Raised when engine configuration cannot be loaded or validated."""

    kind = "ConfigurationError"
