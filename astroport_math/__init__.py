"""
Astroport pool pricing engine.

Deterministic off-chain reproduction of the swap math of Astroport xyk,
StableSwap and concentrated-liquidity (PCL) pools, matching the contracts'
fixed-point rounding unit for unit.
"""

PROJECT_NAME = "astroport-math"

from astroport_math.version import __version__

VERSION = __version__

# Export main components for easier imports
from astroport_math.config import DEFAULT_CONFIG, EngineConfig, load_config
from astroport_math.decimal_core import FixedDecimal, parse_decimal
from astroport_math.exceptions import (
    AstroportMathError,
    ConfigurationError,
    ConvergenceFailure,
    DivisionByZero,
    InvalidInput,
    InvalidNumericLiteral,
    InvalidPoolState,
    InvalidRampConfig,
)
from astroport_math.ramp import RampedParameter, resolve
from astroport_math.swap import concentrated_swap, stable_swap, xyk_swap
from astroport_math.types import (
    AssetAmount,
    ConcentratedFeeConfig,
    PoolReserves,
    SwapResult,
)

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "xyk_swap",
    "stable_swap",
    "concentrated_swap",
    "FixedDecimal",
    "parse_decimal",
    "RampedParameter",
    "resolve",
    "AssetAmount",
    "PoolReserves",
    "ConcentratedFeeConfig",
    "SwapResult",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "AstroportMathError",
    "InvalidInput",
    "InvalidNumericLiteral",
    "DivisionByZero",
    "InvalidRampConfig",
    "InvalidPoolState",
    "ConvergenceFailure",
    "ConfigurationError",
]
