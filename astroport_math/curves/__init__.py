"""
Curve implementations: one module per Astroport pool family.

Each module exposes ``swap(...) -> SwapResult`` working on parsed
FixedDecimal inputs; string parsing lives in ``astroport_math.swap``.
"""

from . import concentrated, stable, xyk

__all__ = ["xyk", "stable", "concentrated"]
