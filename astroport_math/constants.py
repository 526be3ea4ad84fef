"""
Constants shared by the curve implementations.

Values mirror the on-chain Astroport contracts so that off-chain results
match them unit for unit.
"""

from decimal import Decimal

# Fixed-point width of cosmwasm Decimal256
DECIMAL_PLACES = 18

# Largest asset precision a Decimal256 can carry
MAX_ASSET_PRECISION = DECIMAL_PLACES

# Both pool families priced here are two-asset pools
N_COINS = 2

# Newton's method iteration cap (stable and concentrated)
MAX_ITERATIONS = 64

# ============================================================================
# StableSwap
# ============================================================================

# On-chain amp values are stored multiplied by this factor
AMP_PRECISION = 100

# ============================================================================
# Concentrated liquidity (PCL)
# ============================================================================

# Convergence tolerance of newton_d / newton_y (1e-5)
PCL_TOLERANCE = Decimal("0.00001")

# Fee imbalance coefficients at or below this are treated as zero (0.001)
PCL_FEE_TOLERANCE = Decimal("0.001")

# Padding factor used by the on-chain derivative to keep precision (1e18)
PCL_PADDING = Decimal("1000000000000000000")
