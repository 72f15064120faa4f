# backend/carteira/services/constants.py
"""
Centralized constants for the valuation services.

Single source of truth for rounding rules, display labels and date formats
so every ratio in the engine is computed the same way.

Usage:
    from carteira.services.constants import RATIO_QUANTUM, HUNDRED
"""

from decimal import Decimal, ROUND_HALF_UP

from carteira.models import AssetType


# =============================================================================
# ROUNDING
# =============================================================================

# Every ratio (average price, profitability, allocation shares) is rounded
# to 4 fractional digits, half-up, before being scaled to a percentage.
RATIO_QUANTUM: Decimal = Decimal("0.0001")
RATIO_ROUNDING: str = ROUND_HALF_UP

HUNDRED: Decimal = Decimal("100")
ZERO: Decimal = Decimal("0")


# =============================================================================
# PRICE LOOKUP
# =============================================================================

# Days to look back when the target date has no close (weekends, holidays)
PRICE_FALLBACK_DAYS: int = 5


# =============================================================================
# EVOLUTION SERIES
# =============================================================================

# Period label on each evolution point, e.g. "09/25"
PERIOD_LABEL_FORMAT: str = "%m/%y"


# =============================================================================
# DISPLAY LABELS
# =============================================================================

# Sub-category labels for the "Meus Ativos" hierarchy.
# Asset types missing here are shown by their raw enum name.
ASSET_TYPE_LABELS: dict[AssetType, str] = {
    AssetType.STOCK: "Ações",
    AssetType.ETF: "ETFs",
    AssetType.CRYPTO: "Criptomoedas",
    AssetType.FIXED_INCOME: "Renda Fixa",
}
