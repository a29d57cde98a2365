# income_engine/services/constants.py
"""
Centralized constants for the Portfolio Income Engine.

Single source of truth for the business constants used by the
calculators: thresholds, caps and the static sector table.

Usage:
    from income_engine.services.constants import (
        QUANTITY_EPSILON,
        DEFAULT_SECTOR,
        STATIC_SECTORS,
    )
"""

from decimal import Decimal


# =============================================================================
# POSITION THRESHOLDS
# =============================================================================

# Positions at or below this quantity are treated as fully exited.
# Applied to the displayed asset list and to dust left after a sell.
QUANTITY_EPSILON: Decimal = Decimal("0.000001")


# =============================================================================
# INCOME AGGREGATION
# =============================================================================

# Cap for the "average monthly" denominator of a payer, so a long payment
# history does not shrink the figure below a yearly average
MAX_AVERAGE_MONTHS: int = 12

# Default length of the rolling income view (overridable via settings)
DEFAULT_ROLLING_MONTHS: int = 12

MONTHS_PER_YEAR: int = 12


# =============================================================================
# SECTOR RESOLUTION
# =============================================================================

# Literal used when no sector can be resolved. Also treated as "unknown"
# when a provider sends it, so the static table gets a chance first.
DEFAULT_SECTOR: str = "Outros"

# Known real-estate fund (FII) segments, keyed by upper-cased ticker.
# Used when the market data provider does not supply a sector.
STATIC_SECTORS: dict[str, str] = {
    "MXRF11": "Papel",
    "KNCR11": "Papel",
    "KNIP11": "Papel",
    "CPTS11": "Papel",
    "IRDM11": "Papel",
    "RECR11": "Papel",
    "VGIR11": "Papel",
    "HGCR11": "Papel",
    "HGLG11": "Tijolo - Logística",
    "BTLG11": "Tijolo - Logística",
    "XPLG11": "Tijolo - Logística",
    "VILG11": "Tijolo - Logística",
    "LVBI11": "Tijolo - Logística",
    "VISC11": "Tijolo - Shoppings",
    "XPML11": "Tijolo - Shoppings",
    "HSML11": "Tijolo - Shoppings",
    "MALL11": "Tijolo - Shoppings",
    "HGBS11": "Tijolo - Shoppings",
    "KNRI11": "Tijolo - Híbrido",
    "HGRU11": "Tijolo - Híbrido",
    "ALZR11": "Tijolo - Híbrido",
    "JSRE11": "Tijolo - Lajes Corporativas",
    "PVBI11": "Tijolo - Lajes Corporativas",
    "HGRE11": "Tijolo - Lajes Corporativas",
    "RCRB11": "Tijolo - Lajes Corporativas",
    "BCFF11": "Fundo de Fundos (FOF)",
    "HFOF11": "Fundo de Fundos (FOF)",
    "RBRF11": "Fundo de Fundos (FOF)",
    "KFOF11": "Fundo de Fundos (FOF)",
    "RZAG11": "Agro (Fiagro)",
    "KNCA11": "Agro (Fiagro)",
    "VGIA11": "Agro (Fiagro)",
}
