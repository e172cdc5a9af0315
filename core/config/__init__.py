"""
Comptoir Core Config — Public API
===================================
Engine settings and tax rate reference data.
"""

from core.config.rules import (
    DEFAULT_TAX_RATES,
    TaxRate,
    find_tax_rate,
    resolve_product_tax_rate,
)
from core.config.settings import (
    DEFAULT_SETTINGS,
    EngineSettings,
)

__all__ = [
    "TaxRate",
    "DEFAULT_TAX_RATES",
    "find_tax_rate",
    "resolve_product_tax_rate",
    "EngineSettings",
    "DEFAULT_SETTINGS",
]
