"""
Comptoir Core Config — Engine Settings
========================================
Tunable constants of the ledger engine. Defaults match the
application's historical behaviour; every value can be overridden
from the environment (COMPTOIR_* variables) at service start.

    COMPTOIR_CURRENCY            ISO 4217 code            (EUR)
    COMPTOIR_PAYMENT_TOLERANCE   auto-PAID tolerance      (0.01)
    COMPTOIR_DRAFT_REFERENCE     converted-doc reference  (DRAFT)
    COMPTOIR_DEFAULT_TAX_RATE    fallback line tax rate   (20.0)
    COMPTOIR_ALERT_LIMIT         dashboard list length    (5)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class EngineSettings:
    currency: str = "EUR"
    payment_tolerance: float = 0.01
    draft_reference: str = "DRAFT"
    default_tax_rate: float = 20.0
    alert_limit: int = 5

    def __post_init__(self) -> None:
        if not self.currency or len(self.currency) != 3:
            raise ValueError("currency must be 3-letter ISO 4217 code.")
        if self.payment_tolerance < 0:
            raise ValueError("payment_tolerance cannot be negative.")
        if not self.draft_reference:
            raise ValueError("draft_reference must be non-empty.")
        if self.default_tax_rate < 0:
            raise ValueError("default_tax_rate cannot be negative.")
        if self.alert_limit < 1:
            raise ValueError("alert_limit must be >= 1.")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            currency=env.get("COMPTOIR_CURRENCY", defaults.currency),
            payment_tolerance=float(
                env.get("COMPTOIR_PAYMENT_TOLERANCE", defaults.payment_tolerance)
            ),
            draft_reference=env.get(
                "COMPTOIR_DRAFT_REFERENCE", defaults.draft_reference
            ),
            default_tax_rate=float(
                env.get("COMPTOIR_DEFAULT_TAX_RATE", defaults.default_tax_rate)
            ),
            alert_limit=int(env.get("COMPTOIR_ALERT_LIMIT", defaults.alert_limit)),
        )


DEFAULT_SETTINGS = EngineSettings()
