"""
Comptoir Command Layer — Rejection Reasons
============================================
Why a command was refused. A reason is not an event by itself: it is
embedded in the payload of the `<base>.rejected.v1` event that the
service appends, next to the original request.

Codes are stable strings; messages are for people.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RejectionReason:
    """code (e.g. 'PARTNER_IN_USE'), message, and the policy that refused."""

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        for field_name in ("code", "message", "policy_name"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"{field_name} must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# REASON CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """Every code the commerce policies can produce."""

    # ── Command structure ─────────────────────────────────────
    UNKNOWN_COMMAND_TYPE = "UNKNOWN_COMMAND_TYPE"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"

    # ── Referential ───────────────────────────────────────────
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    PARTNER_NOT_FOUND = "PARTNER_NOT_FOUND"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    PARTNER_IN_USE = "PARTNER_IN_USE"
    PARENT_NODE_NOT_FOUND = "PARENT_NODE_NOT_FOUND"

    # ── Documents ─────────────────────────────────────────────
    CONVERSION_NOT_SUPPORTED = "CONVERSION_NOT_SUPPORTED"
    DOCUMENT_NOT_PAYABLE = "DOCUMENT_NOT_PAYABLE"
    DOCUMENT_PARTNER_MISMATCH = "DOCUMENT_PARTNER_MISMATCH"
    DOCUMENT_ALREADY_EXISTS = "DOCUMENT_ALREADY_EXISTS"

    # ── Payments ──────────────────────────────────────────────
    PAYMENT_NOT_A_CHECK = "PAYMENT_NOT_A_CHECK"
    PAYMENT_ALREADY_RECORDED = "PAYMENT_ALREADY_RECORDED"
    EXPENSE_ALREADY_RECORDED = "EXPENSE_ALREADY_RECORDED"

    # ── Cash register ─────────────────────────────────────────
    CASH_SESSION_ALREADY_OPEN = "CASH_SESSION_ALREADY_OPEN"
    CASH_SESSION_NOT_FOUND = "CASH_SESSION_NOT_FOUND"
    CASH_SESSION_NOT_OPEN = "CASH_SESSION_NOT_OPEN"

    # ── Inventory ─────────────────────────────────────────────
    INVENTORY_COUNT_VALIDATED = "INVENTORY_COUNT_VALIDATED"
