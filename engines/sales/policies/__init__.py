"""
Comptoir Sales Engine — Policies
==================================
Document and payment rules checked before a command reaches the
reducer. Each policy reads the command payload and uses injected
lookups; none of them mutate anything.
"""

from __future__ import annotations

from typing import Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.document import DocumentType
from engines.sales.lifecycle import ALLOWED_CONVERSIONS, can_convert


def document_must_exist_policy(
    command: Command,
    document_lookup,
    key: str = "document_id",
) -> Optional[RejectionReason]:
    document_id = command.payload.get(key)
    if document_lookup(document_id) is None:
        return RejectionReason(
            code=ReasonCode.DOCUMENT_NOT_FOUND,
            message=f"Document '{document_id}' not found.",
            policy_name="document_must_exist_policy",
        )
    return None


def document_must_not_exist_policy(
    command: Command,
    document_lookup,
    key: str = "document_id",
) -> Optional[RejectionReason]:
    """A converted document takes a fresh id; an existing one is never overwritten."""
    document_id = command.payload.get(key)
    existing = document_lookup(document_id)
    if existing is not None:
        return RejectionReason(
            code=ReasonCode.DOCUMENT_ALREADY_EXISTS,
            message=(
                f"Document id '{document_id}' is already used by "
                f"{existing.document_type.value} '{existing.reference}'."
            ),
            policy_name="document_must_not_exist_policy",
        )
    return None


def conversion_supported_policy(
    command: Command,
    document_lookup,
) -> Optional[RejectionReason]:
    source = document_lookup(command.payload.get("source_document_id"))
    if source is None:
        return None
    target_type = DocumentType(command.payload["target_type"])
    if not can_convert(source.document_type, target_type):
        allowed = sorted(
            t.value for t in ALLOWED_CONVERSIONS.get(source.document_type, ())
        )
        return RejectionReason(
            code=ReasonCode.CONVERSION_NOT_SUPPORTED,
            message=(
                f"Cannot convert {source.document_type.value} into "
                f"{target_type.value}. Allowed targets: {allowed or 'none'}."
            ),
            policy_name="conversion_supported_policy",
        )
    return None


def payment_document_must_match_policy(
    command: Command,
    document_lookup,
) -> Optional[RejectionReason]:
    """A payment may only settle a payable document of its own partner."""
    payment = command.payload["payment"]
    document_id = payment.get("document_id")
    if not document_id:
        return None

    document = document_lookup(document_id)
    if document is None:
        return RejectionReason(
            code=ReasonCode.DOCUMENT_NOT_FOUND,
            message=f"Document '{document_id}' not found.",
            policy_name="payment_document_must_match_policy",
        )
    if not document.is_payable:
        return RejectionReason(
            code=ReasonCode.DOCUMENT_NOT_PAYABLE,
            message=(
                f"{document.document_type.value} '{document.reference}' "
                f"cannot receive payments."
            ),
            policy_name="payment_document_must_match_policy",
        )
    if document.partner_id != payment["partner_id"]:
        return RejectionReason(
            code=ReasonCode.DOCUMENT_PARTNER_MISMATCH,
            message=(
                f"Document '{document.reference}' belongs to partner "
                f"'{document.partner_id}', not '{payment['partner_id']}'."
            ),
            policy_name="payment_document_must_match_policy",
        )
    return None


def payment_must_be_check_policy(
    command: Command,
    payment_lookup,
) -> Optional[RejectionReason]:
    """Only checks carry a PENDING / CLEARED / REJECTED status."""
    payment_id = command.payload.get("payment_id")
    payment = payment_lookup(payment_id)
    if payment is None:
        return RejectionReason(
            code=ReasonCode.PAYMENT_NOT_FOUND,
            message=f"Payment '{payment_id}' not found.",
            policy_name="payment_must_be_check_policy",
        )
    if not payment.is_check:
        return RejectionReason(
            code=ReasonCode.PAYMENT_NOT_A_CHECK,
            message=(
                f"Payment '{payment_id}' is a {payment.method.value} payment; "
                f"only checks have a clearing status."
            ),
            policy_name="payment_must_be_check_policy",
        )
    return None
