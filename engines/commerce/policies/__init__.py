"""
Comptoir Commerce Engine — Policies
=====================================
Referential rules over the ledger state: partners still in use,
taxonomy parents, validated inventory counts, and record ids that
must not be reused.
"""

from __future__ import annotations

from typing import Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.item import PARENT_LEVEL, TaxonomyLevel


def partner_must_not_be_referenced_policy(
    command: Command,
    reference_count_lookup,
) -> Optional[RejectionReason]:
    partner_id = command.payload.get("partner_id", "")
    references = reference_count_lookup(partner_id)
    if references:
        return RejectionReason(
            code=ReasonCode.PARTNER_IN_USE,
            message=(
                f"Partner '{partner_id}' is still referenced by "
                f"{references} document(s)/payment(s)."
            ),
            policy_name="partner_must_not_be_referenced_policy",
        )
    return None


def taxonomy_parent_must_exist_policy(
    command: Command,
    node_lookup,
) -> Optional[RejectionReason]:
    node = command.payload["node"]
    level = TaxonomyLevel(node["level"])
    parent_level = PARENT_LEVEL[level]
    if parent_level is None:
        return None
    parent = node_lookup(node.get("parent_id"))
    if parent is None or parent.level != parent_level:
        return RejectionReason(
            code=ReasonCode.PARENT_NODE_NOT_FOUND,
            message=(
                f"{level.value.lower()} '{node['name']}' needs an existing "
                f"{parent_level.value.lower()} as parent."
            ),
            policy_name="taxonomy_parent_must_exist_policy",
        )
    return None


def inventory_count_must_be_open_policy(
    command: Command,
    count_lookup,
) -> Optional[RejectionReason]:
    count_id = command.payload["count"]["count_id"]
    existing = count_lookup(count_id)
    if existing is not None and existing.is_validated:
        return RejectionReason(
            code=ReasonCode.INVENTORY_COUNT_VALIDATED,
            message=f"Inventory count '{count_id}' is already validated.",
            policy_name="inventory_count_must_be_open_policy",
        )
    return None


def payment_must_be_new_policy(
    command: Command,
    payment_lookup,
) -> Optional[RejectionReason]:
    """
    Payments are recorded once. Re-recording an id would count the
    amount into the cash drawer twice.
    """
    payment_id = command.payload["payment"]["payment_id"]
    if payment_lookup(payment_id) is not None:
        return RejectionReason(
            code=ReasonCode.PAYMENT_ALREADY_RECORDED,
            message=f"Payment '{payment_id}' is already recorded.",
            policy_name="payment_must_be_new_policy",
        )
    return None


def expense_must_be_new_policy(
    command: Command,
    expense_lookup,
) -> Optional[RejectionReason]:
    expense_id = command.payload["expense"]["expense_id"]
    if expense_lookup(expense_id) is not None:
        return RejectionReason(
            code=ReasonCode.EXPENSE_ALREADY_RECORDED,
            message=f"Expense '{expense_id}' is already recorded.",
            policy_name="expense_must_be_new_policy",
        )
    return None
