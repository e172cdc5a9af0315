"""
Comptoir Core Primitives — Commercial Building Blocks
=======================================================
Primitives are the shared, engine-agnostic records and pure
functions every engine consumes. They are:

- Pure Python (no I/O)
- Immutable (frozen dataclasses validated at construction)
- Deterministic (same input → same output)

Primitives:
    pricing    — HT/TTC line arithmetic and money rounding
    document   — Documents, line items and document totals
    ledger     — Debit/credit and incoming/outgoing flow classification
    party      — Partners (clients, suppliers) and company profile
    payment    — Payments and expenses
    cash       — Cash drawer sessions
    item       — Products and the family/category/subcategory taxonomy
    inventory  — Stock journal and inventory counts
    actor      — Application users
"""
