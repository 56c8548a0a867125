"""Reconciliation - local allocations vs. ERP quantities."""

from reconciliation.engine import (
    AllocationStatus,
    ItemReconciliation,
    AllocationReconciliationReport,
    reconcile_item,
    reconcile_allocations,
)

__all__ = [
    "AllocationStatus",
    "ItemReconciliation",
    "AllocationReconciliationReport",
    "reconcile_item",
    "reconcile_allocations",
]
