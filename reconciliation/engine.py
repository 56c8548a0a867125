"""Reconciliation of local allocations against ERP item quantities.

Exposes high-level function:
- reconcile_allocations(ledger, server_items) -> AllocationReconciliationReport

The ERP is the source of truth for how many units of an item exist; the
ledger only records where they are. An item whose allocated total differs
from the server quantity is flagged for display. Nothing is written back to
the server or the ledger.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from connectors.rivhit.models import RivhitItem
from core.inventory.ledger import AllocationLedger
from core.inventory.models import clamp_quantity, normalize_id, to_number
from core.observability.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Configuration & Data Structures
# =============================================================================

QUANTITY_TOLERANCE = Decimal("0.0001")


class AllocationStatus(str, Enum):
    """Per-item reconciliation outcome."""
    MATCHED = "matched"
    VARIANCE = "variance"
    UNALLOCATED = "unallocated"


class CheckStatus(str, Enum):
    PASS = "PASS"
    WARN = "WARN"


class ItemReconciliation(BaseModel):
    """Allocated vs. server quantity for one item."""
    item_id: str
    item_name: str = ""
    server_quantity: float
    allocated_quantity: float
    variance: float = Field(..., description="allocated - server")
    status: AllocationStatus
    allocations: dict = Field(default_factory=dict, description="storage_id -> quantity")


class AllocationReconciliationReport(BaseModel):
    """Reconciliation of every server item against the ledger."""
    status: CheckStatus
    items: List[ItemReconciliation] = Field(default_factory=list)
    unknown_item_ids: List[str] = Field(
        default_factory=list,
        description="Items allocated locally but absent from the server list",
    )
    summary: dict = Field(default_factory=dict)


# =============================================================================
# Utility Functions
# =============================================================================

def to_decimal(value) -> Decimal:
    """Convert an allocated quantity to Decimal (0 for unusable values)."""
    return Decimal(str(clamp_quantity(value)))


def server_decimal(value) -> Decimal:
    """Convert an ERP quantity to Decimal, keeping its sign."""
    return Decimal(str(to_number(value)))


def quantities_match(a: Decimal, b: Decimal, tolerance: Decimal = QUANTITY_TOLERANCE) -> bool:
    return abs(a - b) <= tolerance


def _as_item(row: Union[RivhitItem, Mapping[str, Any]]) -> Optional[RivhitItem]:
    if isinstance(row, RivhitItem):
        return row
    if isinstance(row, Mapping) and row.get("item_id") is not None:
        return RivhitItem.model_validate(dict(row))
    return None


# =============================================================================
# Checks
# =============================================================================

def reconcile_item(ledger: AllocationLedger, item: RivhitItem) -> ItemReconciliation:
    """Compare one server item with its ledger allocations."""
    item_id = normalize_id(item.item_id)
    allocations = ledger.get_all_for_item(item_id)
    allocated = to_decimal(sum(allocations.values()))
    server = server_decimal(item.quantity)

    if not allocations and server > 0:
        status = AllocationStatus.UNALLOCATED
    elif quantities_match(allocated, server):
        status = AllocationStatus.MATCHED
    else:
        status = AllocationStatus.VARIANCE

    return ItemReconciliation(
        item_id=item_id,
        item_name=item.item_name,
        server_quantity=float(server),
        allocated_quantity=float(allocated),
        variance=float(allocated - server),
        status=status,
        allocations=allocations,
    )


def reconcile_allocations(
    ledger: AllocationLedger,
    server_items: Iterable[Union[RivhitItem, Mapping[str, Any]]],
) -> AllocationReconciliationReport:
    """Reconcile every server item against the ledger.

    Args:
        ledger: Local allocation ledger
        server_items: Item.List rows (models or raw dicts)

    Returns:
        AllocationReconciliationReport; status is WARN when any item differs
    """
    results = []
    seen = set()
    for row in server_items:
        item = _as_item(row)
        if item is None:
            continue
        result = reconcile_item(ledger, item)
        seen.add(result.item_id)
        results.append(result)

    unknown = [item_id for item_id in ledger.get_all() if item_id not in seen]

    variances = sum(1 for r in results if r.status == AllocationStatus.VARIANCE)
    unallocated = sum(1 for r in results if r.status == AllocationStatus.UNALLOCATED)
    matched = sum(1 for r in results if r.status == AllocationStatus.MATCHED)

    status = CheckStatus.WARN if (variances or unallocated or unknown) else CheckStatus.PASS

    report = AllocationReconciliationReport(
        status=status,
        items=results,
        unknown_item_ids=unknown,
        summary={
            "total_items": len(results),
            "matched": matched,
            "variance": variances,
            "unallocated": unallocated,
            "unknown": len(unknown),
        },
    )

    logger.info("Reconciled allocations", extra_fields=report.summary)
    return report
