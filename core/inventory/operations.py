"""Operations spanning the ledger and the registry.

Neither store knows about the other. Flows that touch both (deleting a local
storage also drops its allocations) are composed here, on the caller's side.
"""

from typing import Any, Dict, Iterable, List, Mapping

from core.inventory.ledger import AllocationLedger
from core.inventory.models import Quantity, StorageRow, normalize_id
from core.inventory.registry import StorageRegistry
from core.observability.logging import get_logger, with_correlation

logger = get_logger(__name__)


def remove_local_storage(
    registry: StorageRegistry,
    ledger: AllocationLedger,
    storage_id: Any,
) -> None:
    """Delete a local storage and every allocation held at it.

    The registry entry goes first; if it does not exist, NotFoundError
    propagates and the ledger is left untouched.
    """
    key = normalize_id(storage_id)
    with with_correlation(storage_id=key, operation="remove_local_storage"):
        registry.remove(key)
        ledger.clear_storage(key)
        logger.info("Removed local storage and its allocations")


def merge_storage_lists(
    server_storages: Iterable[Mapping[str, Any]],
    registry: StorageRegistry,
) -> List[StorageRow]:
    """Server storages (from Item.StorageList) followed by local storages."""
    rows = [
        StorageRow(
            storage_id=normalize_id(s.get("storage_id")),
            storage_name=str(s.get("storage_name") or ""),
            is_local=False,
        )
        for s in server_storages
        if s.get("storage_id") is not None
    ]
    rows.extend(
        StorageRow(storage_id=local.id, storage_name=local.name, is_local=True)
        for local in registry.list()
    )
    return rows


def save_item_allocation(
    ledger: AllocationLedger,
    item_id: Any,
    allocations: Mapping[Any, Any],
) -> Dict[str, Quantity]:
    """Set an item's quantity at each listed storage; 0 clears that storage.

    Storages not named in allocations keep their current quantity.
    Returns the item's resulting storage -> quantity mapping.
    """
    with with_correlation(item_id=normalize_id(item_id), operation="save_item_allocation"):
        for storage_id, quantity in allocations.items():
            ledger.set(item_id, storage_id, quantity)
        result = ledger.get_all_for_item(item_id)
        logger.debug("Saved item allocation", extra_fields={"storages": len(result)})
        return result


def storage_totals(
    ledger: AllocationLedger,
    storages: Iterable[Any],
) -> Dict[str, Quantity]:
    """Allocated total per storage id (rows or bare ids)."""
    totals = {}
    for s in storages:
        storage_id = s.storage_id if isinstance(s, StorageRow) else s
        key = normalize_id(storage_id)
        totals[key] = ledger.total_for_storage(key)
    return totals
