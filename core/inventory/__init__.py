"""Inventory allocation - local ledger and storage registry."""

from core.inventory.errors import InventoryError, ValidationError, NotFoundError
from core.inventory.models import (
    LocalStorage,
    StorageEntry,
    StorageRow,
    clamp_quantity,
    normalize_id,
)
from core.inventory.ledger import AllocationLedger, LEDGER_KEY
from core.inventory.registry import StorageRegistry, REGISTRY_KEY
from core.inventory.operations import (
    remove_local_storage,
    merge_storage_lists,
    save_item_allocation,
    storage_totals,
)

__all__ = [
    "InventoryError",
    "ValidationError",
    "NotFoundError",
    "LocalStorage",
    "StorageEntry",
    "StorageRow",
    "clamp_quantity",
    "normalize_id",
    "AllocationLedger",
    "LEDGER_KEY",
    "StorageRegistry",
    "REGISTRY_KEY",
    "remove_local_storage",
    "merge_storage_lists",
    "save_item_allocation",
    "storage_totals",
]
