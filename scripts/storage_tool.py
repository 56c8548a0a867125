"""Inspect and maintain the local inventory state from the command line.

Works directly on the persisted ledger/registry under INVENTORY_STATE_DIR.

Usage:
    python scripts/storage_tool.py storages                    # List local storages
    python scripts/storage_tool.py create "Main Depot"         # Add a local storage
    python scripts/storage_tool.py remove L1                   # Delete storage + allocations
    python scripts/storage_tool.py show 1                      # Items allocated at storage 1
    python scripts/storage_tool.py import 1 counts.json        # Overwrite storage 1 from JSON
    python scripts/storage_tool.py clear 1                     # Drop storage 1 allocations
    python scripts/storage_tool.py transfer 1001 1 L1 4        # Move 4 units of item 1001
    python scripts/storage_tool.py reconcile --items items.json
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from connectors.rivhit import mock_response
from core.config import get_settings
from core.inventory import (
    AllocationLedger,
    InventoryError,
    StorageRegistry,
    remove_local_storage,
)
from core.storage.backends import FileStateBackend
from reconciliation import reconcile_allocations


def cmd_storages(ledger: AllocationLedger, registry: StorageRegistry, args) -> int:
    rows = registry.list()
    if not rows:
        print("No local storages.")
        return 0
    print(f"{'ID':<8} {'Name':<30} {'Allocated'}")
    print("-" * 50)
    for row in rows:
        print(f"{row.id:<8} {row.name:<30} {ledger.total_for_storage(row.id)}")
    return 0


def cmd_create(ledger: AllocationLedger, registry: StorageRegistry, args) -> int:
    created = registry.create(args.name)
    print(f"Created {created.id}: {created.name}")
    return 0


def cmd_remove(ledger: AllocationLedger, registry: StorageRegistry, args) -> int:
    remove_local_storage(registry, ledger, args.storage_id)
    print(f"Removed {args.storage_id} and its allocations")
    return 0


def cmd_show(ledger: AllocationLedger, registry: StorageRegistry, args) -> int:
    entries = ledger.entries_for_storage(args.storage_id)
    if not entries:
        print(f"No items at storage {args.storage_id}")
        return 0
    print(f"{'Item':<12} {'Quantity'}")
    print("-" * 24)
    for entry in entries:
        print(f"{entry.item_id:<12} {entry.quantity:g}")
    print(f"\nTotal: {ledger.total_for_storage(args.storage_id)}")
    return 0


def cmd_import(ledger: AllocationLedger, registry: StorageRegistry, args) -> int:
    with open(args.file, "r", encoding="utf-8") as f:
        data = json.load(f)
    applied = ledger.import_for_storage(args.storage_id, data)
    print(f"Imported {applied} row(s) into storage {args.storage_id}")
    return 0


def cmd_clear(ledger: AllocationLedger, registry: StorageRegistry, args) -> int:
    ledger.clear_storage(args.storage_id)
    print(f"Cleared storage {args.storage_id}")
    return 0


def cmd_transfer(ledger: AllocationLedger, registry: StorageRegistry, args) -> int:
    moved = ledger.transfer(args.item_id, args.from_storage, args.to_storage, args.amount)
    print(f"Moved {moved:g} of item {args.item_id} from {args.from_storage} to {args.to_storage}")
    return 0


def cmd_reconcile(ledger: AllocationLedger, registry: StorageRegistry, args) -> int:
    if args.items:
        with open(args.items, "r", encoding="utf-8") as f:
            data = json.load(f)
        items = data.get("item_list", []) if isinstance(data, dict) else data
    else:
        items = mock_response("Item.List").data.get("item_list", [])

    report = reconcile_allocations(ledger, items)
    print(f"Status: {report.status.value}")
    print(f"{'Item':<10} {'Server':>10} {'Allocated':>10} {'Variance':>10}  Status")
    print("-" * 60)
    for r in report.items:
        print(
            f"{r.item_id:<10} {r.server_quantity:>10g} {r.allocated_quantity:>10g} "
            f"{r.variance:>10g}  {r.status.value}"
        )
    if report.unknown_item_ids:
        print(f"\nAllocated but unknown to the server: {', '.join(report.unknown_item_ids)}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Local inventory allocation tool")
    parser.add_argument("--state-dir", type=Path, help="Override INVENTORY_STATE_DIR")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("storages", help="List local storages").set_defaults(func=cmd_storages)

    p = sub.add_parser("create", help="Create a local storage")
    p.add_argument("name")
    p.set_defaults(func=cmd_create)

    p = sub.add_parser("remove", help="Remove a local storage and its allocations")
    p.add_argument("storage_id")
    p.set_defaults(func=cmd_remove)

    p = sub.add_parser("show", help="Show items allocated at a storage")
    p.add_argument("storage_id")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("import", help="Import quantities for a storage from a JSON file")
    p.add_argument("storage_id")
    p.add_argument("file", type=Path)
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("clear", help="Clear all allocations at a storage")
    p.add_argument("storage_id")
    p.set_defaults(func=cmd_clear)

    p = sub.add_parser("transfer", help="Move an item's quantity between storages")
    p.add_argument("item_id")
    p.add_argument("from_storage")
    p.add_argument("to_storage")
    p.add_argument("amount", type=float)
    p.set_defaults(func=cmd_transfer)

    p = sub.add_parser("reconcile", help="Compare allocations with server item quantities")
    p.add_argument("--items", type=Path, help="Item.List JSON (default: mock items)")
    p.set_defaults(func=cmd_reconcile)

    args = parser.parse_args()

    state_dir = args.state_dir or get_settings().state_dir
    backend = FileStateBackend(state_dir)
    ledger = AllocationLedger(backend)
    registry = StorageRegistry(backend)

    try:
        return args.func(ledger, registry, args)
    except InventoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
