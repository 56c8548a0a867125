"""Storage endpoints.

Local storage CRUD plus the per-storage ledger operations the storages
screen drives: entry listing, JSON import, clearing and transfers.
"""

from typing import Any, Dict, List, Union

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from api.services.rivhit_proxy import forward
from api.services.stores import InventoryStores, get_app_settings, get_stores
from connectors.rivhit import RivhitApiError
from core.config import Settings
from core.inventory import (
    LocalStorage,
    NotFoundError,
    StorageEntry,
    StorageRow,
    ValidationError,
    merge_storage_lists,
    normalize_id,
    remove_local_storage,
    storage_totals,
)
from core.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class StorageNameRequest(BaseModel):
    """Request to create or rename a local storage."""
    name: str = Field(..., description="Display name (trimmed; must not be empty)")


class StorageContentsResponse(BaseModel):
    """Items allocated at one storage."""
    storage_id: str
    entries: List[StorageEntry]
    total: float


class StorageOverviewRow(StorageRow):
    """Storage row with its allocated total."""
    total: float = 0


class TransferRequest(BaseModel):
    """Request to move an item's quantity between storages."""
    item_id: Union[int, str]
    from_storage_id: Union[int, str]
    to_storage_id: Union[int, str]
    amount: float = Field(..., gt=0, description="Requested quantity; at most the source quantity moves")


class TransferResponse(BaseModel):
    """Result of a transfer."""
    item_id: str
    from_storage_id: str
    to_storage_id: str
    requested: float
    moved: float
    from_quantity: float
    to_quantity: float


class ImportResponse(BaseModel):
    storage_id: str
    applied: int
    total: float


def _overview_rows(stores: InventoryStores, server_storages) -> List[StorageOverviewRow]:
    rows = merge_storage_lists(server_storages, stores.registry)
    totals = storage_totals(stores.ledger, rows)
    return [StorageOverviewRow(**row.model_dump(), total=totals[row.storage_id]) for row in rows]


@router.get("", response_model=List[LocalStorage])
def list_local_storages(stores: InventoryStores = Depends(get_stores)) -> List[LocalStorage]:
    """List local storages in creation order."""
    return stores.registry.list()


@router.get("/overview", response_model=List[StorageOverviewRow])
async def storages_overview(
    stores: InventoryStores = Depends(get_stores),
    settings: Settings = Depends(get_app_settings),
) -> List[StorageOverviewRow]:
    """Server storages followed by local ones, each with its allocated total."""
    try:
        envelope, _ = await forward("Item.StorageList", {}, settings)
    except RivhitApiError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load server storages: {e}")

    server_storages = envelope.data.get("storage_list", []) if envelope.ok else []
    return await run_in_threadpool(_overview_rows, stores, server_storages)


@router.post("", response_model=LocalStorage, status_code=201)
def create_local_storage(
    request: StorageNameRequest,
    stores: InventoryStores = Depends(get_stores),
) -> LocalStorage:
    """Create a local storage."""
    try:
        return stores.registry.create(request.name)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{storage_id}", response_model=LocalStorage)
def rename_local_storage(
    storage_id: str,
    request: StorageNameRequest,
    stores: InventoryStores = Depends(get_stores),
) -> LocalStorage:
    """Rename a local storage."""
    try:
        return stores.registry.rename(storage_id, request.name)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=f"{e}: {storage_id}")


@router.delete("/{storage_id}")
def delete_local_storage(
    storage_id: str,
    stores: InventoryStores = Depends(get_stores),
) -> Dict[str, str]:
    """Delete a local storage together with its allocations."""
    try:
        remove_local_storage(stores.registry, stores.ledger, storage_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=f"{e}: {storage_id}")
    return {"status": "deleted", "storage_id": storage_id}


@router.get("/{storage_id}/entries", response_model=StorageContentsResponse)
def get_storage_entries(
    storage_id: str,
    stores: InventoryStores = Depends(get_stores),
) -> StorageContentsResponse:
    """Items allocated at a storage (server or local id)."""
    entries = stores.ledger.entries_for_storage(storage_id)
    return StorageContentsResponse(
        storage_id=normalize_id(storage_id),
        entries=entries,
        total=sum(e.quantity for e in entries),
    )


@router.post("/{storage_id}/import", response_model=ImportResponse)
def import_storage_quantities(
    storage_id: str,
    payload: Any = Body(..., description="[{item_id|id, quantity|qty}] or {item_id: quantity}"),
    stores: InventoryStores = Depends(get_stores),
) -> ImportResponse:
    """Overwrite quantities at a storage from a JSON payload."""
    if not isinstance(payload, (list, dict)):
        raise HTTPException(status_code=400, detail="Import payload must be a JSON array or object")
    applied = stores.ledger.import_for_storage(storage_id, payload)
    return ImportResponse(
        storage_id=normalize_id(storage_id),
        applied=applied,
        total=stores.ledger.total_for_storage(storage_id),
    )


@router.post("/{storage_id}/clear")
def clear_storage(
    storage_id: str,
    stores: InventoryStores = Depends(get_stores),
) -> Dict[str, str]:
    """Drop every allocation at a storage."""
    stores.ledger.clear_storage(storage_id)
    return {"status": "cleared", "storage_id": normalize_id(storage_id)}


@router.post("/transfer", response_model=TransferResponse)
def transfer_stock(
    request: TransferRequest,
    stores: InventoryStores = Depends(get_stores),
) -> TransferResponse:
    """Move an item's quantity from one storage to another."""
    from_id = normalize_id(request.from_storage_id)
    to_id = normalize_id(request.to_storage_id)
    if from_id == to_id:
        raise HTTPException(status_code=400, detail="Source and destination storages must differ")

    moved = stores.ledger.transfer(request.item_id, from_id, to_id, request.amount)
    return TransferResponse(
        item_id=normalize_id(request.item_id),
        from_storage_id=from_id,
        to_storage_id=to_id,
        requested=request.amount,
        moved=moved,
        from_quantity=stores.ledger.get(request.item_id, from_id),
        to_quantity=stores.ledger.get(request.item_id, to_id),
    )
