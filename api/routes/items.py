"""Item allocation endpoints.

Per-item view of the ledger (where an item's units sit) and reconciliation
of allocated totals against the quantities the ERP reports.
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from api.services.rivhit_proxy import forward
from api.services.stores import InventoryStores, get_app_settings, get_stores
from connectors.rivhit import RivhitApiError
from core.config import Settings
from core.inventory import normalize_id, save_item_allocation
from reconciliation import AllocationReconciliationReport, reconcile_allocations

router = APIRouter()


class ItemAllocationResponse(BaseModel):
    """Where an item's allocated units sit."""
    item_id: str
    allocations: Dict[str, float]
    total: float


class ItemAllocationRequest(BaseModel):
    """Quantities to set per storage; 0 clears that storage."""
    allocations: Dict[str, Union[float, int, str, None]] = Field(default_factory=dict)


class ReconcileRequest(BaseModel):
    """Server items to reconcile against; fetched from Item.List when omitted."""
    items: Optional[List[Dict[str, Any]]] = None


def _allocation_response(stores: InventoryStores, item_id: str) -> ItemAllocationResponse:
    allocations = stores.ledger.get_all_for_item(item_id)
    return ItemAllocationResponse(
        item_id=normalize_id(item_id),
        allocations=allocations,
        total=sum(allocations.values()),
    )


@router.get("/{item_id}/allocations", response_model=ItemAllocationResponse)
def get_item_allocations(
    item_id: str,
    stores: InventoryStores = Depends(get_stores),
) -> ItemAllocationResponse:
    return _allocation_response(stores, item_id)


@router.put("/{item_id}/allocations", response_model=ItemAllocationResponse)
def save_item_allocations(
    item_id: str,
    request: ItemAllocationRequest,
    stores: InventoryStores = Depends(get_stores),
) -> ItemAllocationResponse:
    """Set an item's quantity at each listed storage."""
    save_item_allocation(stores.ledger, item_id, request.allocations)
    return _allocation_response(stores, item_id)


@router.post("/reconcile", response_model=AllocationReconciliationReport)
async def reconcile_items(
    request: Optional[ReconcileRequest] = Body(None),
    stores: InventoryStores = Depends(get_stores),
    settings: Settings = Depends(get_app_settings),
) -> AllocationReconciliationReport:
    """Compare allocated totals with server item quantities."""
    items = request.items if request is not None else None
    if items is None:
        try:
            envelope, _ = await forward("Item.List", {}, settings)
        except RivhitApiError as e:
            raise HTTPException(status_code=502, detail=f"Failed to load server items: {e}")
        items = envelope.data.get("item_list", []) if envelope.ok else []

    return await run_in_threadpool(reconcile_allocations, stores.ledger, items)
