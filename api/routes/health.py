"""Health and probe endpoints."""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.services.rivhit_proxy import proxy_mode
from api.services.stores import InventoryStores, get_app_settings, get_stores
from core import __version__
from core.config import Settings
from core.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    services: Dict[str, str]


def _state_status(stores: InventoryStores) -> str:
    """Return "up" if the state backend answers a read."""
    try:
        stores.registry.list()
    except OSError as e:
        logger.warning(f"State backend unavailable: {e}")
        return "down"
    return "up"


@router.get("/health", response_model=HealthResponse)
def health_check(
    settings: Settings = Depends(get_app_settings),
    stores: InventoryStores = Depends(get_stores),
) -> HealthResponse:
    state = _state_status(stores)
    return HealthResponse(
        status="healthy" if state == "up" else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        services={
            "api": "up",
            "rivhit": proxy_mode(settings),
            "state": state,
        },
    )


@router.get("/ready")
def readiness_check(stores: InventoryStores = Depends(get_stores)):
    """Ready once persisted state can be read."""
    if _state_status(stores) != "up":
        return JSONResponse({"status": "not_ready"}, status_code=503)
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    return {"status": "alive"}
