"""FastAPI server for the inventory console.

Main entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import (
    health,
    rivhit,
    storages,
    items,
)
from api.services.stores import InventoryStores
from core import __version__
from core.config import Settings, get_settings
from core.observability.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info(
        "Inventory console API starting up",
        extra_fields={"rivhit_mode": "mock" if app.state.settings.mock_mode else "real"},
    )

    yield

    logger.info("Inventory console API shutting down")


def create_app(
    settings: Optional[Settings] = None,
    stores: Optional[InventoryStores] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Runtime settings (defaults to environment)
        stores: Ledger/registry pair (defaults to file-backed stores under settings.state_dir)
    """
    settings = settings or get_settings()
    configure_logging(
        level=getattr(logging, settings.log_level, logging.INFO),
        json_format=settings.log_json,
    )

    app = FastAPI(
        title="Inventory Console API",
        description="Rivhit ERP proxy and local inventory allocation across storages",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.settings = settings
    app.state.stores = stores or InventoryStores.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(rivhit.router, prefix="/api/rivhit", tags=["Rivhit"])
    app.include_router(storages.router, prefix="/storages", tags=["Storages"])
    app.include_router(items.router, prefix="/items", tags=["Items"])

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:create_app", factory=True, host="0.0.0.0", port=8000, reload=True)
