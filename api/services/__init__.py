"""API Services Package."""

from api.services.stores import InventoryStores, get_stores, get_app_settings
from api.services.rivhit_proxy import forward, proxy_mode, MODE_MOCK, MODE_REAL

__all__ = [
    "InventoryStores",
    "get_stores",
    "get_app_settings",
    "forward",
    "proxy_mode",
    "MODE_MOCK",
    "MODE_REAL",
]
