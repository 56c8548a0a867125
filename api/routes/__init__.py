"""API Routes Package."""

from api.routes import health, rivhit, storages, items

__all__ = [
    "health",
    "rivhit",
    "storages",
    "items",
]
