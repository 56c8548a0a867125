"""Inventory store wiring for the API.

One ledger/registry pair is built per application from settings and kept on
app.state; routes receive it through the get_stores dependency.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from core.config import Settings
from core.inventory import AllocationLedger, StorageRegistry
from core.storage.backends import FileStateBackend, InMemoryStateBackend, StateBackend


@dataclass
class InventoryStores:
    """The two local inventory stores sharing one backend."""
    backend: StateBackend
    ledger: AllocationLedger
    registry: StorageRegistry

    @classmethod
    def from_backend(cls, backend: StateBackend) -> "InventoryStores":
        return cls(
            backend=backend,
            ledger=AllocationLedger(backend),
            registry=StorageRegistry(backend),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "InventoryStores":
        return cls.from_backend(FileStateBackend(settings.state_dir))

    @classmethod
    def in_memory(cls, backend: Optional[InMemoryStateBackend] = None) -> "InventoryStores":
        return cls.from_backend(backend or InMemoryStateBackend())


def get_stores(request: Request) -> InventoryStores:
    return request.app.state.stores


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
