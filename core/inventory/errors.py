"""Inventory store exceptions.

Only the storage registry raises; the allocation ledger sanitizes its input.
"""

from typing import Optional


class InventoryError(Exception):
    """Base exception for inventory store errors."""
    pass


class ValidationError(InventoryError):
    """A user-supplied storage name is empty after trimming."""
    pass


class NotFoundError(InventoryError):
    """Referenced local storage id does not exist."""
    def __init__(self, message: str, storage_id: Optional[str] = None):
        super().__init__(message)
        self.storage_id = storage_id
