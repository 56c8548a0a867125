"""Inventory data models and input normalization.

Every public ledger/registry entry point funnels ids through normalize_id and
quantities through clamp_quantity:

- Item and storage ids may be passed as numbers or strings; they are keyed by
  their string form (1001, 1001.0 and "1001" all address the same entry).
- Quantities are coerced to a finite non-negative number; anything else
  (negative, NaN, infinity, non-numeric text, None) becomes 0.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from pydantic import BaseModel, Field, PositiveFloat, PositiveInt

Quantity = Union[int, float]


def normalize_id(value: Any) -> str:
    """Canonical string key for an item or storage id."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> Quantity:
    """Coerce value to a finite number, signed; 0 for anything unusable."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(Decimal(value.strip()) if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError, InvalidOperation):
        return 0
    if not math.isfinite(number):
        return 0
    if isinstance(value, int):
        return value
    return int(number) if number.is_integer() else number


def clamp_quantity(value: Any) -> Quantity:
    """Coerce value to a finite quantity >= 0 (0 for anything unusable)."""
    number = to_number(value)
    return number if number > 0 else 0


class StorageEntry(BaseModel):
    """One item's positive quantity at a storage location."""
    item_id: str = Field(..., description="Normalized item id")
    quantity: Union[PositiveInt, PositiveFloat]


class LocalStorage(BaseModel):
    """A user-defined storage location."""
    id: str = Field(..., description="Local storage id, 'L' followed by a sequence number")
    name: str


class StorageRow(BaseModel):
    """A storage location as listed to the UI (server or local)."""
    storage_id: str
    storage_name: str
    is_local: bool = False
