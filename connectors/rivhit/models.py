"""Rivhit API data models.

Every Rivhit Online API method answers with the same envelope:

    {"error_code": 0, "client_message": "", "debug_message": "", "data": {...}}

error_code 0 is success, 204 is NO_DATA_FOUND, -1 is used by our proxy for
internal failures; any other value is an ERP-side error.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.inventory.models import to_number


ERROR_CODE_OK = 0
ERROR_CODE_NO_DATA = 204
ERROR_CODE_PROXY = -1


class RivhitEnvelope(BaseModel):
    """Fixed response envelope of the Rivhit API."""
    model_config = ConfigDict(extra="allow")

    error_code: int = Field(default=ERROR_CODE_OK)
    client_message: str = Field(default="")
    debug_message: str = Field(default="")
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error_code == ERROR_CODE_OK

    @classmethod
    def success(cls, data: Dict[str, Any]) -> "RivhitEnvelope":
        return cls(error_code=ERROR_CODE_OK, data=data)

    @classmethod
    def no_data(cls, debug_message: str = "No data found") -> "RivhitEnvelope":
        return cls(
            error_code=ERROR_CODE_NO_DATA,
            client_message="NO_DATA_FOUND",
            debug_message=debug_message,
        )

    @classmethod
    def proxy_error(cls, debug_message: str) -> "RivhitEnvelope":
        return cls(
            error_code=ERROR_CODE_PROXY,
            client_message="Internal proxy error",
            debug_message=debug_message,
        )


class RivhitItem(BaseModel):
    """Item row from Item.List (only the fields we read; the rest is kept)."""
    model_config = ConfigDict(extra="allow")

    item_id: Union[int, str]
    item_name: str = ""
    item_part_num: Optional[Union[str, int]] = None
    barcode: Optional[Union[str, int]] = None
    item_group_id: Optional[int] = None
    storage_id: Optional[Union[int, str]] = None
    quantity: float = 0
    cost_nis: Optional[float] = None
    sale_nis: Optional[float] = None

    @field_validator("item_name", mode="before")
    @classmethod
    def _name_or_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def _signed_quantity(cls, v: Any) -> float:
        # null or non-numeric stock counts as 0; negative stock is kept
        return to_number(v)


class RivhitStorage(BaseModel):
    """Storage row from Item.StorageList."""
    model_config = ConfigDict(extra="allow")

    storage_id: Union[int, str]
    storage_name: str = ""
