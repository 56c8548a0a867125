"""Rivhit Online API connector."""

from connectors.rivhit.models import (
    RivhitEnvelope,
    RivhitItem,
    RivhitStorage,
    ERROR_CODE_OK,
    ERROR_CODE_NO_DATA,
    ERROR_CODE_PROXY,
)
from connectors.rivhit.client import (
    RivhitClient,
    RivhitApiConfig,
    RetryConfig,
    RivhitApiError,
    RivhitNoDataError,
    RivhitRateLimitError,
)
from connectors.rivhit.mock import mock_response, MOCK_HANDLERS

__all__ = [
    "RivhitEnvelope",
    "RivhitItem",
    "RivhitStorage",
    "ERROR_CODE_OK",
    "ERROR_CODE_NO_DATA",
    "ERROR_CODE_PROXY",
    "RivhitClient",
    "RivhitApiConfig",
    "RetryConfig",
    "RivhitApiError",
    "RivhitNoDataError",
    "RivhitRateLimitError",
    "mock_response",
    "MOCK_HANDLERS",
]
