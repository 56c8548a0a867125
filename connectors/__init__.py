"""ERP Connectors - integrations with the external ERP.

The inventory core never talks to the ERP. This package handles:
- The Rivhit Online API client (auth token, retries, envelope decoding)
- Canned mock responses for development without a token

Key Design Principle:
- API routes depend on the envelope model, not on raw HTTP responses
- Server data (items, storages) is read-only from the console's side
"""

from connectors.rivhit import (
    RivhitClient,
    RivhitApiConfig,
    RivhitEnvelope,
    RivhitApiError,
    mock_response,
)

__all__ = [
    "RivhitClient",
    "RivhitApiConfig",
    "RivhitEnvelope",
    "RivhitApiError",
    "mock_response",
]
