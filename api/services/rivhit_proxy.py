"""Rivhit proxy service.

Forwards a method-path call to the Rivhit API, or answers from the canned
mock set when mock mode is on (RIVHIT_USE_MOCK=true or no API token).
"""

from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from connectors.rivhit import (
    RivhitApiConfig,
    RivhitClient,
    RivhitEnvelope,
    mock_response,
)
from core.config import Settings
from core.observability.logging import get_logger, with_correlation

logger = get_logger(__name__)

MODE_MOCK = "mock"
MODE_REAL = "real"


def proxy_mode(settings: Settings) -> str:
    return MODE_MOCK if settings.mock_mode else MODE_REAL


async def forward(
    method_path: str,
    body: Optional[Dict[str, Any]],
    settings: Settings,
) -> Tuple[RivhitEnvelope, str]:
    """Run one ERP call and return (envelope, mode).

    Raises:
        RivhitApiError: The real API could not be reached or answered badly
    """
    mode = proxy_mode(settings)
    with with_correlation(method_path=method_path, request_reference=uuid4().hex):
        if mode == MODE_MOCK:
            envelope = mock_response(method_path, body)
        else:
            config = RivhitApiConfig(
                base_url=settings.rivhit_base_url,
                api_token=settings.rivhit_api_token,
                timeout_seconds=settings.rivhit_timeout_seconds,
            )
            async with RivhitClient(config) as client:
                envelope = await client.call(method_path, body)

        logger.info(
            "Proxied Rivhit call",
            extra_fields={"mode": mode, "error_code": envelope.error_code},
        )
        return envelope, mode
