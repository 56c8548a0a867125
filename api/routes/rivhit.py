"""Rivhit proxy endpoint.

Same-origin pass-through to the Rivhit Online API. The UI posts a JSON body
to /api/rivhit/<Method.Path> and always gets the Rivhit envelope back; the
X-Rivhit-Mode header says whether it came from the real API or the mock set.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.services.rivhit_proxy import forward, proxy_mode
from api.services.stores import get_app_settings
from connectors.rivhit import RivhitApiError, RivhitEnvelope
from core.config import Settings
from core.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

MODE_HEADER = "X-Rivhit-Mode"


async def _read_body(request: Request) -> Dict[str, Any]:
    """Request JSON as a dict; empty or invalid bodies become {}."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@router.post("/{method_path:path}")
async def proxy_call(
    method_path: str,
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Forward one ERP method call (e.g. Item.List, Status.LastRequest/JSON)."""
    body = await _read_body(request)

    try:
        envelope, mode = await forward(method_path, body, settings)
    except RivhitApiError as e:
        logger.error(f"Rivhit call {method_path} failed: {e}")
        return JSONResponse(
            RivhitEnvelope.proxy_error(str(e)).model_dump(),
            status_code=502,
            headers={MODE_HEADER: proxy_mode(settings)},
        )
    except Exception as e:
        logger.exception(f"Proxy error for {method_path}")
        return JSONResponse(
            RivhitEnvelope.proxy_error(str(e)).model_dump(),
            status_code=500,
            headers={MODE_HEADER: proxy_mode(settings)},
        )

    return JSONResponse(envelope.model_dump(), status_code=200, headers={MODE_HEADER: mode})
