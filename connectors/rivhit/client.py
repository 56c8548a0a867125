"""Rivhit Online API HTTP Client.

Low-level async client for Rivhit API calls. Every method is a POST to
{base_url}/{method_path} with a JSON body carrying the api_token.
Handles retries on rate limiting and server errors, 204 NO_DATA_FOUND, and
envelope decoding.
"""

from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import json
import asyncio

import aiohttp

from connectors.rivhit.models import (
    RivhitEnvelope,
    RivhitItem,
    RivhitStorage,
    ERROR_CODE_NO_DATA,
)
from core.observability.logging import get_logger, with_correlation

logger = get_logger(__name__)


class RivhitApiError(Exception):
    """Base exception for Rivhit API errors."""
    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RivhitNoDataError(RivhitApiError):
    """The ERP found nothing for the request (HTTP 204 / error_code 204)."""
    pass


class RivhitRateLimitError(RivhitApiError):
    """Rate limit exceeded (429)."""
    def __init__(self, message: str, retry_after: int = 60):
        super().__init__(message, 429)
        self.retry_after = retry_after


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    retry_on_status: Tuple[int, ...] = (429, 500, 502, 503, 504)

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for retry attempt (exponential backoff)."""
        delay = self.base_delay * (self.exponential_base ** attempt)
        return min(delay, self.max_delay)


@dataclass
class RivhitApiConfig:
    """Configuration for the Rivhit API client."""
    base_url: str = "https://api.rivhit.co.il/online/RivhitOnlineAPI.svc"
    api_token: str = ""
    timeout_seconds: int = 30
    retry_config: RetryConfig = field(default_factory=RetryConfig)

    def build_url(self, method_path: str) -> str:
        """URL for a method path such as "Item.List" or "Status.LastRequest/JSON"."""
        return f"{self.base_url.rstrip('/')}/{method_path.strip('/')}"


class RivhitClient:
    """HTTP client for the Rivhit Online API.

    Usage:
        async with RivhitClient(RivhitApiConfig(api_token=token)) as client:
            items = await client.list_items()
            envelope = await client.call("Document.TypeList")
    """

    def __init__(self, api_config: RivhitApiConfig, session: Optional[aiohttp.ClientSession] = None):
        self.api_config = api_config
        self._session = session
        self._owns_session = session is None

    async def connect(self) -> None:
        """Open the HTTP session (no-op if one was injected)."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

    async def disconnect(self) -> None:
        """Close the HTTP session if this client opened it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "RivhitClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    async def call(self, method_path: str, payload: Optional[Dict[str, Any]] = None) -> RivhitEnvelope:
        """Call a Rivhit method and return its envelope as-is.

        A non-zero error_code in the envelope is not raised here; callers
        that want exceptions use request().

        Raises:
            RivhitRateLimitError: Still rate limited after retries
            RivhitApiError: Transport failure, non-JSON body or HTTP error
        """
        if self._session is None:
            raise RivhitApiError("Not connected. Call connect() first.")

        url = self.api_config.build_url(method_path)
        body = {"api_token": self.api_config.api_token, **(payload or {})}
        retry_config = self.api_config.retry_config
        timeout = aiohttp.ClientTimeout(total=self.api_config.timeout_seconds)
        last_error: Optional[Exception] = None

        with with_correlation(method_path=method_path):
            for attempt in range(retry_config.max_retries + 1):
                try:
                    async with self._session.request(
                        "POST",
                        url,
                        headers={"Content-Type": "application/json"},
                        json=body,
                        timeout=timeout,
                    ) as response:
                        response_text = await response.text()

                        if response.status == 204:
                            return RivhitEnvelope.no_data()

                        if response.status < 400:
                            try:
                                return RivhitEnvelope.model_validate(json.loads(response_text))
                            except ValueError as e:
                                raise RivhitApiError(
                                    f"Invalid response body from {method_path}: {e}",
                                    response.status,
                                    response_text,
                                )

                        if response.status == 429:
                            retry_after = int(response.headers.get("Retry-After", 60))
                            if attempt < retry_config.max_retries:
                                logger.warning(f"Rate limited, waiting {retry_after}s...")
                                await asyncio.sleep(retry_after)
                                continue
                            raise RivhitRateLimitError("Rate limit exceeded", retry_after)

                        if response.status in retry_config.retry_on_status:
                            if attempt < retry_config.max_retries:
                                delay = retry_config.get_delay(attempt)
                                logger.warning(
                                    f"Request failed with {response.status}, "
                                    f"retrying in {delay:.1f}s (attempt {attempt + 1}/{retry_config.max_retries})"
                                )
                                await asyncio.sleep(delay)
                                continue

                        raise RivhitApiError(
                            f"API error {response.status}: {response_text}",
                            response.status,
                            response_text,
                        )

                except RivhitApiError:
                    raise
                except (asyncio.TimeoutError, aiohttp.ClientError) as e:
                    last_error = e
                    if attempt < retry_config.max_retries:
                        delay = retry_config.get_delay(attempt)
                        logger.warning(
                            f"Request failed with {type(e).__name__}: {e}, "
                            f"retrying in {delay:.1f}s"
                        )
                        await asyncio.sleep(delay)
                        continue
                    raise RivhitApiError(
                        f"Request failed after {retry_config.max_retries} retries: {e}"
                    ) from e

        raise RivhitApiError(f"Request failed: {last_error}")

    async def request(self, method_path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Call a Rivhit method and return the envelope's data.

        Raises:
            RivhitNoDataError: error_code 204
            RivhitApiError: any other non-zero error_code
        """
        envelope = await self.call(method_path, payload)
        if envelope.ok:
            return envelope.data
        if envelope.error_code == ERROR_CODE_NO_DATA:
            raise RivhitNoDataError(envelope.debug_message or "No data found", ERROR_CODE_NO_DATA)
        raise RivhitApiError(
            envelope.client_message or envelope.debug_message or f"Rivhit error {envelope.error_code}",
            envelope.error_code,
            envelope.debug_message,
        )

    async def list_items(self, item_group_id: Optional[int] = None) -> List[RivhitItem]:
        payload = {"item_group_id": item_group_id} if item_group_id else {}
        try:
            data = await self.request("Item.List", payload)
        except RivhitNoDataError:
            return []
        return [RivhitItem.model_validate(row) for row in data.get("item_list", [])]

    async def list_storages(self) -> List[RivhitStorage]:
        try:
            data = await self.request("Item.StorageList")
        except RivhitNoDataError:
            return []
        return [RivhitStorage.model_validate(row) for row in data.get("storage_list", [])]

    async def item_quantity(self, item_id: int, storage_id: Optional[int] = None) -> Dict[str, Any]:
        """Server-side quantity for one item (optionally at one storage)."""
        return await self.request("Item.Quantity", {"item_id": item_id, "storage_id": storage_id})
