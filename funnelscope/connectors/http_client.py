"""FunnelScope — Shared Vendor HTTP Client.

Handles timeouts, retry with exponential backoff on rate limits / server
errors / transport failures, and extraction of the vendor's own error text.
Every connector talks to its vendor through one of these.
"""

import asyncio
import time
from typing import Any, Dict, Optional, Type

import httpx

from funnelscope.config import settings
from funnelscope.core.errors import (
    AuthError,
    ConnectorError,
    PrimaryFetchError,
    ResourceNotFoundError,
)
from funnelscope.core.logging import get_logger

logger = get_logger("connectors.http")

# Keys vendors use for a human-readable error, most specific first
ERROR_TEXT_KEYS = ("error_description", "detail", "message", "error")


def vendor_error_text(resp: httpx.Response) -> str:
    """Best-effort extraction of the vendor's error message from a response."""
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ERROR_TEXT_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            # Google APIs: {"error": {"code": 403, "message": "...", "status": "..."}}
            if isinstance(value, dict) and value.get("message"):
                return str(value["message"])

    text = resp.text.strip() if resp.text else ""
    return text[:500] or resp.reason_phrase or f"HTTP {resp.status_code}"


class VendorClient:
    """Async HTTP client bound to one platform."""

    def __init__(
        self,
        platform: str,
        client: Optional[httpx.AsyncClient] = None,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
    ):
        self.platform = platform
        self.max_retries = max(1, max_retries or settings.http_max_retries)
        self.retry_base_delay = (
            settings.http_retry_base_delay
            if retry_base_delay is None
            else retry_base_delay
        )
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "VendorClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ── Core Request Method ──

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Dict[str, Any] | None = None,
        headers: Dict[str, str] | None = None,
        json: Any = None,
        data: Dict[str, Any] | None = None,
        auth: Any = None,
    ) -> httpx.Response:
        """Make a request with retry + rate-limit handling.

        Returns the final response whatever its status; callers decide
        whether a non-2xx answer is fatal.
        """
        client = await self._get_client()

        for attempt in range(1, self.max_retries + 1):
            started = time.monotonic()
            try:
                resp = await client.request(
                    method,
                    url,
                    params=params,
                    headers=headers,
                    json=json,
                    data=data,
                    auth=auth,
                )
            except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
                raise ConnectorError(
                    f"Invalid request URL {url!r}: {e}", platform=self.platform
                ) from e
            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(
                        f"Request error: {e}. Retrying in {wait}s",
                        extra={"platform": self.platform, "endpoint": url},
                    )
                    await asyncio.sleep(wait)
                    continue
                raise ConnectorError(
                    f"Connection failed after {self.max_retries} attempts: {e}",
                    platform=self.platform,
                ) from e

            logger.debug(
                f"{method} {url} → {resp.status_code}",
                extra={
                    "platform": self.platform,
                    "endpoint": url,
                    "status_code": resp.status_code,
                    "duration_ms": round((time.monotonic() - started) * 1000, 1),
                },
            )

            retryable = resp.status_code == 429 or resp.status_code >= 500
            if retryable and attempt < self.max_retries:
                wait = self.retry_base_delay * (2 ** (attempt - 1))
                logger.warning(
                    f"Vendor returned {resp.status_code}. Retrying in {wait}s "
                    f"(attempt {attempt}/{self.max_retries})",
                    extra={"platform": self.platform, "endpoint": url},
                )
                await asyncio.sleep(wait)
                continue
            return resp

        raise ConnectorError("Max retries exhausted", platform=self.platform)

    def raise_for_status(
        self,
        resp: httpx.Response,
        context: str,
        error_cls: Type[ConnectorError] = PrimaryFetchError,
        not_found: Optional[str] = None,
    ) -> None:
        """Raise a classified error carrying the vendor text for a non-2xx response.

        401/403 become ``AuthError``; 404 becomes ``ResourceNotFoundError``
        when ``not_found`` names the resource being resolved; anything else
        raises ``error_cls``.
        """
        if resp.is_success:
            return
        text = vendor_error_text(resp)
        if resp.status_code in (401, 403):
            error_cls = AuthError
        elif resp.status_code == 404 and not_found:
            raise ResourceNotFoundError(
                f"{not_found}: {text}",
                platform=self.platform,
                status_code=resp.status_code,
            )
        raise error_cls(
            f"{context} error {resp.status_code}: {text}",
            platform=self.platform,
            status_code=resp.status_code,
        )

    async def get_json(self, url: str, context: str, **kwargs: Any) -> Any:
        """GET and decode JSON, raising ``PrimaryFetchError`` on failure."""
        resp = await self.request("GET", url, **kwargs)
        self.raise_for_status(resp, context)
        return self.decode(resp, context)

    def decode(self, resp: httpx.Response, context: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise PrimaryFetchError(
                f"{context} returned an unparsable body",
                platform=self.platform,
                status_code=resp.status_code,
            ) from e
