"""FunnelScope — Abstract Platform Connector."""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Generic, List, Optional, TypeVar

import httpx
from pydantic import BaseModel

from funnelscope.connectors.http_client import VendorClient
from funnelscope.core.clock import Clock, utc_now
from funnelscope.core.errors import ConnectorError, PrimaryFetchError
from funnelscope.core.logging import get_logger

logger = get_logger("connectors")

CredT = TypeVar("CredT", bound=BaseModel)
MetricsT = TypeVar("MetricsT", bound=BaseModel)


class PlatformConnector(ABC, Generic[CredT, MetricsT]):
    """Translates one vendor's API into a normalized metrics record.

    Subclasses implement ``_fetch``. Auth resolution and target-resource
    selection run first; the data calls then go out concurrently through
    ``settle``, where only the primary call is allowed to fail the fetch.
    """

    platform: str = ""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        clock: Clock = utc_now,
    ):
        self._client = client
        self.clock = clock

    async def fetch(self, credentials: CredT) -> MetricsT:
        """Fetch and normalize this platform's metrics."""
        started = time.monotonic()
        async with VendorClient(self.platform, client=self._client) as http:
            try:
                metrics = await self._fetch(http, credentials)
            except ConnectorError:
                raise
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise PrimaryFetchError(
                    f"Unexpected {self.platform} response shape: {e}",
                    platform=self.platform,
                ) from e
        logger.info(
            f"Fetched {self.platform} metrics",
            extra={
                "platform": self.platform,
                "operation": "fetch",
                "duration_ms": round((time.monotonic() - started) * 1000, 1),
            },
        )
        return metrics

    @abstractmethod
    async def _fetch(self, http: VendorClient, credentials: CredT) -> MetricsT:
        ...

    # ── Partial tolerance ──

    @staticmethod
    async def settle(*calls: Awaitable[Any]) -> List[Any]:
        """Run calls concurrently; each slot holds a value or the raised exception."""
        return list(await asyncio.gather(*calls, return_exceptions=True))

    def primary(self, outcome: Any) -> Any:
        """Unwrap the primary call's outcome; its failure is fatal."""
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def secondary(self, outcome: Any, default: Any, label: str) -> Any:
        """Unwrap a secondary call's outcome, degrading failures to ``default``."""
        if isinstance(outcome, Exception):
            logger.warning(
                f"Secondary call '{label}' failed, using defaults: {outcome}",
                extra={"platform": self.platform, "operation": label},
            )
            return default
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome
