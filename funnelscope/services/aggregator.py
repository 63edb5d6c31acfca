"""FunnelScope — Platform Aggregator.

Two failure policies:
  - ``fetch_all``: best-effort fan-out; a failing platform is logged and left
    out of the result, never raised.
  - ``fetch_one``: single-platform connect-and-test; errors propagate so the
    person entering the credential sees the vendor's message.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from funnelscope.core.clock import Clock, utc_now
from funnelscope.core.logging import get_logger
from funnelscope.models.credentials import StoredCredentials
from funnelscope.models.metrics import PlatformMetrics, StoredMetrics
from funnelscope.services.registry import PLATFORMS, get_platform

logger = get_logger("services.aggregator")


@dataclass
class FetchOutcome:
    """Result of one platform's fetch: metrics on success, error otherwise."""

    platform: str
    metrics: Optional[PlatformMetrics] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Aggregator:
    """Runs connectors looked up through the platform registry."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        clock: Clock = utc_now,
        connectors: Optional[Dict[str, Any]] = None,
    ):
        self.client = client
        self.clock = clock
        self._connectors = connectors if connectors is not None else {}

    def connector_for(self, platform: str):
        if platform in self._connectors:
            return self._connectors[platform]
        return get_platform(platform).connector(client=self.client, clock=self.clock)

    async def fetch_one(self, platform: str, credentials: Any) -> PlatformMetrics:
        """Fetch one platform directly; connector errors propagate."""
        spec = get_platform(platform)
        creds = spec.parse_credentials(credentials)
        return await self.connector_for(platform).fetch(creds)

    async def _settle_one(self, platform: str, credentials: Any) -> FetchOutcome:
        try:
            return FetchOutcome(platform, metrics=await self.fetch_one(platform, credentials))
        except Exception as e:
            return FetchOutcome(platform, error=e)

    async def fetch_outcomes(self, credentials: StoredCredentials) -> List[FetchOutcome]:
        configured = [
            (key, getattr(credentials, key))
            for key in PLATFORMS
            if getattr(credentials, key) is not None
        ]
        return list(
            await asyncio.gather(
                *[self._settle_one(key, creds) for key, creds in configured]
            )
        )

    async def fetch_all(self, credentials: StoredCredentials) -> StoredMetrics:
        """Fetch every configured platform concurrently, keeping the successes."""
        outcomes = await self.fetch_outcomes(credentials)

        result: Dict[str, Any] = {}
        for outcome in outcomes:
            if outcome.ok:
                result[outcome.platform] = outcome.metrics
            else:
                logger.warning(
                    f"Skipping {outcome.platform}: {outcome.error}",
                    extra={"platform": outcome.platform, "operation": "fetch_all"},
                )

        logger.info(
            f"Bulk refresh: {len(result)}/{len(outcomes)} platforms succeeded",
            extra={"operation": "fetch_all"},
        )
        return StoredMetrics(**result, last_synced_at=self.clock())
