"""FunnelScope — Platform Service.

The operations the API exposes, over the two stored documents:
``platform-credentials`` and ``platform-metrics``.

Updates are read-merge-write on the whole document with no lock: two
concurrent writers can lose one update (last writer wins).
"""

from typing import Any, Optional

from funnelscope.core.clock import Clock, utc_now
from funnelscope.core.errors import (
    ConnectorError,
    PlatformNotConnectedError,
    PlatformOperationError,
)
from funnelscope.core.logging import get_logger
from funnelscope.database import CREDENTIALS_KEY, METRICS_KEY, DocumentStore
from funnelscope.models.credentials import StoredCredentials
from funnelscope.models.metrics import StoredMetrics
from funnelscope.models.status import AllPlatformStatuses
from funnelscope.services.aggregator import Aggregator
from funnelscope.services.prompt_context import summarize
from funnelscope.services.registry import PLATFORMS, get_platform
from funnelscope.services.status import build_statuses

logger = get_logger("services.platforms")


class PlatformService:
    def __init__(
        self,
        store: DocumentStore,
        aggregator: Optional[Aggregator] = None,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.clock = clock
        self.aggregator = aggregator or Aggregator(clock=clock)

    # ── Documents ──

    def load_credentials(self) -> StoredCredentials:
        return StoredCredentials.model_validate(self.store.read(CREDENTIALS_KEY) or {})

    def load_metrics(self) -> StoredMetrics:
        return StoredMetrics.model_validate(self.store.read(METRICS_KEY) or {})

    def _save_credentials(self, creds: StoredCredentials) -> None:
        self.store.write(CREDENTIALS_KEY, creds.model_dump(mode="json", exclude_none=True))

    def _save_metrics(self, metrics: StoredMetrics) -> None:
        self.store.write(METRICS_KEY, metrics.model_dump(mode="json", exclude_none=True))

    def cached_metrics(self, platform: str) -> Any:
        get_platform(platform)
        return getattr(self.load_metrics(), platform)

    # ── Operations ──

    def list_statuses(self) -> AllPlatformStatuses:
        return build_statuses(self.load_credentials(), self.load_metrics())

    async def connect(self, platform: str, credentials: Any) -> AllPlatformStatuses:
        """Test a credential with a live fetch, then store it and its metrics.

        Nothing is written when the fetch fails.
        """
        spec = get_platform(platform)
        creds = spec.parse_credentials(credentials)

        try:
            fresh = await self.aggregator.fetch_one(platform, creds)
        except ConnectorError as e:
            logger.warning(
                f"Connection test failed: {e}",
                extra={"platform": platform, "operation": "connect", "status_code": e.status_code},
            )
            raise PlatformOperationError(spec.display_name, "connect", e) from e

        stored_creds = self.load_credentials().model_copy(update={platform: creds})
        self._save_credentials(stored_creds)

        stored_metrics = self.load_metrics().model_copy(
            update={platform: fresh, "last_synced_at": self.clock()}
        )
        self._save_metrics(stored_metrics)

        logger.info(f"Connected {spec.display_name}", extra={"platform": platform, "operation": "connect"})
        return build_statuses(stored_creds, stored_metrics)

    async def sync(self, platform: str) -> AllPlatformStatuses:
        """Refresh one connected platform; a failure keeps the cached record."""
        spec = get_platform(platform)
        stored_creds = self.load_credentials()
        creds = getattr(stored_creds, platform)
        if creds is None:
            raise PlatformNotConnectedError(platform)

        try:
            fresh = await self.aggregator.fetch_one(platform, creds)
        except ConnectorError as e:
            logger.warning(
                f"Sync failed: {e}",
                extra={"platform": platform, "operation": "sync", "status_code": e.status_code},
            )
            raise PlatformOperationError(spec.display_name, "sync", e) from e

        stored_metrics = self.load_metrics().model_copy(
            update={platform: fresh, "last_synced_at": self.clock()}
        )
        self._save_metrics(stored_metrics)
        return build_statuses(stored_creds, stored_metrics)

    async def sync_all(self) -> AllPlatformStatuses:
        """Bulk refresh; platforms that fail keep their previous cached record."""
        stored_creds = self.load_credentials()
        fresh = await self.aggregator.fetch_all(stored_creds)

        updates = {
            key: getattr(fresh, key)
            for key in PLATFORMS
            if getattr(fresh, key) is not None
        }
        stored_metrics = self.load_metrics().model_copy(
            update={**updates, "last_synced_at": fresh.last_synced_at}
        )
        self._save_metrics(stored_metrics)
        return build_statuses(stored_creds, stored_metrics)

    def disconnect(self, platform: str) -> AllPlatformStatuses:
        """Remove a platform's credential and cached metrics."""
        get_platform(platform)
        stored_creds = self.load_credentials().model_copy(update={platform: None})
        self._save_credentials(stored_creds)

        stored_metrics = self.load_metrics().model_copy(update={platform: None})
        self._save_metrics(stored_metrics)

        logger.info("Disconnected platform", extra={"platform": platform, "operation": "disconnect"})
        return build_statuses(stored_creds, stored_metrics)

    def get_prompt_context(self) -> str:
        return summarize(self.load_metrics())
