"""FunnelScope — Connection Status Builder.

Pure function of the two stored documents; recomputed on every request.
"""

from funnelscope.models.credentials import StoredCredentials
from funnelscope.models.metrics import StoredMetrics
from funnelscope.models.status import AllPlatformStatuses, ConnectionStatus
from funnelscope.services.registry import PLATFORMS


def build_statuses(
    credentials: StoredCredentials, metrics: StoredMetrics
) -> AllPlatformStatuses:
    statuses = {}
    for key, spec in PLATFORMS.items():
        cached = getattr(metrics, key)
        statuses[key] = ConnectionStatus(
            connected=getattr(credentials, key) is not None,
            last_synced=cached.fetched_at if cached is not None else None,
            preview=spec.preview(cached) if cached is not None else None,
        )
    return AllPlatformStatuses(**statuses)
