"""FunnelScope — Connection Status Models (derived, never persisted)."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class PreviewItem(BaseModel):
    """A key metric already formatted for display."""

    label: str
    value: str


class ConnectionStatus(BaseModel):
    connected: bool = False
    last_synced: Optional[datetime] = None
    preview: Optional[List[PreviewItem]] = None  # None until metrics are cached


class AllPlatformStatuses(BaseModel):
    email_marketing: ConnectionStatus = ConnectionStatus()
    storefront: ConnectionStatus = ConnectionStatus()
    web_analytics: ConnectionStatus = ConnectionStatus()
    paid_ads: ConnectionStatus = ConnectionStatus()
