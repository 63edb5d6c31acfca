"""FunnelScope — Stored Document Model."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class StoredDocument(SQLModel, table=True):
    """One JSON document per key (``platform-credentials``, ``platform-metrics``).

    Writes replace the whole payload; there is no per-field merge here.
    """

    __tablename__ = "documents"

    key: str = Field(primary_key=True, description="Document name")
    payload_json: str = Field(description="Full JSON document")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
