"""Data models for persisted version slots."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class VersionRecord(BaseModel):
    """The committed version of one named slot.

    Attributes:
        version: Integer value of the last committed version.
        updated_at: When the version was committed.
    """

    version: int = Field(..., ge=0, description="Committed version value")
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the version was committed",
    )
