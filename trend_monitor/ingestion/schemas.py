"""
Canonical collected-item schema.

All site adapters output this structure; the item store persists it
unchanged and the trend aggregator reads it back. Items are historical
facts: they reference their Source and Keyword by name/id only, so a later
deletion of either leaves stored items intact.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class Item(BaseModel):
    """A single normalized mention of a keyword on a source."""

    model_config = {"frozen": True}

    id: int | None = Field(default=None, description="Store-assigned row id")

    # Attribution (soft references)
    source_name: str = Field(..., description="Display name of the source")
    source_type: str = Field(..., description="Adapter kind: news, community, video")
    keyword_name: str = Field(..., description="Keyword text at collection time")
    keyword_id: str = Field(..., description="Keyword identifier at collection time")

    # Content
    title: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    content: str = Field(default="", description="Snippet or description, may be empty")

    # Timestamps
    published_at: datetime | None = Field(
        default=None,
        description="Publication time reported by the source, when known",
    )
    collected_at: datetime = Field(
        default_factory=_utc_now,
        description="UTC time the adapter produced the item",
    )
    timestamp: datetime | None = Field(
        default=None,
        description="Insertion time assigned by the store; None before persistence",
    )
