"""Data models for the sources module."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class SourceType(str, Enum):
    """Adapter kinds a source can be collected with."""

    NEWS = "news"
    COMMUNITY = "community"
    VIDEO = "video"


# Stored type strings that map onto an adapter kind. "youtube" is accepted
# for rows written by earlier deployments.
_TYPE_ALIASES: dict[str, SourceType] = {
    "news": SourceType.NEWS,
    "community": SourceType.COMMUNITY,
    "video": SourceType.VIDEO,
    "youtube": SourceType.VIDEO,
}


def parse_source_type(value: str) -> SourceType | None:
    """Map a stored type string to a SourceType, or None when unknown."""
    return _TYPE_ALIASES.get((value or "").strip().lower())


@dataclass
class Source:
    """A site, community board or channel that keywords are collected from.

    ``type`` keeps the raw stored string; ``kind`` is resolved once at load
    time and is None for types no adapter handles. ``url`` is interpreted by
    the adapter (site base URL, channel handle or channel id).
    """

    name: str
    type: str
    url: str = ""
    notes: str = ""
    active: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    kind: SourceType | None = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.kind = parse_source_type(self.type)
