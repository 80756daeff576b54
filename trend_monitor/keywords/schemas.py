"""Data models for tracked keywords."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

KeywordCategory = Literal["product", "brand", "trend", "event", "other"]

VALID_CATEGORIES: frozenset[str] = frozenset({
    "product",
    "brand",
    "trend",
    "event",
    "other",
})


@dataclass
class Keyword:
    """A keyword whose mentions are collected from every active source.

    Only ``active`` changes after creation; renaming means deleting and
    re-creating, which keeps historical items attributable by name.
    """

    name: str
    category: str = "other"
    description: str = ""
    active: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        self.name = self.name.strip()
        if not self.name:
            raise ValueError("Keyword name must not be empty")
        if self.category not in VALID_CATEGORIES:
            raise ValueError(
                f"Invalid category {self.category!r}. "
                f"Must be one of: {sorted(VALID_CATEGORIES)}"
            )
