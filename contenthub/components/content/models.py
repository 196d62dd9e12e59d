"""
Content component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from contenthub.domain.entities import Content, ContentStatus, User

# --- Input Models ---


@dataclass(frozen=True)
class ContentFields:
    """Editable Content fields as submitted by the authoring client."""

    title: str
    language: str
    age_group_id: str
    description: str = ""
    body_markup: str = ""
    cover_image_url: str | None = None
    original_language: str = ""
    category_ids: list[str] = field(default_factory=list)
    author_ids: list[str] = field(default_factory=list)
    # JSON string or native list; decoded by the component
    target_countries: Any = None
    questions: Any = None


@dataclass(frozen=True)
class CreateContentInput:
    actor: User
    fields: ContentFields


@dataclass(frozen=True)
class UpdateContentInput:
    actor: User
    content_id: UUID
    fields: ContentFields
    expected_version: int | None = None


@dataclass(frozen=True)
class GetContentInput:
    actor: User
    content_id: UUID


@dataclass(frozen=True)
class ListContentInput:
    actor: User
    status: ContentStatus | None = None
    search: str | None = None
    page: int = 1
    limit: int = 10
    mine_only: bool = False


# --- Output Models ---


@dataclass(frozen=True)
class ContentOutput:
    content: Content


@dataclass(frozen=True)
class ContentListOutput:
    items: list[Content]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 1
        return max(1, -(-self.total // self.limit))
