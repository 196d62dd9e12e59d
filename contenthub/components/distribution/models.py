"""
Distribution component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from contenthub.domain.entities import AssignedFilter, ContentStatus, EdgeHub, HubContentItem, User


@dataclass(frozen=True)
class AssignInput:
    actor: User | None
    hub_id: str
    content_id: UUID


@dataclass(frozen=True)
class UnassignInput:
    actor: User | None
    hub_id: str
    content_id: UUID


@dataclass(frozen=True)
class ListHubContentInput:
    actor: User | None
    hub_id: str
    assigned: AssignedFilter = "all"
    search: str | None = None
    status: ContentStatus | None = None
    page: int = 1
    limit: int = 10


@dataclass(frozen=True)
class AssignmentOutput:
    hub: EdgeHub
    content_id: UUID
    assigned: bool
    # False when the call was a no-op
    changed: bool


@dataclass(frozen=True)
class HubContentListOutput:
    hub: EdgeHub
    items: list[HubContentItem] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 1
        return max(1, -(-self.total // self.limit))
