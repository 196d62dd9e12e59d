"""
Distribution component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from contenthub.domain.entities import (
    AssignedFilter,
    Content,
    ContentHubAssignment,
    ContentStatus,
    EdgeHub,
    HubContentItem,
)


class HubRepoPort(Protocol):
    def get_by_hub_id(self, hub_id: str) -> EdgeHub | None: ...
    def list(self) -> list[EdgeHub]: ...
    def save(self, hub: EdgeHub) -> EdgeHub: ...


class ContentLookupPort(Protocol):
    def get_by_id(self, content_id: UUID) -> Content | None: ...


class AssignmentRepoPort(Protocol):
    """Join rows between content and hubs, unique per pair."""

    def add(self, assignment: ContentHubAssignment) -> bool:
        """Insert unless the pair exists. Returns True if a row was created."""
        ...

    def remove(self, content_id: UUID, hub_pk: UUID) -> bool:
        """Delete the pair if present. Returns True if a row was deleted."""
        ...

    def exists(self, content_id: UUID, hub_pk: UUID) -> bool: ...

    def list_hub_content(
        self,
        hub_pk: UUID,
        *,
        assigned: AssignedFilter = "all",
        search: str | None = None,
        status: ContentStatus | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[HubContentItem], int]:
        """Content joined with an is_assigned flag for ``hub_pk``."""
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
