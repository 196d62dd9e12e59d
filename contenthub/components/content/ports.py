"""
Content component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from contenthub.domain.entities import Content, ContentStatus


class ContentRepoPort(Protocol):
    """Repository interface for content persistence."""

    def get_by_id(self, content_id: UUID) -> Content | None:
        """Get content by ID."""
        ...

    def save(self, content: Content) -> Content:
        """Insert content (full row)."""
        ...

    def update_fields(self, content: Content, *, expected_version: int | None = None) -> Content:
        """
        Write the editable fields of ``content`` and bump the stored version.

        Never touches status or review data. With ``expected_version`` the
        write only applies if the stored version still matches; otherwise
        raises VersionConflict. Returns the stored content.
        """
        ...

    def list(
        self,
        *,
        status: ContentStatus | None = None,
        search: str | None = None,
        contributor_id: UUID | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Content], int]:
        """List content with filters. Returns (items, total_count)."""
        ...

    def transition_status(
        self,
        content_id: UUID,
        from_status: ContentStatus,
        to_status: ContentStatus,
        *,
        reason: str | None,
        reviewer_id: UUID | None,
        now: datetime,
    ) -> bool:
        """
        Atomically move status from ``from_status`` to ``to_status``.

        Returns False (and writes nothing) if the stored status is no longer
        ``from_status``.
        """
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
