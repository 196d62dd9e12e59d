"""
Review component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from contenthub.domain.entities import Content, ContentStatus


class ReviewRepoPort(Protocol):
    def get_by_id(self, content_id: UUID) -> Content | None: ...

    def transition_status(
        self,
        content_id: UUID,
        from_status: ContentStatus,
        to_status: ContentStatus,
        *,
        reason: str | None,
        reviewer_id: UUID | None,
        now: datetime,
    ) -> bool: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
