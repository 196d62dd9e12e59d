"""
Review component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal
from uuid import UUID

from contenthub.domain.entities import Content, User

ReviewDecision = Literal["verified", "rejected"]


@dataclass(frozen=True)
class ApproveInput:
    actor: User | None
    content_id: UUID | str


@dataclass(frozen=True)
class RejectInput:
    actor: User | None
    content_id: UUID | str
    reason: str | None


@dataclass(frozen=True)
class BulkReviewInput:
    """Quick approve/reject from the review list."""

    actor: User | None
    content_ids: list[UUID]
    status: ReviewDecision
    reason: str | None = None


@dataclass(frozen=True)
class ReviewOutput:
    content: Content


@dataclass(frozen=True)
class BulkItemFailure:
    content_id: UUID
    code: str
    message: str


@dataclass(frozen=True)
class BulkReviewOutput:
    succeeded: list[UUID] = field(default_factory=list)
    failed: list[BulkItemFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed
