"""
Review component - moderation state machine for Content status.

State Machine:
- pending -> verified (approve)
- pending -> rejected (reject, reason required)
- verified, rejected: terminal for review (editing stays possible)

Guards, in order:
- reject: reason must be non-blank (before anything else, for every role)
- actor must hold a reviewer role (admin, moderator by default)
- content must exist and be pending

Writes are compare-and-set on the current status, so a transition either
fully applies or not at all. Hub assignments are not touched.
"""

from __future__ import annotations

import logging
from uuid import UUID

from contenthub.domain.entities import Content, ContentStatus, User
from contenthub.domain.errors import (
    ContentHubError,
    ContentValidationError,
    InvalidTransitionError,
    MissingReason,
    NotFound,
    ValidationFailed,
)
from contenthub.domain.policy import require_role
from contenthub.rules.models import ReviewRules

from .models import (
    ApproveInput,
    BulkItemFailure,
    BulkReviewInput,
    BulkReviewOutput,
    RejectInput,
    ReviewDecision,
    ReviewOutput,
)
from .ports import ReviewRepoPort, TimePort

logger = logging.getLogger(__name__)


# --- State Machine ---


class ReviewStateMachine:
    """Transition table for review status."""

    def __init__(self, transitions: dict[str, list[str]] | None = None) -> None:
        self._transitions = transitions or ReviewRules().status_machine

    def can_transition(self, from_status: str, to_status: str) -> bool:
        return to_status in self._transitions.get(from_status, [])

    def allowed_transitions(self, status: str) -> list[str]:
        return list(self._transitions.get(status, []))

    def check(self, from_status: str | None, to_status: str) -> None:
        """Raises InvalidTransitionError if not allowed."""
        if from_status is None:
            raise InvalidTransitionError(None, to_status, "content not found")
        if not self.can_transition(from_status, to_status):
            allowed = self.allowed_transitions(from_status)
            raise InvalidTransitionError(
                from_status, to_status, f"allowed: {allowed}" if allowed else "already reviewed"
            )


def _require_reason(reason: str | None) -> str:
    if reason is None or not reason.strip():
        raise MissingReason()
    return reason.strip()


def _require_reviewer(actor: User | None, rules: ReviewRules) -> User:
    return require_role(actor, rules.reviewer_roles, action="review content")


def _find(repo: ReviewRepoPort, content_id: UUID | str) -> Content | None:
    # A malformed id names no content
    if not isinstance(content_id, UUID):
        try:
            content_id = UUID(content_id)
        except ValueError:
            return None
    return repo.get_by_id(content_id)


def _apply(
    raw_id: UUID | str,
    to_status: ReviewDecision,
    *,
    reviewer: User,
    reason: str | None,
    repo: ReviewRepoPort,
    time: TimePort,
    machine: ReviewStateMachine,
) -> ReviewOutput:
    content = _find(repo, raw_id)
    if content is None:
        raise InvalidTransitionError(None, to_status, "content not found")
    machine.check(content.status, to_status)

    content_id = content.id
    from_status: ContentStatus = content.status
    applied = repo.transition_status(
        content_id,
        from_status,
        to_status,
        reason=reason,
        reviewer_id=reviewer.id,
        now=time.now_utc(),
    )
    if not applied:
        # Lost a race with another reviewer; report what is stored now
        current = repo.get_by_id(content_id)
        raise InvalidTransitionError(current.status if current else None, to_status)

    updated = repo.get_by_id(content_id)
    if updated is None:
        raise NotFound(f"Content {content_id} not found")

    logger.info("Content %s %s -> %s by %s", content_id, from_status, to_status, reviewer.id)
    return ReviewOutput(content=updated)


# --- Component Entry Points ---


def run_approve(
    inp: ApproveInput,
    *,
    repo: ReviewRepoPort,
    time: TimePort,
    rules: ReviewRules | None = None,
) -> ReviewOutput:
    """pending -> verified."""
    rules = rules or ReviewRules()
    reviewer = _require_reviewer(inp.actor, rules)
    return _apply(
        inp.content_id,
        "verified",
        reviewer=reviewer,
        reason=None,
        repo=repo,
        time=time,
        machine=ReviewStateMachine(rules.status_machine),
    )


def run_reject(
    inp: RejectInput,
    *,
    repo: ReviewRepoPort,
    time: TimePort,
    rules: ReviewRules | None = None,
) -> ReviewOutput:
    """pending -> rejected, recording the reason."""
    rules = rules or ReviewRules()
    reason = _require_reason(inp.reason)
    reviewer = _require_reviewer(inp.actor, rules)
    return _apply(
        inp.content_id,
        "rejected",
        reviewer=reviewer,
        reason=reason,
        repo=repo,
        time=time,
        machine=ReviewStateMachine(rules.status_machine),
    )


def run_bulk_review(
    inp: BulkReviewInput,
    *,
    repo: ReviewRepoPort,
    time: TimePort,
    rules: ReviewRules | None = None,
) -> BulkReviewOutput:
    """
    Quick approve/reject of many items.

    Reason and role are checked once up front with the same rules as the
    single-item path; each item then gets the same state guard.
    """
    rules = rules or ReviewRules()

    reason: str | None = None
    if inp.status == "rejected":
        reason = _require_reason(inp.reason)
    reviewer = _require_reviewer(inp.actor, rules)

    if len(inp.content_ids) > rules.max_bulk_items:
        raise ValidationFailed(
            [
                ContentValidationError(
                    code="too_many_items",
                    message=f"At most {rules.max_bulk_items} items per bulk review",
                    field="ids",
                )
            ]
        )

    machine = ReviewStateMachine(rules.status_machine)
    succeeded: list[UUID] = []
    failed: list[BulkItemFailure] = []

    for content_id in dict.fromkeys(inp.content_ids):
        try:
            _apply(
                content_id,
                inp.status,
                reviewer=reviewer,
                reason=reason,
                repo=repo,
                time=time,
                machine=machine,
            )
        except ContentHubError as e:
            failed.append(BulkItemFailure(content_id=content_id, code=e.code, message=e.message))
        else:
            succeeded.append(content_id)

    logger.info(
        "Bulk review to %s by %s: %d succeeded, %d failed",
        inp.status,
        reviewer.id,
        len(succeeded),
        len(failed),
    )
    return BulkReviewOutput(succeeded=succeeded, failed=failed)
