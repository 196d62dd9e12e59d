"""
Review component - moderator status transitions (pending/verified/rejected).
"""

from .component import ReviewStateMachine, run_approve, run_bulk_review, run_reject
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

__all__ = [
    # Entry points
    "ReviewStateMachine",
    "run_approve",
    "run_bulk_review",
    "run_reject",
    # Input models
    "ApproveInput",
    "BulkReviewInput",
    "RejectInput",
    "ReviewDecision",
    # Output models
    "BulkItemFailure",
    "BulkReviewOutput",
    "ReviewOutput",
    # Ports
    "ReviewRepoPort",
    "TimePort",
]
