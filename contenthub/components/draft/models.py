"""
Draft component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from contenthub.domain.errors import ContentValidationError


class DraftStep(IntEnum):
    METADATA = 1
    BODY = 2
    QUESTIONS = 3


STEP_NAMES: dict[DraftStep, str] = {
    DraftStep.METADATA: "Metadata",
    DraftStep.BODY: "Body",
    DraftStep.QUESTIONS: "Questions",
}

FIRST_STEP = DraftStep.METADATA
LAST_STEP = DraftStep.QUESTIONS


@dataclass(frozen=True)
class StepResult:
    """Outcome of a navigation request."""

    step: DraftStep
    moved: bool
    errors: list[ContentValidationError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.moved and not self.errors
