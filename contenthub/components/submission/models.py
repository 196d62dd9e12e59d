"""
Submission component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SubmitMode = Literal["create", "update"]

GENERIC_SAVE_ERROR = "Failed to save content"


@dataclass(frozen=True)
class SubmissionResult:
    """Created id (create) or acknowledgement (update)."""

    content_id: str
    mode: SubmitMode
    version: int | None = None

    @property
    def created(self) -> bool:
        return self.mode == "create"
