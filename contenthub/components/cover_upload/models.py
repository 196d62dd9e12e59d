"""
Cover upload component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

UploadState = Literal["idle", "uploading", "attached", "failed"]


@dataclass(frozen=True)
class SelectedFile:
    """A file picked by the user, fully read into memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CoverUploadSnapshot:
    """Read-only view of the flow for rendering."""

    state: UploadState
    preview_url: str | None
    url: str | None
    error: str | None
