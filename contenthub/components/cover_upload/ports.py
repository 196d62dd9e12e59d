"""
Cover upload component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class ImageUploaderPort(Protocol):
    """Remote image upload (``POST /upload/image``)."""

    def upload_image(self, filename: str, data: bytes, content_type: str) -> str:
        """Upload and return the public URL. Raises UploadFailed."""
        ...


class CoverTargetPort(Protocol):
    """The draft the flow writes its URL into."""

    cover_image_url: str | None

    def attach_cover(self, url: str) -> None:
        ...

    def clear_cover(self) -> None:
        ...
