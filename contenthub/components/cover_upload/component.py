"""
Cover upload component - upload-then-reference flow for a draft's cover image.

State machine:
- idle -> uploading (file passes local checks)
- idle|attached|failed -> failed (file rejected locally, draft untouched)
- uploading -> attached(url) (upload succeeded, url written into the draft)
- uploading -> failed (upload failed, preview cleared, draft rolled back)
- attached|failed -> idle (remove: preview and draft url cleared)

Re-selecting while attached replaces the cover. The remote asset of a
replaced or removed cover is not deleted.
"""

from __future__ import annotations

import base64
import logging

from contenthub.domain.errors import (
    ContentHubError,
    ContentValidationError,
    Unauthorized,
    UploadFailed,
)
from contenthub.rules.models import UploadsRules

from .models import CoverUploadSnapshot, SelectedFile, UploadState
from .ports import CoverTargetPort, ImageUploaderPort

logger = logging.getLogger(__name__)


# --- Validation Functions ---


def validate_mime_type(content_type: str, rules: UploadsRules) -> list[ContentValidationError]:
    if not content_type or not content_type.startswith(rules.allowed_mime_prefix):
        return [
            ContentValidationError(
                code="invalid_mime_type",
                message="Please select an image file",
                field="content_type",
            )
        ]
    return []


def validate_size(size: int, rules: UploadsRules) -> list[ContentValidationError]:
    if size > rules.max_upload_bytes:
        max_mb = rules.max_upload_bytes / (1024 * 1024)
        return [
            ContentValidationError(
                code="file_too_large",
                message=f"Image size must be less than {max_mb:g}MB",
                field="file",
            )
        ]
    return []


def validate_file(file: SelectedFile, rules: UploadsRules) -> list[ContentValidationError]:
    return validate_mime_type(file.content_type, rules) + validate_size(file.size, rules)


def make_preview(file: SelectedFile) -> str:
    """Local preview as a data URI (no network involved)."""
    encoded = base64.b64encode(file.data).decode("ascii")
    return f"data:{file.content_type};base64,{encoded}"


# --- Flow ---


class CoverImageFlow:
    def __init__(
        self,
        draft: CoverTargetPort,
        uploader: ImageUploaderPort,
        rules: UploadsRules | None = None,
    ) -> None:
        self._draft = draft
        self._uploader = uploader
        self._rules = rules or UploadsRules()

        self.state: UploadState = "idle"
        self.preview_url: str | None = None
        self.url: str | None = None
        self.error: str | None = None

        # Edit mode: a draft loaded with a cover starts attached
        if draft.cover_image_url:
            self.state = "attached"
            self.url = draft.cover_image_url
            self.preview_url = draft.cover_image_url

    def snapshot(self) -> CoverUploadSnapshot:
        return CoverUploadSnapshot(
            state=self.state,
            preview_url=self.preview_url,
            url=self.url,
            error=self.error,
        )

    @property
    def is_uploading(self) -> bool:
        return self.state == "uploading"

    def select_file(self, file: SelectedFile) -> str:
        """
        Validate, preview and upload ``file``; attach the resulting URL.

        Returns the attached URL. Raises UploadFailed (or Unauthorized) after
        moving to the failed state.
        """
        errors = validate_file(file, self._rules)
        if errors:
            # Local rejection leaves both the draft and any current preview alone
            self.state = "failed"
            self.error = errors[0].message
            logger.info("Cover image rejected locally: %s", [e.code for e in errors])
            raise UploadFailed(self.error)

        previous_url = self._draft.cover_image_url

        self.state = "uploading"
        self.error = None
        self.preview_url = make_preview(file)

        try:
            url = self._uploader.upload_image(file.filename, file.data, file.content_type)
        except ContentHubError as e:
            self.state = "failed"
            self.error = e.message
            self.preview_url = None
            self._restore(previous_url)
            logger.warning("Cover upload failed for %s: %s", file.filename, e.message)
            if isinstance(e, (UploadFailed, Unauthorized)):
                raise
            raise UploadFailed(e.message) from e

        self.state = "attached"
        self.url = url
        self._draft.attach_cover(url)
        return url

    def remove(self) -> bool:
        """Clear preview and the draft's cover. Only valid when attached or failed."""
        if self.state not in ("attached", "failed"):
            return False

        self.state = "idle"
        self.preview_url = None
        self.url = None
        self.error = None
        self._draft.clear_cover()
        return True

    def _restore(self, previous_url: str | None) -> None:
        if previous_url:
            self._draft.attach_cover(previous_url)
        else:
            self._draft.clear_cover()
        self.url = previous_url
