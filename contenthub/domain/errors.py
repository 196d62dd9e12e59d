"""
Error taxonomy shared by the authoring core, the content store and the API.

Every error carries a stable ``code`` (sent on the wire as ``code``) and a
human-readable ``message`` (sent as ``detail``).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ContentValidationError:
    """A single failed field guard."""

    code: str
    message: str
    field: str | None = None


class ContentHubError(Exception):
    """Base class for all lifecycle errors."""

    code = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationFailed(ContentHubError):
    """Draft or payload failed one or more field guards."""

    code = "validation_failed"

    def __init__(self, errors: list[ContentValidationError], message: str | None = None) -> None:
        self.errors = list(errors)
        if message is None:
            message = "; ".join(e.message for e in self.errors) or "Validation failed"
        super().__init__(message)

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors if e.field]


class Unauthorized(ContentHubError):
    """Missing/expired credential, or the actor lacks the required role."""

    code = "unauthorized"

    def __init__(self, message: str = "Not authorized", *, authenticated: bool = True) -> None:
        # authenticated=False means no usable credential at all (401), otherwise 403
        self.authenticated = authenticated
        super().__init__(message)


class InvalidTransitionError(ContentHubError):
    """Review action from a non-pending state, or against unknown content."""

    code = "invalid_transition"

    def __init__(
        self,
        from_status: str | None,
        to_status: str,
        reason: str = "",
    ) -> None:
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        if from_status is None:
            msg = f"Cannot transition unknown content to '{to_status}'"
        else:
            msg = f"Cannot transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class MissingReason(ContentHubError):
    """Reject attempted without a reason."""

    code = "missing_reason"

    def __init__(self, message: str = "A rejection reason is required") -> None:
        super().__init__(message)


class UploadFailed(ContentHubError):
    """Cover image rejected locally or the upload call failed."""

    code = "upload_failed"


class PersistenceFailed(ContentHubError):
    """Store-layer failure; message is the collaborator's when available."""

    code = "persistence_failed"

    def __init__(
        self, message: str = "Failed to save content", status_code: int | None = None
    ) -> None:
        self.status_code = status_code
        super().__init__(message)


class NotFound(PersistenceFailed):
    code = "not_found"

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message, status_code=404)


class VersionConflict(PersistenceFailed):
    """Compare-and-set update lost against a concurrent write."""

    code = "version_conflict"

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Content was modified by someone else (expected version {expected}, found {actual})",
            status_code=409,
        )


class DecodeFailed(ContentHubError):
    """Malformed persisted JSON. Internal only, recovered by the caller."""

    code = "decode_failed"
