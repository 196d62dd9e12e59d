"""HTTP client for the content store REST API.

Implements the ports the authoring side consumes (ContentStorePort,
ImageUploaderPort) plus the moderation and distribution calls. Every
transport, timeout and status failure comes back as a ContentHubError:

- 401 -> Unauthorized (no usable credential), 403 -> Unauthorized
- 400/422 -> ValidationFailed, or MissingReason when the server says so
- 404 -> NotFound, 409 -> VersionConflict or InvalidTransitionError
- anything else -> PersistenceFailed with the server's message
- timeouts and connection errors -> PersistenceFailed (UploadFailed for uploads)

No retries are attempted.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx

from contenthub.components.submission.models import GENERIC_SAVE_ERROR
from contenthub.domain.errors import (
    ContentHubError,
    ContentValidationError,
    InvalidTransitionError,
    MissingReason,
    NotFound,
    PersistenceFailed,
    Unauthorized,
    UploadFailed,
    ValidationFailed,
    VersionConflict,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Credentials:
    """Bearer token issued by the auth collaborator."""

    token: str | None = None

    def headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


def _error_detail(response: httpx.Response) -> tuple[str | None, dict[str, Any]]:
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return (text or None), {}
    if not isinstance(body, dict):
        return None, {}

    detail = body.get("detail")
    if isinstance(detail, list):
        # FastAPI request validation errors
        detail = "; ".join(str(item.get("msg", item)) for item in detail if item)
    return (str(detail) if detail else None), body


def error_from_response(response: httpx.Response, *, upload: bool = False) -> ContentHubError:
    """Translate a non-2xx response into the error taxonomy."""
    detail, body = _error_detail(response)
    code = body.get("code")
    status = response.status_code

    if status == 401:
        return Unauthorized(detail or "Not authenticated", authenticated=False)
    if status == 403:
        return Unauthorized(detail or "Not authorized")
    if upload:
        return UploadFailed(detail or "Failed to upload image")
    if code == "missing_reason":
        return MissingReason(detail or "A rejection reason is required")
    if status in (400, 422):
        errors = [
            ContentValidationError(code=e.get("code", "invalid"), message=e.get("message", ""),
                                   field=e.get("field"))
            for e in body.get("errors", [])
            if isinstance(e, dict)
        ]
        if not errors:
            errors = [
                ContentValidationError(code=code or "invalid", message=detail or "Invalid request")
            ]
        return ValidationFailed(errors, message=detail)
    if status == 404:
        return NotFound(detail or "Not found")
    if status == 409 and code == "version_conflict":
        return VersionConflict(int(body.get("expected", 0)), int(body.get("actual", 0)))
    if status == 409 and code == "invalid_transition":
        return InvalidTransitionError(
            body.get("fromStatus"), str(body.get("toStatus", "")), str(body.get("reason", ""))
        )
    return PersistenceFailed(detail or GENERIC_SAVE_ERROR, status_code=status)


class ContentHubClient:
    """Synchronous client; one request per call."""

    def __init__(
        self,
        base_url: str,
        credentials: Credentials | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._credentials = credentials or Credentials()
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_env(cls, credentials: Credentials | None = None) -> ContentHubClient:
        return cls(os.environ.get("HUB_API_URL", "http://localhost:8000"), credentials)

    def with_credentials(self, credentials: Credentials) -> None:
        self._credentials = credentials

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ContentHubClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        upload: bool = False,
        **kwargs: Any,
    ) -> Any:
        failure = UploadFailed if upload else PersistenceFailed
        try:
            response = self._client.request(
                method, path, headers=self._credentials.headers(), **kwargs
            )
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out", method, path)
            raise failure("Request timed out") from e
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise failure(f"Could not reach content store: {e}") from e

        if response.is_error:
            raise error_from_response(response, upload=upload)
        if not response.content:
            return {}
        return response.json()

    # --- ContentStorePort ---

    def create_content(self, payload: dict[str, Any]) -> str:
        data = self._request("POST", "/content/submit", json=payload)
        return str(data["id"])

    def update_content(self, content_id: str, payload: dict[str, Any]) -> int | None:
        data = self._request("PUT", f"/content/{content_id}", json=payload)
        version = data.get("version")
        return int(version) if version is not None else None

    def fetch_content(self, content_id: str) -> dict[str, Any]:
        data: dict[str, Any] = self._request("GET", f"/content/{content_id}")
        return data

    def list_content(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        data: dict[str, Any] = self._request("GET", "/content", params=params)
        return data

    # --- ImageUploaderPort ---

    def upload_image(self, filename: str, data: bytes, content_type: str) -> str:
        body = self._request(
            "POST",
            "/upload/image",
            upload=True,
            files={"image": (filename, data, content_type)},
        )
        url = body.get("url")
        if not url:
            raise UploadFailed("Upload response did not include a URL")
        return str(url)

    # --- Review ---

    def approve(self, content_id: str) -> dict[str, Any]:
        data: dict[str, Any] = self._request(
            "PUT", f"/content/{content_id}/status", json={"status": "verified"}
        )
        return data

    def reject(self, content_id: str, reason: str | None) -> dict[str, Any]:
        # Checked before any network call
        if reason is None or not reason.strip():
            raise MissingReason()
        data: dict[str, Any] = self._request(
            "PUT",
            f"/content/{content_id}/status",
            json={"status": "rejected", "reason": reason.strip()},
        )
        return data

    def bulk_review(
        self,
        content_ids: list[str],
        status: str,
        reason: str | None = None,
    ) -> dict[str, Any]:
        if status == "rejected" and (reason is None or not reason.strip()):
            raise MissingReason()
        body: dict[str, Any] = {"ids": [str(i) for i in content_ids], "status": status}
        if reason:
            body["reason"] = reason.strip()
        data: dict[str, Any] = self._request("POST", "/content/review/bulk", json=body)
        return data

    # --- Distribution ---

    def list_hubs(self) -> list[dict[str, Any]]:
        data = self._request("GET", "/edge-hubs")
        return list(data.get("items", []))

    def assign(self, hub_id: str, content_id: str) -> dict[str, Any]:
        data: dict[str, Any] = self._request(
            "POST", f"/edge-hubs/{hub_id}/content/{content_id}"
        )
        return data

    def unassign(self, hub_id: str, content_id: str) -> dict[str, Any]:
        data: dict[str, Any] = self._request(
            "DELETE", f"/edge-hubs/{hub_id}/content/{content_id}"
        )
        return data

    def list_hub_content(
        self,
        hub_id: str,
        *,
        assigned: str = "all",
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"assigned": assigned, "page": page, "limit": limit}
        if search:
            params["search"] = search
        data: dict[str, Any] = self._request("GET", f"/edge-hubs/{hub_id}/content", params=params)
        return data
