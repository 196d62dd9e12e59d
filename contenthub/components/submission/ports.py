"""
Submission component port definitions.
"""

from __future__ import annotations

from typing import Any, Protocol


class ContentStorePort(Protocol):
    """The content store as seen from the authoring side."""

    def create_content(self, payload: dict[str, Any]) -> str:
        """``POST /content/submit``. Returns the new content id."""
        ...

    def update_content(self, content_id: str, payload: dict[str, Any]) -> int | None:
        """``PUT /content/{id}``. Returns the new version when the store reports one."""
        ...

    def fetch_content(self, content_id: str) -> dict[str, Any]:
        """``GET /content/{id}``. Returns the raw wire record."""
        ...
