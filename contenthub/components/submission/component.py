"""
Submission component - persists a draft through the content store.

submit(draft, mode):
- re-checks the Metadata and Body guards (the UI guard is not trusted)
- update mode requires a content id
- questions and targetCountries are encoded exactly once
- create -> new id, update -> acknowledgement; status is owned by review

Store failures come back as PersistenceFailed with the store's message, or
Unauthorized. The draft is never modified by a failed submit.
"""

from __future__ import annotations

import logging
from typing import Any

from contenthub.components.draft import DraftForm
from contenthub.domain.encoding import encode_questions, encode_string_list
from contenthub.domain.errors import (
    ContentHubError,
    ContentValidationError,
    PersistenceFailed,
    ValidationFailed,
)
from contenthub.rules.models import DraftRules

from .models import GENERIC_SAVE_ERROR, SubmissionResult, SubmitMode
from .ports import ContentStorePort

logger = logging.getLogger(__name__)


def build_payload(draft: DraftForm) -> dict[str, Any]:
    """Wire body for ``POST /content/submit`` and ``PUT /content/{id}``."""
    # The form starts target countries with an empty placeholder row
    countries = [c.strip() for c in draft.target_countries if c and c.strip()]

    return {
        "title": draft.title,
        "description": draft.description,
        "bodyMarkup": draft.body_markup,
        "coverImageUrl": draft.cover_image_url,
        "language": draft.language,
        "originalLanguage": draft.original_language,
        "categoryIds": list(draft.category_ids),
        "authorIds": list(draft.author_ids),
        "ageGroupId": draft.age_group_id,
        "targetCountries": encode_string_list(countries),
        "questions": encode_questions(draft.questions),
    }


class ContentSubmissionService:
    def __init__(self, store: ContentStorePort, rules: DraftRules | None = None) -> None:
        self._store = store
        self._rules = rules or DraftRules()

    def submit(
        self,
        draft: DraftForm,
        mode: SubmitMode,
        *,
        expected_version: int | None = None,
    ) -> SubmissionResult:
        errors = draft.submission_errors()
        target_id = draft.content_id or ""
        if mode == "update" and not target_id:
            errors.append(
                ContentValidationError(
                    code="content_id_required",
                    message="Content id is required to update",
                    field="content_id",
                )
            )
        if errors:
            raise ValidationFailed(errors)

        payload = build_payload(draft)
        if expected_version is not None:
            payload["expectedVersion"] = expected_version

        version: int | None = None
        try:
            if mode == "create":
                target_id = self._store.create_content(payload)
            else:
                version = self._store.update_content(target_id, payload)
        except ContentHubError:
            raise
        except Exception as e:
            logger.exception("Unexpected store failure during %s", mode)
            raise PersistenceFailed(GENERIC_SAVE_ERROR) from e

        if mode == "create":
            logger.info("Submitted new content %s for review", target_id)
            return SubmissionResult(content_id=target_id, mode="create")

        if version is not None:
            draft.version = version
        logger.info("Updated content %s", target_id)
        return SubmissionResult(content_id=target_id, mode="update", version=version)

    def load(self, content_id: str) -> DraftForm:
        """Fetch a persisted Content and hydrate an edit-mode draft."""
        record = self._store.fetch_content(content_id)
        return DraftForm.from_record(record, rules=self._rules)
