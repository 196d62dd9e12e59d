"""
Draft component - multi-step authoring state machine.

Steps: Metadata (1) -> Body (2) -> Questions (3)

Guards:
- leaving Metadata requires title, >=1 category, >=1 author, language, age group
- leaving Body requires non-empty body markup
- Questions has no guard (questions are optional)

Navigation that fails a guard is a no-op and reports the failing fields.
Submission readiness requires the Metadata and Body guards from any step.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from contenthub.domain.encoding import decode_questions, decode_string_list
from contenthub.domain.errors import ContentValidationError, ValidationFailed
from contenthub.domain.questions import Question
from contenthub.rules.models import DraftRules

from .models import FIRST_STEP, LAST_STEP, DraftStep, StepResult

logger = logging.getLogger(__name__)

# Older records used these keys before the rename
_LEGACY_KEYS: dict[str, str] = {
    "bodyMarkup": "htmlContent",
    "categoryIds": "categoryId",
    "authorIds": "authorId",
    "questions": "comprehensionQuestions",
}


# --- Validation Functions ---


def validate_metadata(draft: DraftForm) -> list[ContentValidationError]:
    """Step 1 guard."""
    errors: list[ContentValidationError] = []

    if not draft.title:
        errors.append(
            ContentValidationError(
                code="title_required", message="Title is required", field="title"
            )
        )
    if len(draft.category_ids) < 1:
        errors.append(
            ContentValidationError(
                code="category_required",
                message="At least one category is required",
                field="category_ids",
            )
        )
    if len(draft.author_ids) < 1:
        errors.append(
            ContentValidationError(
                code="author_required",
                message="At least one author is required",
                field="author_ids",
            )
        )
    if not draft.language:
        errors.append(
            ContentValidationError(
                code="language_required", message="Language is required", field="language"
            )
        )
    if not draft.age_group_id:
        errors.append(
            ContentValidationError(
                code="age_group_required",
                message="Age group is required",
                field="age_group_id",
            )
        )

    return errors


def validate_body(draft: DraftForm) -> list[ContentValidationError]:
    """Step 2 guard."""
    if not draft.body_markup:
        return [
            ContentValidationError(
                code="body_required", message="Content body is required", field="body_markup"
            )
        ]
    return []


def _record_value(record: Mapping[str, Any], key: str) -> Any:
    if key in record and record[key] is not None:
        return record[key]
    legacy = _LEGACY_KEYS.get(key)
    if legacy is not None:
        return record.get(legacy)
    return None


def _as_id_list(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        if raw.lstrip().startswith("["):
            return decode_string_list(raw, field="ids")
        return [raw] if raw.strip() else []
    if isinstance(raw, (list, tuple, set)):
        return [str(v) for v in raw]
    return [str(raw)]


# --- Draft State Machine ---


class DraftForm:
    """
    Client-held draft of a Content item.

    Not persisted on its own: ContentSubmissionService turns it into a store
    request. Fields are plain attributes and may be set directly.
    """

    def __init__(
        self,
        *,
        content_id: str | None = None,
        rules: DraftRules | None = None,
    ) -> None:
        rules = rules or DraftRules()

        self.content_id = content_id
        self.current_step: DraftStep = FIRST_STEP

        self.title = ""
        self.description = ""
        self.body_markup = ""
        self.cover_image_url: str | None = None
        self.language = rules.default_language
        self.original_language = rules.default_original_language
        self.category_ids: list[str] = []
        self.author_ids: list[str] = []
        self.age_group_id = ""
        self.target_countries: list[str] = []
        self.questions: list[Question] = []

        # Known only in edit mode
        self.status: str | None = None
        self.version: int | None = None

    @property
    def is_edit(self) -> bool:
        return self.content_id is not None

    # --- Guards ---

    def validate(self, step: DraftStep | int) -> list[ContentValidationError]:
        step = DraftStep(step)
        if step == DraftStep.METADATA:
            return validate_metadata(self)
        if step == DraftStep.BODY:
            return validate_body(self)
        return []

    def is_step_valid(self, step: DraftStep | int) -> bool:
        return not self.validate(step)

    def submission_errors(self) -> list[ContentValidationError]:
        return self.validate(DraftStep.METADATA) + self.validate(DraftStep.BODY)

    def can_submit(self) -> bool:
        return not self.submission_errors()

    def ensure_submittable(self) -> None:
        """Raises ValidationFailed naming every failing guard."""
        errors = self.submission_errors()
        if errors:
            raise ValidationFailed(errors)

    # --- Navigation ---

    def advance(self) -> StepResult:
        step = self.current_step
        if step >= LAST_STEP:
            return StepResult(step=step, moved=False)

        errors = self.validate(step)
        if errors:
            logger.debug(
                "Draft advance blocked at step %s: %s", int(step), [e.code for e in errors]
            )
            return StepResult(step=step, moved=False, errors=errors)

        self.current_step = DraftStep(step + 1)
        return StepResult(step=self.current_step, moved=True)

    def retreat(self) -> StepResult:
        if self.current_step <= FIRST_STEP:
            return StepResult(step=self.current_step, moved=False)
        self.current_step = DraftStep(self.current_step - 1)
        return StepResult(step=self.current_step, moved=True)

    def go_to(self, step: DraftStep | int) -> StepResult:
        """
        Jump to a step. Backwards is always allowed; forwards only over steps
        whose guards pass.
        """
        target = DraftStep(step)
        if target <= self.current_step:
            moved = target != self.current_step
            self.current_step = target
            return StepResult(step=target, moved=moved)

        for s in range(self.current_step, target):
            errors = self.validate(s)
            if errors:
                return StepResult(step=self.current_step, moved=False, errors=errors)

        self.current_step = target
        return StepResult(step=target, moved=True)

    # --- Questions ---

    def add_question(self, question: Question) -> None:
        self.questions.append(question)

    def replace_question(self, index: int, question: Question) -> None:
        self.questions[index] = question

    def remove_question(self, index: int) -> Question:
        return self.questions.pop(index)

    def move_question(self, index: int, new_index: int) -> None:
        question = self.questions.pop(index)
        self.questions.insert(new_index, question)

    # --- Cover image (written by the upload flow) ---

    def attach_cover(self, url: str) -> None:
        self.cover_image_url = url

    def clear_cover(self) -> None:
        self.cover_image_url = None

    # --- Edit mode ---

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        *,
        rules: DraftRules | None = None,
    ) -> DraftForm:
        """
        Hydrate a draft from a persisted Content record (wire dict).

        questions and targetCountries are decoded tolerantly: string or
        double-encoded string values are accepted and malformed values become
        empty lists. This never raises for bad list fields.
        """
        content_id = record.get("id")
        draft = cls(content_id=str(content_id) if content_id is not None else None, rules=rules)

        draft.title = record.get("title") or ""
        draft.description = record.get("description") or ""
        draft.body_markup = _record_value(record, "bodyMarkup") or ""
        draft.cover_image_url = record.get("coverImageUrl") or None
        draft.language = record.get("language") or draft.language
        draft.original_language = record.get("originalLanguage") or draft.original_language
        draft.category_ids = _as_id_list(_record_value(record, "categoryIds"))
        draft.author_ids = _as_id_list(_record_value(record, "authorIds"))
        draft.age_group_id = record.get("ageGroupId") or ""
        draft.target_countries = decode_string_list(record.get("targetCountries"))
        draft.questions = decode_questions(_record_value(record, "questions"))

        draft.status = record.get("status")
        version = record.get("version")
        draft.version = int(version) if version is not None else None

        return draft
