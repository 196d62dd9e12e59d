"""
Content component - server-side content store operations.

- create: validated fields, status=pending, contributor = actor
- update: field changes only; status, contributor and review data untouched.
  Owners may edit while pending, privileged editors at any status.
  Optional expected_version turns the write into compare-and-set.
- get/list: permission-checked reads; list supports status, search,
  "mine only" and pagination.

Submitted questions/targetCountries may be JSON strings or native lists.
They are validated strictly here and stored canonically (encoded once).
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from contenthub.domain.encoding import decode_json_list
from contenthub.domain.entities import Content
from contenthub.domain.errors import (
    ContentValidationError,
    DecodeFailed,
    NotFound,
    Unauthorized,
    ValidationFailed,
    VersionConflict,
)
from contenthub.domain.policy import PolicyEngine
from contenthub.domain.questions import Question, parse_questions
from contenthub.rules.models import ContentRules

from .models import (
    ContentFields,
    ContentListOutput,
    ContentOutput,
    CreateContentInput,
    GetContentInput,
    ListContentInput,
    UpdateContentInput,
)
from .ports import ContentRepoPort, TimePort

logger = logging.getLogger(__name__)


# --- Validation Functions ---


def validate_content_fields(
    fields: ContentFields,
    rules: ContentRules | None = None,
) -> list[ContentValidationError]:
    """Persistence-time guards (same as the draft's Metadata and Body guards)."""
    rules = rules or ContentRules()
    errors: list[ContentValidationError] = []

    title = fields.title or ""
    if not title:
        errors.append(
            ContentValidationError(
                code="title_required", message="Title is required", field="title"
            )
        )
    elif len(title) > rules.title_max_length:
        errors.append(
            ContentValidationError(
                code="title_too_long",
                message=f"Title must be at most {rules.title_max_length} characters",
                field="title",
            )
        )

    if not [c for c in fields.category_ids if c]:
        errors.append(
            ContentValidationError(
                code="category_required",
                message="At least one category is required",
                field="category_ids",
            )
        )
    if not [a for a in fields.author_ids if a]:
        errors.append(
            ContentValidationError(
                code="author_required",
                message="At least one author is required",
                field="author_ids",
            )
        )
    if not fields.language:
        errors.append(
            ContentValidationError(
                code="language_required", message="Language is required", field="language"
            )
        )
    if not fields.age_group_id:
        errors.append(
            ContentValidationError(
                code="age_group_required", message="Age group is required", field="age_group_id"
            )
        )
    if not fields.body_markup:
        errors.append(
            ContentValidationError(
                code="body_required", message="Content body is required", field="body_markup"
            )
        )

    return errors


def parse_submitted_questions(raw: Any) -> list[Question]:
    """Strict decode of submitted questions. Raises ValidationFailed."""
    try:
        return parse_questions(decode_json_list(raw, field="questions"))
    except DecodeFailed as e:
        raise ValidationFailed(
            [
                ContentValidationError(
                    code="questions_malformed", message=e.message, field="questions"
                )
            ]
        ) from e
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationFailed(
            [
                ContentValidationError(
                    code="question_invalid",
                    message=f"Invalid question at {location}: {first.get('msg')}",
                    field="questions",
                )
            ]
        ) from e


def parse_submitted_countries(raw: Any) -> list[str]:
    try:
        items = decode_json_list(raw, field="targetCountries")
    except DecodeFailed as e:
        raise ValidationFailed(
            [
                ContentValidationError(
                    code="target_countries_malformed", message=e.message, field="target_countries"
                )
            ]
        ) from e
    return [str(c).strip() for c in items if c is not None and str(c).strip()]


def _dedupe(values: list[str]) -> list[str]:
    # categoryIds/authorIds are sets; keep first-seen order
    return list(dict.fromkeys(v for v in values if v))


def _checked_fields(fields: ContentFields, rules: ContentRules) -> dict[str, Any]:
    errors = validate_content_fields(fields, rules)
    if errors:
        raise ValidationFailed(errors)

    return {
        "title": fields.title,
        "description": fields.description or "",
        "body_markup": fields.body_markup,
        "cover_image_url": fields.cover_image_url or None,
        "language": fields.language,
        "original_language": fields.original_language or fields.language,
        "category_ids": _dedupe(fields.category_ids),
        "author_ids": _dedupe(fields.author_ids),
        "age_group_id": fields.age_group_id,
        "target_countries": parse_submitted_countries(fields.target_countries),
        "questions": parse_submitted_questions(fields.questions),
    }


# --- Component Entry Points ---


def run_create(
    inp: CreateContentInput,
    *,
    repo: ContentRepoPort,
    time: TimePort,
    policy: PolicyEngine,
) -> ContentOutput:
    """Create content in pending state, owned by the acting user."""
    policy.require_permission(inp.actor, "content:create")

    values = _checked_fields(inp.fields, policy.rules.content)
    now = time.now_utc()

    content = Content(
        **values,
        status="pending",
        contributor_id=inp.actor.id,
        version=1,
        created_at=now,
        updated_at=now,
    )
    saved = repo.save(content)
    logger.info("Content %s created by %s", saved.id, inp.actor.id)
    return ContentOutput(content=saved)


def run_update(
    inp: UpdateContentInput,
    *,
    repo: ContentRepoPort,
    time: TimePort,
    policy: PolicyEngine,
) -> ContentOutput:
    """Apply field changes without touching status."""
    existing = repo.get_by_id(inp.content_id)
    if existing is None:
        raise NotFound(f"Content {inp.content_id} not found")

    if not policy.can_edit_content(inp.actor, existing):
        raise Unauthorized("Not allowed to edit this content")

    if inp.expected_version is not None and inp.expected_version != existing.version:
        raise VersionConflict(inp.expected_version, existing.version)

    values = _checked_fields(inp.fields, policy.rules.content)

    updated = existing.model_copy(update={**values, "updated_at": time.now_utc()})
    saved = repo.update_fields(updated, expected_version=inp.expected_version)
    logger.info(
        "Content %s updated by %s (status %s, version %s)",
        saved.id,
        inp.actor.id,
        saved.status,
        saved.version,
    )
    return ContentOutput(content=saved)


def run_get(
    inp: GetContentInput,
    *,
    repo: ContentRepoPort,
    policy: PolicyEngine,
) -> ContentOutput:
    content = repo.get_by_id(inp.content_id)
    if content is None:
        raise NotFound(f"Content {inp.content_id} not found")

    if not policy.can_read_content(inp.actor, content):
        raise Unauthorized("Access denied")

    return ContentOutput(content=content)


def run_list(
    inp: ListContentInput,
    *,
    repo: ContentRepoPort,
    policy: PolicyEngine,
    max_limit: int = 100,
) -> ContentListOutput:
    """List content; ``mine_only`` restricts to the actor's own submissions."""
    if inp.mine_only:
        policy.require_permission(inp.actor, "content:create")
        contributor_id = inp.actor.id
    else:
        if not (policy.check_permission(inp.actor, "content:list") or policy.can_review(inp.actor)):
            raise Unauthorized("Not allowed to list content")
        contributor_id = None

    page = max(1, inp.page)
    limit = min(max(1, inp.limit), max_limit)
    search = inp.search.strip() if inp.search else None

    items, total = repo.list(
        status=inp.status,
        search=search or None,
        contributor_id=contributor_id,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return ContentListOutput(items=items, total=total, page=page, limit=limit)
