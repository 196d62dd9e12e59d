"""
Submission component unit tests.

Tests for payload encoding, create/update flows, store failures and
edit-mode loading.
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from contenthub.components.draft import DraftForm
from contenthub.components.submission import (
    GENERIC_SAVE_ERROR,
    ContentSubmissionService,
    build_payload,
)
from contenthub.domain.errors import PersistenceFailed, Unauthorized, ValidationFailed
from contenthub.domain.questions import MatchingQuestion, MultipleChoiceQuestion

# --- Mock Implementations ---


class MockContentStore:
    """In-memory content store speaking the wire format."""

    def __init__(self) -> None:
        self.records: dict[str, dict[str, Any]] = {}
        self.created: list[dict[str, Any]] = []
        self.updated: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Exception | None = None

    def create_content(self, payload: dict[str, Any]) -> str:
        if self.fail_with:
            raise self.fail_with
        content_id = f"c-{len(self.created) + 1}"
        self.created.append(payload)
        self.records[content_id] = {"id": content_id, "status": "pending", "version": 1, **payload}
        return content_id

    def update_content(self, content_id: str, payload: dict[str, Any]) -> int | None:
        if self.fail_with:
            raise self.fail_with
        self.updated.append((content_id, payload))
        record = self.records.setdefault(content_id, {"id": content_id, "version": 1})
        record.update(payload)
        record["version"] += 1
        return int(record["version"])

    def fetch_content(self, content_id: str) -> dict[str, Any]:
        return self.records[content_id]


@pytest.fixture
def store() -> MockContentStore:
    return MockContentStore()


@pytest.fixture
def service(store: MockContentStore) -> ContentSubmissionService:
    return ContentSubmissionService(store)


def _valid_draft(content_id: str | None = None) -> DraftForm:
    draft = DraftForm(content_id=content_id)
    draft.title = "  The Hungry Lion  "
    draft.category_ids = ["cat-stories"]
    draft.author_ids = ["auth-1", "auth-2"]
    draft.age_group_id = "age-6-8"
    draft.body_markup = "<p>Once upon a time</p>"
    draft.target_countries = ["", "KE", " UG "]
    draft.add_question(
        MultipleChoiceQuestion(prompt="Who roared?", options=["Lion", "Owl"], correct_answer="Lion")
    )
    return draft


# --- Payload ---


class TestBuildPayload:
    def test_questions_encoded_exactly_once(self) -> None:
        payload = build_payload(_valid_draft())

        assert isinstance(payload["questions"], str)
        decoded = json.loads(payload["questions"])
        assert isinstance(decoded, list)
        assert decoded[0]["question"] == "Who roared?"
        assert decoded[0]["correctAnswer"] == "Lion"

    def test_empty_countries_dropped(self) -> None:
        payload = build_payload(_valid_draft())
        assert json.loads(payload["targetCountries"]) == ["KE", "UG"]

    def test_camel_case_keys(self) -> None:
        payload = build_payload(_valid_draft())
        assert payload["title"] == "  The Hungry Lion  "
        assert payload["bodyMarkup"] == "<p>Once upon a time</p>"
        assert payload["categoryIds"] == ["cat-stories"]
        assert payload["ageGroupId"] == "age-6-8"

    def test_matching_pairs_survive_round_trip(self) -> None:
        draft = _valid_draft()
        draft.questions = [
            MatchingQuestion(
                prompt="Match", options=["cat", "dog"], correct_answer=["meow", "woof"]
            )
        ]
        decoded = json.loads(build_payload(draft)["questions"])
        assert decoded[0]["options"] == ["cat", "dog"]
        assert decoded[0]["correctAnswer"] == ["meow", "woof"]


# --- Submit ---


class TestSubmit:
    def test_create_returns_new_id(
        self, service: ContentSubmissionService, store: MockContentStore
    ) -> None:
        result = service.submit(_valid_draft(), "create")

        assert result.created
        assert result.content_id == "c-1"
        assert len(store.created) == 1
        assert "expectedVersion" not in store.created[0]

    def test_invalid_draft_never_reaches_store(
        self, service: ContentSubmissionService, store: MockContentStore
    ) -> None:
        draft = _valid_draft()
        draft.category_ids = []

        with pytest.raises(ValidationFailed) as exc_info:
            service.submit(draft, "create")

        assert [e.code for e in exc_info.value.errors] == ["category_required"]
        assert store.created == []

    def test_update_requires_content_id(
        self, service: ContentSubmissionService, store: MockContentStore
    ) -> None:
        with pytest.raises(ValidationFailed) as exc_info:
            service.submit(_valid_draft(), "update")

        assert "content_id_required" in {e.code for e in exc_info.value.errors}
        assert store.updated == []

    def test_update_records_new_version(
        self, service: ContentSubmissionService, store: MockContentStore
    ) -> None:
        draft = _valid_draft(content_id="c-9")

        result = service.submit(draft, "update", expected_version=1)

        assert result.mode == "update"
        assert result.version == 2
        assert draft.version == 2
        content_id, payload = store.updated[0]
        assert content_id == "c-9"
        assert payload["expectedVersion"] == 1

    def test_store_message_surfaces_verbatim(
        self, service: ContentSubmissionService, store: MockContentStore
    ) -> None:
        store.fail_with = PersistenceFailed("Category cat-stories is archived", status_code=400)

        with pytest.raises(PersistenceFailed, match="Category cat-stories is archived"):
            service.submit(_valid_draft(), "create")

    def test_unexpected_failure_uses_generic_message(
        self, service: ContentSubmissionService, store: MockContentStore
    ) -> None:
        store.fail_with = RuntimeError("socket closed")

        with pytest.raises(PersistenceFailed) as exc_info:
            service.submit(_valid_draft(), "create")
        assert exc_info.value.message == GENERIC_SAVE_ERROR

    def test_unauthorized_propagates_and_draft_is_intact(
        self, service: ContentSubmissionService, store: MockContentStore
    ) -> None:
        store.fail_with = Unauthorized("Token expired", authenticated=False)
        draft = _valid_draft()

        with pytest.raises(Unauthorized):
            service.submit(draft, "create")

        assert draft.title == "  The Hungry Lion  "
        assert len(draft.questions) == 1


# --- Load ---


class TestLoad:
    def test_load_round_trips_through_store(
        self, service: ContentSubmissionService, store: MockContentStore
    ) -> None:
        result = service.submit(_valid_draft(), "create")

        draft = service.load(result.content_id)

        assert draft.is_edit
        assert draft.title == "The Hungry Lion"
        assert draft.target_countries == ["KE", "UG"]
        assert len(draft.questions) == 1
        assert draft.questions[0].correct_answer == "Lion"
        assert draft.version == 1

    def test_load_tolerates_double_encoded_questions(
        self, service: ContentSubmissionService, store: MockContentStore
    ) -> None:
        result = service.submit(_valid_draft(), "create")
        record = store.records[result.content_id]
        record["questions"] = json.dumps(record["questions"])

        draft = service.load(result.content_id)
        assert len(draft.questions) == 1
