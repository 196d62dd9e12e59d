import json
import sqlite3
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from contenthub.adapters.sqlite.repos import (
    SQLiteAssignmentRepo,
    SQLiteContentRepo,
    SQLiteHubRepo,
    SQLiteUserRepo,
)
from contenthub.domain.entities import Content, ContentHubAssignment, EdgeHub, User
from contenthub.domain.errors import NotFound, PersistenceFailed, VersionConflict
from contenthub.domain.questions import MultipleChoiceQuestion

BASE = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def content_repo(db_path):
    return SQLiteContentRepo(db_path)


@pytest.fixture
def hub_repo(db_path):
    return SQLiteHubRepo(db_path)


@pytest.fixture
def assignment_repo(db_path):
    return SQLiteAssignmentRepo(db_path)


def _content(title="The Hungry Lion", status="pending", minutes=0, **kw):
    stamp = BASE + timedelta(minutes=minutes)
    return Content(
        title=title,
        language="English",
        age_group_id="age-6-8",
        category_ids=["cat-stories"],
        author_ids=["auth-1"],
        target_countries=["KE"],
        questions=[MultipleChoiceQuestion(prompt="Who?", options=["Lion", "Owl"],
                                          correct_answer="Lion")],
        contributor_id=kw.pop("contributor_id", uuid4()),
        status=status,
        created_at=stamp,
        updated_at=stamp,
        **kw,
    )


# --- Content ---


def test_save_and_get_round_trip(content_repo):
    item = _content(body_markup="<p>x</p>", cover_image_url="/uploads/a.png")
    content_repo.save(item)

    loaded = content_repo.get_by_id(item.id)

    assert loaded == item


def test_list_fields_stored_encoded_once(content_repo, db_path):
    item = _content()
    content_repo.save(item)

    conn = sqlite3.connect(db_path)
    raw = conn.execute("SELECT questions, target_countries FROM content WHERE id = ?",
                       (str(item.id),)).fetchone()
    conn.close()

    assert isinstance(json.loads(raw[0]), list)
    assert json.loads(raw[1]) == ["KE"]


def test_double_encoded_row_is_read(content_repo, db_path):
    item = _content()
    content_repo.save(item)
    conn = sqlite3.connect(db_path)
    conn.execute(
        "UPDATE content SET questions = ? WHERE id = ?",
        (json.dumps(json.dumps([{"type": "true_false", "question": "Q", "correctAnswer": "True"}])),
         str(item.id)),
    )
    conn.commit()
    conn.close()

    loaded = content_repo.get_by_id(item.id)
    assert loaded is not None
    assert loaded.questions[0].correct_answer == "true"


def test_malformed_row_questions_become_empty(content_repo, db_path):
    item = _content()
    content_repo.save(item)
    conn = sqlite3.connect(db_path)
    conn.execute("UPDATE content SET questions = '{oops' WHERE id = ?", (str(item.id),))
    conn.commit()
    conn.close()

    loaded = content_repo.get_by_id(item.id)
    assert loaded is not None
    assert loaded.questions == []
    assert loaded.title == item.title


def test_get_missing(content_repo):
    assert content_repo.get_by_id(uuid4()) is None


def test_compare_and_set_update(content_repo):
    item = _content()
    content_repo.save(item)

    first = content_repo.update_fields(item.model_copy(update={"title": "First"}),
                                       expected_version=1)
    assert first.version == 2

    with pytest.raises(VersionConflict) as exc_info:
        content_repo.update_fields(item.model_copy(update={"title": "Stale"}),
                                   expected_version=1)

    assert exc_info.value.actual == 2
    assert content_repo.get_by_id(item.id).title == "First"


def test_compare_and_set_missing_row(content_repo):
    with pytest.raises(NotFound):
        content_repo.update_fields(_content(), expected_version=1)


def test_update_fields_missing_row(content_repo):
    with pytest.raises(NotFound):
        content_repo.update_fields(_content())


def test_update_fields_keeps_review_outcome(content_repo):
    item = _content()
    content_repo.save(item)
    reviewer = uuid4()
    assert content_repo.transition_status(
        item.id, "pending", "rejected", reason="Too long", reviewer_id=reviewer,
        now=BASE + timedelta(hours=1),
    )

    # Stale copy read before the review still says pending
    stored = content_repo.update_fields(
        item.model_copy(update={"title": "Shorter", "updated_at": BASE + timedelta(hours=2)})
    )

    assert stored.title == "Shorter"
    assert stored.status == "rejected"
    assert stored.rejection_reason == "Too long"
    assert stored.reviewed_by == reviewer
    assert stored.version == 3
    assert content_repo.get_by_id(item.id) == stored


def test_list_filters_and_paging(content_repo):
    owner = uuid4()
    for i in range(3):
        content_repo.save(_content(f"Lion {i}", minutes=i, contributor_id=owner))
    content_repo.save(_content("Owl", status="verified", minutes=10))
    content_repo.save(_content("100% juice_box", minutes=11))

    items, total = content_repo.list(status="pending", search="lion", limit=2)
    assert total == 3
    assert [c.title for c in items] == ["Lion 2", "Lion 1"]

    items, _ = content_repo.list(status="pending", search="lion", limit=2, offset=2)
    assert [c.title for c in items] == ["Lion 0"]

    _, mine = content_repo.list(contributor_id=owner)
    assert mine == 3

    _, verified = content_repo.list(status="verified")
    assert verified == 1


def test_search_escapes_like_wildcards(content_repo):
    content_repo.save(_content("100% juice_box"))
    content_repo.save(_content("1000 juicebox"))

    items, total = content_repo.list(search="0% juice_")
    assert total == 1
    assert items[0].title == "100% juice_box"


def test_transition_status_is_compare_and_set(content_repo):
    item = _content()
    content_repo.save(item)
    reviewer = uuid4()
    now = BASE + timedelta(hours=1)

    assert content_repo.transition_status(item.id, "pending", "rejected", reason="Too long",
                                          reviewer_id=reviewer, now=now) is True
    assert content_repo.transition_status(item.id, "pending", "verified", reason=None,
                                          reviewer_id=reviewer, now=now) is False

    loaded = content_repo.get_by_id(item.id)
    assert loaded.status == "rejected"
    assert loaded.rejection_reason == "Too long"
    assert loaded.reviewed_by == reviewer
    assert loaded.reviewed_at == now
    assert loaded.version == 2


def test_approve_clears_reason(content_repo):
    item = _content()
    content_repo.save(item)
    content_repo.transition_status(item.id, "pending", "verified", reason="ignored",
                                   reviewer_id=None, now=BASE)
    assert content_repo.get_by_id(item.id).rejection_reason is None


# --- Users ---


def test_user_roles_round_trip(db_path):
    repo = SQLiteUserRepo(db_path)
    user = User(email="m@example.com", display_name="M", roles=["moderator", "editor",
                                                                "moderator"])
    repo.save(user)

    loaded = repo.get_by_email("m@example.com")
    assert loaded.roles == ["editor", "moderator"]

    repo.save(loaded.model_copy(update={"roles": ["contributor"]}))
    assert repo.get_by_id(user.id).roles == ["contributor"]
    assert [u.email for u in repo.list_all()] == ["m@example.com"]


# --- Hubs and assignments ---


def test_hub_id_is_unique(hub_repo):
    hub_repo.save(EdgeHub(hub_id="hub-1", name="One"))
    with pytest.raises(PersistenceFailed, match="hub-1"):
        hub_repo.save(EdgeHub(hub_id="hub-1", name="Duplicate"))


def test_hub_update_keeps_primary_key(hub_repo):
    hub = hub_repo.save(EdgeHub(hub_id="hub-1", name="One"))
    hub_repo.save(hub.model_copy(update={"name": "Renamed", "status": "inactive"}))

    loaded = hub_repo.get_by_hub_id("hub-1")
    assert loaded.id == hub.id
    assert loaded.name == "Renamed"
    assert loaded.status == "inactive"


def test_assignment_add_remove_idempotent(content_repo, hub_repo, assignment_repo):
    item = content_repo.save(_content(status="verified"))
    hub = hub_repo.save(EdgeHub(hub_id="hub-1", name="One"))
    pair = ContentHubAssignment(content_id=item.id, hub_pk=hub.id, assigned_at=BASE)

    assert assignment_repo.add(pair) is True
    assert assignment_repo.add(pair) is False
    assert assignment_repo.exists(item.id, hub.id)
    assert assignment_repo.count_for_hub(hub.id) == 1

    assert assignment_repo.remove(item.id, hub.id) is True
    assert assignment_repo.remove(item.id, hub.id) is False
    assert assignment_repo.count_for_hub(hub.id) == 0


def test_assignment_requires_existing_rows(hub_repo, assignment_repo):
    hub = hub_repo.save(EdgeHub(hub_id="hub-1", name="One"))
    with pytest.raises(sqlite3.IntegrityError):
        assignment_repo.add(ContentHubAssignment(content_id=uuid4(), hub_pk=hub.id))


def test_list_hub_content_flags(content_repo, hub_repo, assignment_repo):
    on_hub = content_repo.save(_content("Lion", status="verified", minutes=1))
    off_hub = content_repo.save(_content("Owl", status="verified", minutes=2))
    content_repo.save(_content("Lion draft", status="pending", minutes=3))
    hub = hub_repo.save(EdgeHub(hub_id="hub-1", name="One"))
    other = hub_repo.save(EdgeHub(hub_id="hub-2", name="Two"))
    assignment_repo.add(ContentHubAssignment(content_id=on_hub.id, hub_pk=hub.id))
    assignment_repo.add(ContentHubAssignment(content_id=off_hub.id, hub_pk=other.id))

    items, total = assignment_repo.list_hub_content(hub.id, status="verified")
    assert total == 2
    assert [(i.title, i.is_assigned) for i in items] == [("Owl", False), ("Lion", True)]

    items, total = assignment_repo.list_hub_content(hub.id, assigned="assigned")
    assert [i.content_id for i in items] == [on_hub.id]

    items, total = assignment_repo.list_hub_content(hub.id, assigned="unassigned", search="LION")
    assert [i.title for i in items] == ["Lion draft"]


def test_deleting_content_cascades_assignments(content_repo, hub_repo, assignment_repo, db_path):
    item = content_repo.save(_content(status="verified"))
    hub = hub_repo.save(EdgeHub(hub_id="hub-1", name="One"))
    assignment_repo.add(ContentHubAssignment(content_id=item.id, hub_pk=hub.id))

    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("DELETE FROM content WHERE id = ?", (str(item.id),))
    conn.commit()
    conn.close()

    assert assignment_repo.count_for_hub(hub.id) == 0
