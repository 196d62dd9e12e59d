import json
from uuid import uuid4

import pytest

QUESTIONS = [
    {"type": "multiple_choice", "question": "Who roared?", "options": ["Lion", "Owl"],
     "correctAnswer": "Lion"},
    {"type": "true_false", "question": "Lions sleep all day", "correctAnswer": "True"},
]


def _payload(**overrides):
    payload = {
        "title": "The Hungry Lion",
        "description": "A story about sharing",
        "bodyMarkup": "<p>Once upon a time</p>",
        "language": "English",
        "originalLanguage": "English",
        "categoryIds": ["cat-stories"],
        "authorIds": ["auth-1"],
        "ageGroupId": "age-6-8",
        "targetCountries": json.dumps(["KE", "UG"]),
        "questions": json.dumps(QUESTIONS),
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def contributor(make_user):
    return make_user("contributor")


@pytest.fixture
def moderator(make_user):
    return make_user("moderator")


@pytest.fixture
def submit(client, auth_headers, contributor):
    def _submit(user=None, **overrides):
        response = client.post("/content/submit", json=_payload(**overrides),
                               headers=auth_headers(user or contributor))
        assert response.status_code == 200, response.text
        return response.json()["id"]

    return _submit


# --- Auth ---


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "contenthub"}


def test_submit_requires_token(client):
    response = client.post("/content/submit", json=_payload())
    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_garbage_token(client):
    response = client.post("/content/submit", json=_payload(),
                           headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_inactive_user_forbidden(client, make_user, auth_headers):
    user = make_user("contributor", status="disabled")
    response = client.post("/content/submit", json=_payload(), headers=auth_headers(user))
    assert response.status_code == 403


# --- Submit / read ---


def test_submit_and_fetch(client, submit, auth_headers, contributor):
    content_id = submit()

    response = client.get(f"/content/{content_id}", headers=auth_headers(contributor))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "pending"
    assert body["version"] == 1
    assert body["contributorId"] == str(contributor.id)
    assert body["bodyMarkup"] == "<p>Once upon a time</p>"
    # List fields come back as JSON strings decoded exactly once
    assert json.loads(body["targetCountries"]) == ["KE", "UG"]
    questions = json.loads(body["questions"])
    assert isinstance(questions, list)
    assert questions[1]["correctAnswer"] == "true"


def test_submit_accepts_native_lists(client, submit, auth_headers, contributor):
    content_id = submit(questions=QUESTIONS, targetCountries=["TZ"])
    body = client.get(f"/content/{content_id}", headers=auth_headers(contributor)).json()
    assert json.loads(body["targetCountries"]) == ["TZ"]
    assert len(json.loads(body["questions"])) == 2


def test_submit_validation_errors(client, auth_headers, contributor):
    response = client.post("/content/submit", json=_payload(title="", categoryIds=[]),
                           headers=auth_headers(contributor))
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "validation_failed"
    assert {e["code"] for e in body["errors"]} == {"title_required", "category_required"}


def test_submit_bad_question(client, auth_headers, contributor):
    bad = json.dumps([{"type": "true_false", "question": "?", "correctAnswer": "maybe"}])
    response = client.post("/content/submit", json=_payload(questions=bad),
                           headers=auth_headers(contributor))
    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "question_invalid"


def test_fetch_unknown(client, auth_headers, moderator):
    response = client.get(f"/content/{uuid4()}", headers=auth_headers(moderator))
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_other_contributor_cannot_fetch(client, submit, make_user, auth_headers):
    content_id = submit()
    stranger = make_user("contributor", email="stranger@example.com")
    response = client.get(f"/content/{content_id}", headers=auth_headers(stranger))
    assert response.status_code == 403


# --- Update ---


def test_owner_update_bumps_version(client, submit, auth_headers, contributor):
    content_id = submit()

    response = client.put(f"/content/{content_id}", json=_payload(title="Renamed",
                                                                   expectedVersion=1),
                          headers=auth_headers(contributor))

    assert response.status_code == 200
    assert response.json() == {"id": content_id, "version": 2}
    body = client.get(f"/content/{content_id}", headers=auth_headers(contributor)).json()
    assert body["title"] == "Renamed"
    assert body["status"] == "pending"


def test_stale_update_conflicts(client, submit, auth_headers, contributor):
    content_id = submit()
    client.put(f"/content/{content_id}", json=_payload(title="First"),
               headers=auth_headers(contributor))

    response = client.put(f"/content/{content_id}", json=_payload(title="Stale",
                                                                   expectedVersion=1),
                          headers=auth_headers(contributor))

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "version_conflict"
    assert (body["expected"], body["actual"]) == (1, 2)


def test_owner_cannot_edit_reviewed(client, submit, auth_headers, contributor, moderator):
    content_id = submit()
    client.put(f"/content/{content_id}/status", json={"status": "verified"},
               headers=auth_headers(moderator))

    response = client.put(f"/content/{content_id}", json=_payload(title="Sneaky"),
                          headers=auth_headers(contributor))
    assert response.status_code == 403


def test_editor_edit_keeps_verified_status(client, submit, auth_headers, make_user, moderator):
    content_id = submit()
    client.put(f"/content/{content_id}/status", json={"status": "verified"},
               headers=auth_headers(moderator))
    editor = make_user("editor")

    response = client.put(f"/content/{content_id}", json=_payload(title="Typo fixed"),
                          headers=auth_headers(editor))

    assert response.status_code == 200
    body = client.get(f"/content/{content_id}", headers=auth_headers(editor)).json()
    assert body["status"] == "verified"
    assert body["title"] == "Typo fixed"


# --- Lists ---


def test_pending_queue_and_my_content(client, submit, make_user, auth_headers, contributor,
                                      moderator):
    submit(title="Lion one")
    submit(title="Lion two")
    other = make_user("contributor", email="other@example.com")
    submit(user=other, title="Owl")

    queue = client.get("/content/pending", params={"search": "lion"},
                       headers=auth_headers(moderator)).json()
    assert queue["total"] == 2
    assert queue["page"] == 1
    assert queue["totalPages"] == 1

    mine = client.get("/content/my-content", headers=auth_headers(other)).json()
    assert [i["title"] for i in mine["items"]] == ["Owl"]


def test_contributor_cannot_list_all(client, auth_headers, contributor):
    response = client.get("/content", headers=auth_headers(contributor))
    assert response.status_code == 403


def test_list_pagination(client, submit, auth_headers, moderator):
    for i in range(3):
        submit(title=f"Story {i}")

    page = client.get("/content", params={"page": 2, "limit": 2},
                      headers=auth_headers(moderator)).json()
    assert page["total"] == 3
    assert page["totalPages"] == 2
    assert len(page["items"]) == 1


# --- Review ---


def test_approve(client, submit, auth_headers, moderator):
    content_id = submit()

    response = client.put(f"/content/{content_id}/status", json={"status": "verified"},
                          headers=auth_headers(moderator))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "verified"
    assert body["reviewedBy"] == str(moderator.id)
    assert body["reviewedAt"] is not None


def test_reject_requires_reason(client, submit, auth_headers, moderator):
    content_id = submit()
    response = client.put(f"/content/{content_id}/status",
                          json={"status": "rejected", "reason": "  "},
                          headers=auth_headers(moderator))
    assert response.status_code == 400
    assert response.json()["code"] == "missing_reason"


def test_reject_then_approve_conflicts(client, submit, auth_headers, moderator):
    content_id = submit()
    rejected = client.put(f"/content/{content_id}/status",
                          json={"status": "rejected", "reason": "Needs images"},
                          headers=auth_headers(moderator))
    assert rejected.json()["rejectionReason"] == "Needs images"

    response = client.put(f"/content/{content_id}/status", json={"status": "verified"},
                          headers=auth_headers(moderator))

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "invalid_transition"
    assert body["fromStatus"] == "rejected"
    assert body["toStatus"] == "verified"


def test_contributor_cannot_review(client, submit, auth_headers, contributor):
    content_id = submit()
    response = client.put(f"/content/{content_id}/status", json={"status": "verified"},
                          headers=auth_headers(contributor))
    assert response.status_code == 403


def test_review_unknown_content(client, auth_headers, moderator):
    response = client.put(f"/content/{uuid4()}/status", json={"status": "verified"},
                          headers=auth_headers(moderator))
    assert response.status_code == 409
    assert response.json()["fromStatus"] is None


def test_review_malformed_id_is_unknown_content(client, auth_headers, moderator):
    response = client.put("/content/not-a-uuid/status", json={"status": "verified"},
                          headers=auth_headers(moderator))
    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "invalid_transition"
    assert body["fromStatus"] is None


def test_reject_malformed_id_still_needs_reason(client, auth_headers, moderator):
    response = client.put("/content/not-a-uuid/status", json={"status": "rejected"},
                          headers=auth_headers(moderator))
    assert response.status_code == 400
    assert response.json()["code"] == "missing_reason"


def test_bulk_review(client, submit, auth_headers, moderator):
    first = submit(title="One")
    second = submit(title="Two")
    client.put(f"/content/{second}/status", json={"status": "verified"},
               headers=auth_headers(moderator))

    response = client.post("/content/review/bulk",
                           json={"ids": [first, second], "status": "rejected",
                                 "reason": "Off topic"},
                           headers=auth_headers(moderator))

    assert response.status_code == 200
    body = response.json()
    assert body["succeeded"] == [first]
    assert body["failed"] == [{"id": second, "code": "invalid_transition",
                               "message": body["failed"][0]["message"]}]


def test_bulk_reject_without_reason(client, submit, auth_headers, moderator):
    content_id = submit()
    response = client.post("/content/review/bulk",
                           json={"ids": [content_id], "status": "rejected"},
                           headers=auth_headers(moderator))
    assert response.status_code == 400
    assert response.json()["code"] == "missing_reason"
