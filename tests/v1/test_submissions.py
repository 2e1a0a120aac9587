# tests/v1/test_submissions.py
"""Tests for the submission and vote endpoints."""

from fastapi import status

from chrysalis.models import Content, Submission


def test_submit_creates_submission(client, auth_token, category, db_session, test_user):
    response = client.post(
        "/api/v1/submissions/",
        json={"category_id": category.id, "url": "https://example.org/read", "comment": "nice"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["stage"] == "egg"
    assert body["votes"] == 0
    assert body["me_has_voted"] is False
    assert body["comment"] == "nice"
    assert body["user"] == {"id": test_user.id, "username": "alice"}
    assert body["content"]["url"] == "https://example.org/read"
    assert body["content"]["title"] == "Title of https://example.org/read"
    db_session.refresh(test_user)
    assert test_user.tokens == 4


def test_submit_requires_authentication(client, category):
    response = client.post(
        "/api/v1/submissions/",
        json={"category_id": category.id, "url": "https://example.org/read"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"]["kind"] == "unauthenticated"


def test_invalid_token_is_treated_as_anonymous(client, category):
    response = client.post(
        "/api/v1/submissions/",
        json={"category_id": category.id, "url": "https://example.org/read"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_submit_unknown_category(client, auth_token):
    response = client.post(
        "/api/v1/submissions/",
        json={"category_id": 999, "url": "https://example.org/read"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    detail = response.json()["detail"]
    assert detail["kind"] == "category_not_found"
    assert detail["resource"] == "category"
    assert detail["category_id"] == 999


def test_submit_metadata_failure(client, auth_token, category, fetcher, db_session):
    fetcher.failing.add("https://example.org/down")

    response = client.post(
        "/api/v1/submissions/",
        json={"category_id": category.id, "url": "https://example.org/down"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    detail = response.json()["detail"]
    assert detail["kind"] == "metadata_fetch_error"
    assert detail["url"] == "https://example.org/down"
    assert db_session.query(Content).count() == 0
    assert db_session.query(Submission).count() == 0


def test_vote_toggles(client, submission, other_auth_token):
    url = f"/api/v1/submissions/{submission.id}/vote"

    first = client.post(url, headers=other_auth_token)
    second = client.post(url, headers=other_auth_token)

    assert first.status_code == status.HTTP_200_OK
    assert first.json()["votes"] == 1
    assert first.json()["stage"] == "caterpillar"
    assert first.json()["me_has_voted"] is True
    assert second.json()["votes"] == 0
    assert second.json()["stage"] == "egg"
    assert second.json()["me_has_voted"] is False


def test_vote_requires_authentication(client, submission):
    response = client.post(f"/api/v1/submissions/{submission.id}/vote")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"]["kind"] == "unauthenticated"


def test_vote_unknown_submission(client, auth_token):
    response = client.post("/api/v1/submissions/777/vote", headers=auth_token)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"]["kind"] == "submission_not_found"
    assert response.json()["detail"]["submission_id"] == 777


def test_get_submission(client, make_submission, test_user, other_user, other_auth_token):
    target = make_submission(test_user, voters=[other_user])

    anonymous = client.get(f"/api/v1/submissions/{target.id}")
    as_voter = client.get(f"/api/v1/submissions/{target.id}", headers=other_auth_token)
    missing = client.get("/api/v1/submissions/404")

    assert anonymous.status_code == status.HTTP_200_OK
    assert anonymous.json()["votes"] == 1
    assert anonymous.json()["me_has_voted"] is False
    assert as_voter.json()["me_has_voted"] is True
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_list_submissions_with_filters(client, make_submission, test_user, other_user):
    voted = make_submission(test_user, "https://example.org/1", voters=[other_user])
    plain = make_submission(other_user, "https://example.org/2")

    everything = client.get("/api/v1/submissions/")
    caterpillars = client.get("/api/v1/submissions/", params={"stage": "caterpillar"})
    by_user = client.get("/api/v1/submissions/", params={"user_id": other_user.id})

    assert {s["id"] for s in everything.json()} == {voted.id, plain.id}
    assert [s["id"] for s in caterpillars.json()] == [voted.id]
    assert [s["id"] for s in by_user.json()] == [plain.id]


def test_list_submissions_rejects_unknown_stage(client):
    response = client.get("/api/v1/submissions/", params={"stage": "moth"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    detail = response.json()["detail"]
    assert detail["kind"] == "validation_error"
    assert detail["field"] == "stage"
    assert detail["errors"][0]["loc"] == ["query", "stage"]


def test_bookmarks(client, make_submission, test_user, other_user, other_auth_token):
    liked = make_submission(test_user, "https://example.org/1", voters=[other_user])
    make_submission(test_user, "https://example.org/2")

    response = client.get("/api/v1/submissions/bookmarks", headers=other_auth_token)

    assert response.status_code == status.HTTP_200_OK
    assert [s["id"] for s in response.json()] == [liked.id]
    assert response.json()[0]["me_has_voted"] is True


def test_bookmarks_require_authentication(client):
    response = client.get("/api/v1/submissions/bookmarks")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_submit_empty_url_uses_error_shape(client, auth_token, category):
    response = client.post(
        "/api/v1/submissions/",
        json={"category_id": category.id, "url": ""},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    detail = response.json()["detail"]
    assert detail["kind"] == "validation_error"
    assert detail["field"] == "url"
    assert detail["errors"][0]["loc"] == ["body", "url"]


def test_submit_blank_url_uses_error_shape(client, auth_token, category, fetcher):
    response = client.post(
        "/api/v1/submissions/",
        json={"category_id": category.id, "url": "   "},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"]["kind"] == "validation_error"
    assert response.json()["detail"]["field"] == "url"
    assert fetcher.calls == []
