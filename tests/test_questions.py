from sqlalchemy.orm import Session

from qadesk.db.models.question import Question as QuestionModel


def _cookie(token: str) -> dict:
    return {"Cookie": f"session={token}"}


def _create_question(client, token: str, title: str = "VPN keeps disconnecting", **extra) -> dict:
    body = {"title": title, "content": "It drops every hour since the update.", **extra}
    response = client.post("/api/v1/questions", json=body, headers=_cookie(token))
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# CREATE
# ============================================================================


def test_create_question(client, db: Session, member_user: dict, member_token: str):
    data = _create_question(client, member_token)
    assert data["title"] == "VPN keeps disconnecting"
    assert data["authorId"] == member_user["id"]
    assert data["groupId"] == member_user["group_id"]
    assert data["status"] == "unanswered"
    assert data["priority"] == "medium"
    # Tagging is not configured in tests, so tags fall back to empty
    assert data["tags"] == []
    assert data["resolvedAt"] is None


def test_create_question_uses_generated_tags(client, db: Session, member_token: str, monkeypatch):
    async def fake_generate_tags(title: str, content: str) -> list[str]:
        return ["vpn", "networking"]

    monkeypatch.setattr("qadesk.services.question.generate_tags", fake_generate_tags)
    data = _create_question(client, member_token, priority="high")
    assert data["tags"] == ["vpn", "networking"]
    assert data["priority"] == "high"


def test_create_question_tagging_failure_does_not_fail(client, db: Session, member_token: str, monkeypatch):
    async def broken_generate_tags(title: str, content: str) -> list[str]:
        raise RuntimeError("model unavailable")

    monkeypatch.setattr("qadesk.services.question.generate_tags", broken_generate_tags)
    data = _create_question(client, member_token)
    assert data["tags"] == []


def test_create_question_notifies_admins(
    client, db: Session, admin_user: dict, member_token: str, sent_emails
):
    _create_question(client, member_token, title="Printer offline")
    assert [e["to"] for e in sent_emails] == [admin_user["email"]]
    assert "New question posted" in sent_emails[0]["subject"]
    assert "alice posted a new question." in sent_emails[0]["text"]


def test_create_question_email_failure_does_not_fail(client, db: Session, member_token: str, monkeypatch):
    async def broken_send_email(to, subject, html, text):
        raise ConnectionError("smtp unreachable")

    monkeypatch.setattr("qadesk.services.email.send_email", broken_send_email)
    response = client.post(
        "/api/v1/questions",
        json={"title": "Mail test", "content": "Body"},
        headers=_cookie(member_token),
    )
    assert response.status_code == 201


def test_create_question_blank_title(client, db: Session, member_token: str):
    response = client.post(
        "/api/v1/questions",
        json={"title": "   ", "content": "Body"},
        headers=_cookie(member_token),
    )
    assert response.status_code == 400
    assert response.json()["error"] == {"code": "VALIDATION_ERROR", "message": "Title is required"}


def test_create_question_title_too_long(client, db: Session, member_token: str):
    response = client.post(
        "/api/v1/questions",
        json={"title": "x" * 101, "content": "Body"},
        headers=_cookie(member_token),
    )
    assert response.status_code == 400
    assert "100 characters" in response.json()["error"]["message"]


def test_create_question_content_too_long(client, db: Session, member_token: str):
    response = client.post(
        "/api/v1/questions",
        json={"title": "Long", "content": "x" * 10001},
        headers=_cookie(member_token),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_create_question_invalid_priority(client, db: Session, member_token: str):
    response = client.post(
        "/api/v1/questions",
        json={"title": "Title", "content": "Body", "priority": "urgent"},
        headers=_cookie(member_token),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_create_question_without_session(client, db: Session):
    response = client.post("/api/v1/questions", json={"title": "Title", "content": "Body"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Authentication required"


# ============================================================================
# LIST
# ============================================================================


def test_list_questions_scoped_to_group(
    client, db: Session, member_token: str, outsider_token: str, admin_token: str
):
    _create_question(client, member_token, title="Alpha question")
    _create_question(client, outsider_token, title="Beta question")

    member_list = client.get("/api/v1/questions", headers=_cookie(member_token)).json()
    assert [q["title"] for q in member_list["items"]] == ["Alpha question"]
    assert member_list["total"] == 1

    outsider_list = client.get("/api/v1/questions", headers=_cookie(outsider_token)).json()
    assert [q["title"] for q in outsider_list["items"]] == ["Beta question"]

    admin_list = client.get("/api/v1/questions", headers=_cookie(admin_token)).json()
    assert admin_list["total"] == 2
    # Newest first
    assert [q["title"] for q in admin_list["items"]] == ["Beta question", "Alpha question"]


def test_list_questions_filters(client, db: Session, member_token: str, admin_token: str):
    first = _create_question(client, member_token, title="Database timeout", priority="high")
    _create_question(client, member_token, title="Printer jam", priority="low")
    client.put(
        f"/api/v1/questions/{first['id']}",
        json={"status": "resolved"},
        headers=_cookie(admin_token),
    )

    by_status = client.get(
        "/api/v1/questions", params={"status": "resolved"}, headers=_cookie(member_token)
    ).json()
    assert [q["title"] for q in by_status["items"]] == ["Database timeout"]

    by_priority = client.get(
        "/api/v1/questions", params={"priority": "low"}, headers=_cookie(member_token)
    ).json()
    assert [q["title"] for q in by_priority["items"]] == ["Printer jam"]

    by_search = client.get(
        "/api/v1/questions", params={"search": "DATABASE"}, headers=_cookie(member_token)
    ).json()
    assert [q["title"] for q in by_search["items"]] == ["Database timeout"]


def test_list_questions_pagination(client, db: Session, member_token: str):
    for i in range(3):
        _create_question(client, member_token, title=f"Question {i}")

    page = client.get(
        "/api/v1/questions", params={"page": 2, "limit": 2}, headers=_cookie(member_token)
    ).json()
    assert page["total"] == 3
    assert page["page"] == 2
    assert page["pageSize"] == 2
    assert [q["title"] for q in page["items"]] == ["Question 0"]


def test_list_questions_limit_out_of_range(client, db: Session, member_token: str):
    response = client.get("/api/v1/questions", params={"limit": 101}, headers=_cookie(member_token))
    assert response.status_code == 400


# ============================================================================
# GET
# ============================================================================


def test_get_question_same_group(client, db: Session, member_token: str, teammate_token: str):
    question = _create_question(client, member_token)
    response = client.get(f"/api/v1/questions/{question['id']}", headers=_cookie(teammate_token))
    assert response.status_code == 200
    assert response.json()["id"] == question["id"]
    assert response.json()["attachments"] == []


def test_get_question_other_group_denied(client, db: Session, member_token: str, outsider_token: str):
    question = _create_question(client, member_token)
    response = client.get(f"/api/v1/questions/{question['id']}", headers=_cookie(outsider_token))
    assert response.status_code == 403
    assert response.json()["error"] == {"code": "FORBIDDEN", "message": "Access denied"}


def test_get_question_admin_any_group(client, db: Session, member_token: str, admin_token: str):
    question = _create_question(client, member_token)
    response = client.get(f"/api/v1/questions/{question['id']}", headers=_cookie(admin_token))
    assert response.status_code == 200


def test_get_question_not_found(client, db: Session, member_token: str):
    response = client.get("/api/v1/questions/9999", headers=_cookie(member_token))
    assert response.status_code == 404


def test_get_question_authentication_checked_before_existence(client, db: Session):
    response = client.get("/api/v1/questions/9999")
    assert response.status_code == 401

    response = client.get("/api/v1/questions/9999", headers={"Cookie": "session=" + "0" * 64})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid session"


# ============================================================================
# UPDATE
# ============================================================================


def test_author_updates_question(client, db: Session, member_token: str):
    question = _create_question(client, member_token)
    response = client.put(
        f"/api/v1/questions/{question['id']}",
        json={"title": "VPN drops hourly", "priority": "high"},
        headers=_cookie(member_token),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "VPN drops hourly"
    assert data["priority"] == "high"
    assert data["content"] == question["content"]
    assert data["updatedAt"] >= question["updatedAt"]


def test_non_author_cannot_update(client, db: Session, member_token: str, teammate_token: str):
    question = _create_question(client, member_token)
    response = client.put(
        f"/api/v1/questions/{question['id']}",
        json={"title": "Hijacked"},
        headers=_cookie(teammate_token),
    )
    assert response.status_code == 403
    assert response.json()["error"]["message"] == (
        "Only the question author or admin can update this question"
    )


def test_admin_resolves_question(
    client, db: Session, member_user: dict, member_token: str, admin_token: str, sent_emails
):
    question = _create_question(client, member_token)
    sent_emails.clear()

    response = client.put(
        f"/api/v1/questions/{question['id']}",
        json={"status": "resolved"},
        headers=_cookie(admin_token),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "resolved"
    assert response.json()["resolvedAt"] is not None

    assert [e["to"] for e in sent_emails] == [member_user["email"]]
    assert "resolved" in sent_emails[0]["subject"]


def test_admin_rejects_question_notifies_author(
    client, db: Session, member_user: dict, member_token: str, admin_token: str, sent_emails
):
    question = _create_question(client, member_token)
    sent_emails.clear()

    response = client.put(
        f"/api/v1/questions/{question['id']}",
        json={"status": "rejected"},
        headers=_cookie(admin_token),
    )
    assert response.status_code == 200
    assert response.json()["resolvedAt"] is None
    assert [e["to"] for e in sent_emails] == [member_user["email"]]
    assert "rejected" in sent_emails[0]["subject"]


def test_reopening_resolved_question_clears_resolved_at(
    client, db: Session, member_token: str, admin_token: str
):
    question = _create_question(client, member_token)
    client.put(
        f"/api/v1/questions/{question['id']}",
        json={"status": "resolved"},
        headers=_cookie(admin_token),
    )

    response = client.put(
        f"/api/v1/questions/{question['id']}",
        json={"status": "answered"},
        headers=_cookie(admin_token),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "answered"
    assert response.json()["resolvedAt"] is None


def test_update_invalid_status(client, db: Session, member_token: str):
    question = _create_question(client, member_token)
    response = client.put(
        f"/api/v1/questions/{question['id']}",
        json={"status": "archived"},
        headers=_cookie(member_token),
    )
    assert response.status_code == 400


# ============================================================================
# DELETE
# ============================================================================


def test_author_deletes_question(client, db: Session, member_token: str):
    question = _create_question(client, member_token)
    response = client.delete(f"/api/v1/questions/{question['id']}", headers=_cookie(member_token))
    assert response.status_code == 204
    assert db.query(QuestionModel).count() == 0

    response = client.get(f"/api/v1/questions/{question['id']}", headers=_cookie(member_token))
    assert response.status_code == 404


def test_non_author_cannot_delete(client, db: Session, member_token: str, teammate_token: str):
    question = _create_question(client, member_token)
    response = client.delete(f"/api/v1/questions/{question['id']}", headers=_cookie(teammate_token))
    assert response.status_code == 403


def test_outsider_cannot_delete(client, db: Session, member_token: str, outsider_token: str):
    question = _create_question(client, member_token)
    response = client.delete(f"/api/v1/questions/{question['id']}", headers=_cookie(outsider_token))
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Access denied"
