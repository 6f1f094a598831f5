from sqlalchemy.orm import Session

from qadesk.db.models.answer import Answer as AnswerModel
from qadesk.db.models.attachment import Attachment as AttachmentModel
from qadesk.db.models.comment import Comment as CommentModel


def _cookie(token: str) -> dict:
    return {"Cookie": f"session={token}"}


def _create_question(client, token: str) -> dict:
    response = client.post(
        "/api/v1/questions",
        json={"title": "Build fails on CI", "content": "The pipeline fails at the test step."},
        headers=_cookie(token),
    )
    assert response.status_code == 201, response.text
    return response.json()


def _answer(client, token: str, question_id: int, content: str = "Clear the cache.", files=None):
    return client.post(
        f"/api/v1/questions/{question_id}/answers",
        data={"content": content},
        files=files,
        headers=_cookie(token),
    )


# ============================================================================
# ANSWERS
# ============================================================================


def test_admin_answers_question(client, db: Session, admin_user: dict, member_token: str, admin_token: str):
    question = _create_question(client, member_token)
    response = _answer(client, admin_token, question["id"])
    assert response.status_code == 201
    data = response.json()
    assert data["questionId"] == question["id"]
    assert data["authorId"] == admin_user["id"]
    assert data["attachments"] == []

    updated = client.get(f"/api/v1/questions/{question['id']}", headers=_cookie(member_token)).json()
    assert updated["status"] == "answered"
    assert updated["updatedAt"] > question["updatedAt"]


def test_answering_keeps_non_unanswered_status(client, db: Session, member_token: str, admin_token: str):
    question = _create_question(client, member_token)
    client.put(
        f"/api/v1/questions/{question['id']}",
        json={"status": "resolved"},
        headers=_cookie(admin_token),
    )
    _answer(client, admin_token, question["id"])
    updated = client.get(f"/api/v1/questions/{question['id']}", headers=_cookie(member_token)).json()
    assert updated["status"] == "resolved"


def test_member_cannot_answer(client, db: Session, member_token: str, teammate_token: str):
    question = _create_question(client, member_token)
    response = _answer(client, teammate_token, question["id"])
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Only administrators can post answers"


def test_outsider_answer_is_denied_by_group_first(client, db: Session, member_token: str, outsider_token: str):
    question = _create_question(client, member_token)
    response = _answer(client, outsider_token, question["id"])
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Access denied"


def test_answer_requires_content(client, db: Session, member_token: str, admin_token: str):
    question = _create_question(client, member_token)
    response = _answer(client, admin_token, question["id"], content="   ")
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Content is required"


def test_answer_notifies_question_author(
    client, db: Session, member_user: dict, member_token: str, admin_token: str, sent_emails
):
    question = _create_question(client, member_token)
    sent_emails.clear()
    _answer(client, admin_token, question["id"])
    assert [e["to"] for e in sent_emails] == [member_user["email"]]
    assert "new answer" in sent_emails[0]["subject"]


def test_answer_with_files(client, db: Session, member_token: str, admin_token: str, storage):
    question = _create_question(client, member_token)
    response = _answer(
        client,
        admin_token,
        question["id"],
        files=[("files", ("fix.txt", b"rm -rf .cache", "text/plain"))],
    )
    assert response.status_code == 201
    attachments = response.json()["attachments"]
    assert [a["fileName"] for a in attachments] == ["fix.txt"]
    assert attachments[0]["answerId"] == response.json()["id"]

    blob_path = db.query(AttachmentModel).one().blob_path
    assert blob_path.startswith(f"questions/{question['id']}/answers/{response.json()['id']}/")
    assert storage.download(blob_path) == b"rm -rf .cache"


def test_answer_with_rejected_file_still_created(client, db: Session, member_token: str, admin_token: str):
    """Files are linked after the answer exists; a bad file does not fail the answer."""
    question = _create_question(client, member_token)
    response = _answer(
        client,
        admin_token,
        question["id"],
        files=[("files", ("tool.exe", b"MZ", "application/x-msdownload"))],
    )
    assert response.status_code == 201
    assert response.json()["attachments"] == []
    assert db.query(AttachmentModel).count() == 0


def test_list_answers(client, db: Session, member_token: str, admin_token: str, outsider_token: str):
    question = _create_question(client, member_token)
    _answer(client, admin_token, question["id"], content="First")
    _answer(client, admin_token, question["id"], content="Second")

    response = client.get(f"/api/v1/questions/{question['id']}/answers", headers=_cookie(member_token))
    assert response.status_code == 200
    assert [a["content"] for a in response.json()] == ["First", "Second"]

    response = client.get(f"/api/v1/questions/{question['id']}/answers", headers=_cookie(outsider_token))
    assert response.status_code == 403


def test_update_and_delete_answer(client, db: Session, member_token: str, admin_token: str):
    question = _create_question(client, member_token)
    answer = _answer(client, admin_token, question["id"]).json()

    response = client.put(
        f"/api/v1/answers/{answer['id']}",
        json={"content": "Clear the cache and rerun."},
        headers=_cookie(admin_token),
    )
    assert response.status_code == 200
    assert response.json()["content"] == "Clear the cache and rerun."

    response = client.put(
        f"/api/v1/answers/{answer['id']}",
        json={"content": "Mine now"},
        headers=_cookie(member_token),
    )
    assert response.status_code == 403

    response = client.delete(f"/api/v1/answers/{answer['id']}", headers=_cookie(admin_token))
    assert response.status_code == 204
    response = client.delete(f"/api/v1/answers/{answer['id']}", headers=_cookie(admin_token))
    assert response.status_code == 404


# ============================================================================
# COMMENTS
# ============================================================================


def _comment(client, token: str, question_id: int, content: str = "Same here.", **data):
    return client.post(
        f"/api/v1/questions/{question_id}/comments",
        data={"content": content, **data},
        headers=_cookie(token),
    )


def test_group_member_comments(client, db: Session, teammate_user: dict, member_token: str, teammate_token: str):
    question = _create_question(client, member_token)
    response = _comment(client, teammate_token, question["id"])
    assert response.status_code == 201
    data = response.json()
    assert data["authorId"] == teammate_user["id"]
    assert data["answerId"] is None


def test_outsider_cannot_comment(client, db: Session, member_token: str, outsider_token: str):
    question = _create_question(client, member_token)
    response = _comment(client, outsider_token, question["id"])
    assert response.status_code == 403
    assert db.query(CommentModel).count() == 0


def test_comment_on_answer(client, db: Session, member_token: str, admin_token: str):
    question = _create_question(client, member_token)
    answer = _answer(client, admin_token, question["id"]).json()
    response = _comment(client, member_token, question["id"], content="Thanks!", answerId=answer["id"])
    assert response.status_code == 201
    assert response.json()["answerId"] == answer["id"]


def test_comment_on_answer_of_other_question(client, db: Session, member_token: str, admin_token: str):
    first = _create_question(client, member_token)
    second = _create_question(client, member_token)
    answer = _answer(client, admin_token, first["id"]).json()

    response = _comment(client, member_token, second["id"], answerId=answer["id"])
    assert response.status_code == 404


def test_comment_too_long(client, db: Session, member_token: str):
    question = _create_question(client, member_token)
    response = _comment(client, member_token, question["id"], content="x" * 1001)
    assert response.status_code == 400
    assert "1000 characters" in response.json()["error"]["message"]


def test_comment_notifies_author_only_when_someone_else_comments(
    client, db: Session, member_user: dict, member_token: str, teammate_token: str, sent_emails
):
    question = _create_question(client, member_token)
    sent_emails.clear()

    _comment(client, member_token, question["id"], content="Any update?")
    assert sent_emails == []

    _comment(client, teammate_token, question["id"], content="Same here.")
    assert [e["to"] for e in sent_emails] == [member_user["email"]]
    assert "carol commented on your question." in sent_emails[0]["text"]


def test_list_and_delete_comments(
    client, db: Session, member_token: str, teammate_token: str, admin_token: str
):
    question = _create_question(client, member_token)
    comment = _comment(client, teammate_token, question["id"]).json()

    response = client.get(f"/api/v1/questions/{question['id']}/comments", headers=_cookie(member_token))
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [comment["id"]]

    # Not the author of the comment
    response = client.delete(f"/api/v1/comments/{comment['id']}", headers=_cookie(member_token))
    assert response.status_code == 403

    response = client.delete(f"/api/v1/comments/{comment['id']}", headers=_cookie(admin_token))
    assert response.status_code == 204
    assert db.query(CommentModel).count() == 0


def test_deleting_question_removes_answers_and_comments(
    client, db: Session, member_token: str, admin_token: str
):
    question = _create_question(client, member_token)
    answer = _answer(client, admin_token, question["id"]).json()
    _comment(client, member_token, question["id"], answerId=answer["id"])

    response = client.delete(f"/api/v1/questions/{question['id']}", headers=_cookie(member_token))
    assert response.status_code == 204
    assert db.query(CommentModel).count() == 0
    assert db.query(AnswerModel).count() == 0
