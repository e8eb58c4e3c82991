from datetime import timedelta

import pytest

from exam_portal.models import SubmissionStatus
from exam_portal.utils.helpers import now_utc


@pytest.fixture
def teacher_client(app, teacher):
    client = app.test_client()
    response = client.post("/api/teacher/login", json={"username": "alice", "password": "secret123"})
    assert response.status_code == 200
    return client


def _publish_sample_exam(teacher_client):
    response = teacher_client.post("/api/teacher/exams", json={
        "title": "Biology Quiz",
        "header": "Unit 3",
        "instructions": "No notes.",
        "durationSeconds": 1200,
    })
    assert response.status_code == 201
    exam_id = response.get_json()["exam"]["id"]

    response = teacher_client.put(f"/api/teacher/exams/{exam_id}/questions", json={"questions": [
        {"text": "Cells have a nucleus?", "type": "TRUE_FALSE", "options": [
            {"text": "True", "isCorrect": True},
            {"text": "False", "isCorrect": False},
        ]},
        {"text": "Name the powerhouse of the cell.", "type": "SHORT_ANSWER"},
    ]})
    assert response.status_code == 200
    questions = response.get_json()["exam"]["questions"]

    response = teacher_client.patch(f"/api/teacher/exams/{exam_id}", json={"isPublished": True})
    assert response.status_code == 200
    return exam_id, questions


# ========================================
# AUTH
# ========================================

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_login_rejects_bad_password(client, teacher):
    response = client.post("/api/teacher/login", json={"username": "alice", "password": "nope"})
    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthorized"


def test_login_requires_fields(client):
    response = client.post("/api/teacher/login", json={"username": "alice"})
    assert response.status_code == 400


def test_teacher_routes_require_session(client):
    response = client.get("/api/teacher/exams")
    assert response.status_code == 401


def test_logout_ends_session(teacher_client):
    assert teacher_client.get("/api/teacher/me").status_code == 200
    assert teacher_client.post("/api/teacher/logout").status_code == 200
    assert teacher_client.get("/api/teacher/exams").status_code == 401


def test_non_json_body_is_rejected(teacher_client):
    response = teacher_client.post("/api/teacher/exams", data="title=x")
    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"


def test_unknown_route_is_json_404(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.get_json()["error"] == "not_found"


# ========================================
# EXAM LIFECYCLE OVER HTTP
# ========================================

def test_full_exam_flow(app, teacher_client):
    exam_id, questions = _publish_sample_exam(teacher_client)
    tf, short = questions
    true_option = next(o["id"] for o in tf["options"] if o["isCorrect"])

    student = app.test_client()
    listed = student.get("/api/exams").get_json()["exams"]
    assert [e["id"] for e in listed] == [exam_id]

    response = student.post("/api/submissions/start", json={
        "name": "Lee", "section": "C", "grade": "11", "examId": exam_id,
    })
    assert response.status_code == 201
    submission_id = response.get_json()["submission"]["id"]

    paper = student.get(f"/api/submissions/{submission_id}/questions").get_json()
    assert paper["studentName"] == "Lee"
    assert all("isCorrect" not in o for q in paper["questions"] for o in q["options"])

    response = student.post(f"/api/submissions/{submission_id}/submit", json={"answers": [
        {"questionId": tf["id"], "selectedOptionId": true_option},
        {"questionId": short["id"], "textAnswer": "Mitochondria"},
    ]})
    assert response.status_code == 200
    body = response.get_json()
    assert body["score"] == 1
    assert body["totalPossibleScore"] == 2
    assert body["status"] == SubmissionStatus.SUBMITTED

    again = student.post(f"/api/submissions/{submission_id}/submit", json={"answers": []})
    assert again.status_code == 409
    assert again.get_json()["error"] == "conflict"

    result = student.get(f"/api/submissions/{submission_id}/result").get_json()["submission"]
    assert result["isFullyGraded"] is False

    listing = teacher_client.get(f"/api/teacher/exams/{exam_id}/submissions").get_json()
    assert [s["id"] for s in listing["submissions"]] == [submission_id]

    details = teacher_client.get(f"/api/teacher/submissions/{submission_id}/details").get_json()
    short_answer = next(a for a in details["submission"]["answers"] if a["questionId"] == short["id"])
    assert short_answer["textAnswer"] == "Mitochondria"

    response = teacher_client.put(f"/api/teacher/submissions/{submission_id}/grade", json={
        "grades": [{"answerId": short_answer["id"], "pointsAwarded": 1}],
    })
    assert response.status_code == 200
    graded = response.get_json()["submission"]
    assert graded["score"] == 2
    assert graded["isFullyGraded"] is True
    assert graded["status"] == SubmissionStatus.GRADED


def test_student_cannot_start_twice(app, teacher_client):
    exam_id, _ = _publish_sample_exam(teacher_client)
    student = app.test_client()
    payload = {"name": "Lee", "section": "C", "grade": "11", "examId": exam_id}
    assert student.post("/api/submissions/start", json=payload).status_code == 201
    assert student.post("/api/submissions/start", json=payload).status_code == 409


def test_start_unpublished_exam_is_404(app, teacher_client):
    exam_id = teacher_client.post("/api/teacher/exams", json={"title": "Draft"}).get_json()["exam"]["id"]
    response = app.test_client().post("/api/submissions/start", json={
        "name": "Lee", "section": "C", "grade": "11", "examId": exam_id,
    })
    assert response.status_code == 404
    assert app.test_client().get(f"/api/exams/{exam_id}/public").status_code == 404


def test_other_student_cannot_read_attempt(app, teacher_client):
    exam_id, _ = _publish_sample_exam(teacher_client)
    owner = app.test_client()
    submission_id = owner.post("/api/submissions/start", json={
        "name": "Lee", "section": "C", "grade": "11", "examId": exam_id,
    }).get_json()["submission"]["id"]

    anonymous = app.test_client()
    assert anonymous.get(f"/api/submissions/{submission_id}/questions").status_code == 403
    assert anonymous.post(
        f"/api/submissions/{submission_id}/submit", json={"answers": []}
    ).status_code == 403


def test_bad_grade_payload_is_400(app, teacher_client):
    response = teacher_client.put("/api/teacher/submissions/1/grade", json={"grades": []})
    assert response.status_code == 400
    assert "grades" in response.get_json()["errors"]


# ========================================
# NOTICES
# ========================================

def test_public_announcements_hide_drafts_and_expired(client, teacher_client):
    past = (now_utc() - timedelta(days=1)).isoformat()
    teacher_client.post("/api/teacher/announcements", json={
        "title": "Welcome", "content": "Exams open next week.",
    })
    teacher_client.post("/api/teacher/announcements", json={
        "title": "Draft note", "content": "Not ready to share yet.", "isPublished": False,
    })
    teacher_client.post("/api/teacher/announcements", json={
        "title": "Old news", "content": "This one has expired.", "expiresAt": past,
    })

    public = client.get("/api/announcements").get_json()["announcements"]
    assert [a["title"] for a in public] == ["Welcome"]

    mine = teacher_client.get("/api/teacher/announcements").get_json()["announcements"]
    assert len(mine) == 3


def test_announcement_update_and_delete(teacher_client):
    created = teacher_client.post("/api/teacher/announcements", json={
        "title": "Welcome", "content": "Exams open next week.",
    }).get_json()["announcement"]

    response = teacher_client.patch(
        f"/api/teacher/announcements/{created['id']}", json={"title": "Hello all"}
    )
    assert response.get_json()["announcement"]["title"] == "Hello all"

    assert teacher_client.delete(f"/api/teacher/announcements/{created['id']}").status_code == 200
    assert teacher_client.delete(f"/api/teacher/announcements/{created['id']}").status_code == 404


def test_announcement_validation(teacher_client):
    response = teacher_client.post("/api/teacher/announcements", json={"title": "Hi", "content": "short"})
    assert response.status_code == 400
    assert set(response.get_json()["errors"]) == {"title", "content"}


def test_public_schedules_only_future(client, teacher_client):
    future = (now_utc() + timedelta(days=7)).isoformat()
    past = (now_utc() - timedelta(days=7)).isoformat()
    response = teacher_client.post("/api/teacher/schedules", json={
        "examTitle": "Finals", "examDate": future, "location": "Hall A",
    })
    assert response.status_code == 201
    teacher_client.post("/api/teacher/schedules", json={"examTitle": "Midterm", "examDate": past})

    public = client.get("/api/schedules").get_json()["schedules"]
    assert [s["examTitle"] for s in public] == ["Finals"]
    assert public[0]["examDateLocal"] is not None


def test_schedule_requires_valid_date(teacher_client):
    response = teacher_client.post("/api/teacher/schedules", json={
        "examTitle": "Finals", "examDate": "next tuesday",
    })
    assert response.status_code == 400
    assert "examDate" in response.get_json()["errors"]
