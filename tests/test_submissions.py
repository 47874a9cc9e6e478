from datetime import datetime, timedelta, timezone

import pytest

from coursehub.core.config import GRACE_PERIOD_MINUTES
from coursehub.models.assignment import Assignment
from tests.conftest import auth_header


@pytest.fixture()
def assignment_id(client, make_course):
    course_id = make_course()
    client.post(f"/courses/{course_id}/enroll", headers=auth_header("student1-token"))
    r = client.post(
        f"/courses/{course_id}/assignments",
        headers=auth_header("teacher-token"),
        json={
            "title": "HW1",
            "dueDate": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
            "maxPoints": 50,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]["id"]


def test_submit_and_resubmit_updates_same_row(client, assignment_id):
    r1 = client.post(
        f"/assignments/{assignment_id}/submissions",
        headers=auth_header("student1-token"),
        json={"fileUrl": "https://files.example.com/a.pdf", "fileName": "a.pdf"},
    )
    assert r1.status_code == 201, r1.text
    id1 = r1.json()["data"]["id"]
    assert r1.json()["data"]["isLate"] is False

    r2 = client.post(
        f"/assignments/{assignment_id}/submissions",
        headers=auth_header("student1-token"),
        json={"fileUrl": "https://files.example.com/b.pdf", "fileName": "b.pdf"},
    )
    assert r2.status_code == 201, r2.text
    body2 = r2.json()["data"]
    assert body2["id"] == id1
    assert body2["fileName"] == "b.pdf"


def test_late_submission_is_allowed_and_marked_late(client, session_factory, assignment_id):
    # force the due date into the past
    db = session_factory()
    try:
        a = db.get(Assignment, assignment_id)
        a.due_at = datetime.now(timezone.utc) - timedelta(days=1)
        db.commit()
    finally:
        db.close()

    r = client.post(
        f"/assignments/{assignment_id}/submissions",
        headers=auth_header("student1-token"),
        json={"fileUrl": "https://files.example.com/late.pdf", "fileName": "late.pdf"},
    )
    assert r.status_code == 201, r.text

    body = r.json()["data"]
    assert body["isLate"] is True
    assert body["lateByMinutes"] is not None
    assert body["lateByMinutes"] > GRACE_PERIOD_MINUTES


def test_student_must_be_enrolled(client, assignment_id):
    r = client.post(
        f"/assignments/{assignment_id}/submissions",
        headers=auth_header("student2-token"),
        json={"fileUrl": "https://files.example.com/x.pdf", "fileName": "x.pdf"},
    )
    assert r.status_code == 403
    assert r.json()["message"] == "Not enrolled in this course"


def test_grading_and_enrollment_view(client, assignment_id):
    r = client.post(
        f"/assignments/{assignment_id}/submissions",
        headers=auth_header("student1-token"),
        json={"fileUrl": "https://files.example.com/a.pdf", "fileName": "a.pdf"},
    )
    submission_id = r.json()["data"]["id"]

    r = client.patch(
        f"/submissions/{submission_id}/grade",
        headers=auth_header("teacher-token"),
        json={"grade": 60},
    )
    assert r.status_code == 422

    r = client.patch(
        f"/submissions/{submission_id}/grade",
        headers=auth_header("teacher-token"),
        json={"grade": 45, "feedback": "Good work"},
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["grade"] == 45
    assert data["gradedBy"] == "teacher-1"

    r = client.get("/enrollments/me", headers=auth_header("student1-token"))
    submissions = r.json()["data"][0]["submissions"]
    assert [s["id"] for s in submissions] == [submission_id]
    assert submissions[0]["feedback"] == "Good work"


def test_student_cannot_grade(client, assignment_id):
    r = client.post(
        f"/assignments/{assignment_id}/submissions",
        headers=auth_header("student1-token"),
        json={"fileUrl": "https://files.example.com/a.pdf", "fileName": "a.pdf"},
    )
    submission_id = r.json()["data"]["id"]
    r = client.patch(
        f"/submissions/{submission_id}/grade",
        headers=auth_header("student1-token"),
        json={"grade": 50},
    )
    assert r.status_code == 403


@pytest.fixture()
def pdf_assignment_id(client, make_course):
    course_id = make_course()
    client.post(f"/courses/{course_id}/enroll", headers=auth_header("student1-token"))
    r = client.post(
        f"/courses/{course_id}/assignments",
        headers=auth_header("teacher-token"),
        json={"title": "Essay", "allowedFileTypes": ["PDF", ".docx"], "maxFileSize": 2},
    )
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["allowedFileTypes"] == [".docx", ".pdf"]
    assert data["maxFileSize"] == 2
    return data["id"]


def test_allowed_file_types_enforced(client, pdf_assignment_id):
    url = f"/assignments/{pdf_assignment_id}/submissions"
    r = client.post(
        url,
        headers=auth_header("student1-token"),
        json={"fileUrl": "https://files.example.com/e.exe", "fileName": "essay.exe"},
    )
    assert r.status_code == 422
    assert r.json()["message"].startswith("File type not allowed")

    r = client.post(
        url,
        headers=auth_header("student1-token"),
        json={"fileUrl": "https://files.example.com/e.pdf", "fileName": "Essay.PDF"},
    )
    assert r.status_code == 201, r.text


def test_max_file_size_enforced(client, pdf_assignment_id):
    url = f"/assignments/{pdf_assignment_id}/submissions"
    r = client.post(
        url,
        headers=auth_header("student1-token"),
        json={
            "fileUrl": "https://files.example.com/e.pdf",
            "fileName": "essay.pdf",
            "fileSize": 3 * 1024 * 1024,
        },
    )
    assert r.status_code == 422
    assert r.json()["message"] == "File exceeds the 2 MB limit"

    r = client.post(
        url,
        headers=auth_header("student1-token"),
        json={
            "fileUrl": "https://files.example.com/e.pdf",
            "fileName": "essay.pdf",
            "fileSize": 1024,
        },
    )
    assert r.status_code == 201
    assert r.json()["data"]["fileSize"] == 1024
