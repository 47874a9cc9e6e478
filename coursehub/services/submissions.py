import posixpath
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from coursehub.core.errors import Forbidden, NotFound, ValidationFailed
from coursehub.core.identity import Identity
from coursehub.models.assignment import Assignment
from coursehub.models.submission import Submission
from coursehub.schemas.assignment import normalize_extension
from coursehub.schemas.submission import SubmissionCreate
from coursehub.services.enrollment import find_enrollment


def ensure_assignment_exists(db: Session, assignment_id: str) -> Assignment:
    a = db.get(Assignment, assignment_id)
    if a is None or not a.is_published:
        raise NotFound("Assignment not found")
    return a


def ensure_submission_exists(db: Session, submission_id: str) -> Submission:
    s = db.get(Submission, submission_id)
    if s is None:
        raise NotFound("Submission not found")
    return s


def check_file(assignment: Assignment, payload: SubmissionCreate) -> None:
    if assignment.allowed_file_types:
        extension = normalize_extension(posixpath.splitext(payload.file_name)[1])
        if extension not in assignment.allowed_file_types:
            allowed = ", ".join(assignment.allowed_file_types)
            raise ValidationFailed(f"File type not allowed, expected one of: {allowed}")

    if payload.file_size is not None and payload.file_size > assignment.max_file_size * 1024 * 1024:
        raise ValidationFailed(f"File exceeds the {assignment.max_file_size} MB limit")


def submit(
    db: Session, assignment: Assignment, student: Identity, payload: SubmissionCreate
) -> Submission:
    """Create the student's submission, or replace it on resubmit."""
    enrollment = find_enrollment(db, assignment.course_id, student.uid)
    if enrollment is None:
        raise Forbidden("Not enrolled in this course")

    check_file(assignment, payload)

    submission = db.scalar(
        select(Submission).where(
            Submission.assignment_id == assignment.id,
            Submission.student_id == student.uid,
        )
    )
    if submission is None:
        submission = Submission(
            assignment_id=assignment.id,
            enrollment_id=enrollment.id,
            student_id=student.uid,
            course_id=assignment.course_id,
        )
        db.add(submission)

    submission.file_url = payload.file_url
    submission.file_name = payload.file_name
    submission.file_size = payload.file_size
    submission.submitted_at = datetime.now(timezone.utc)
    # a new file invalidates the previous grade
    submission.grade = None
    submission.feedback = None
    submission.graded_at = None
    submission.graded_by = None

    db.commit()
    db.refresh(submission)
    return submission


def grade_submission(
    db: Session,
    submission: Submission,
    grader: Identity,
    grade: float,
    feedback: str | None,
) -> Submission:
    max_points = submission.assignment.max_points
    if grade > max_points:
        raise ValidationFailed(f"Grade cannot exceed {max_points} points")

    submission.grade = grade
    submission.feedback = feedback
    submission.graded_at = datetime.now(timezone.utc)
    submission.graded_by = grader.uid
    db.commit()
    db.refresh(submission)
    return submission
