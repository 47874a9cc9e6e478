from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursehub.core.deps import get_db
from coursehub.core.identity import Identity
from coursehub.core.permissions import ensure_course_manager, require_auth, require_teacher_or_admin
from coursehub.schemas.common import Envelope
from coursehub.schemas.submission import SubmissionCreate, SubmissionGradeUpdate, SubmissionRead
from coursehub.services import submissions as submission_service

router = APIRouter()


@router.post(
    "/assignments/{assignment_id}/submissions",
    response_model=Envelope[SubmissionRead],
    status_code=status.HTTP_201_CREATED,
)
def submit_assignment(
    assignment_id: str,
    payload: SubmissionCreate,
    db: Session = Depends(get_db),
    me: Identity = Depends(require_auth),
):
    assignment = submission_service.ensure_assignment_exists(db, assignment_id)
    submission = submission_service.submit(db, assignment, me, payload)
    return Envelope(data=SubmissionRead.model_validate(submission))


@router.patch("/submissions/{submission_id}/grade", response_model=Envelope[SubmissionRead])
def grade_submission(
    submission_id: str,
    payload: SubmissionGradeUpdate,
    db: Session = Depends(get_db),
    me: Identity = Depends(require_teacher_or_admin),
):
    submission = submission_service.ensure_submission_exists(db, submission_id)
    ensure_course_manager(me, submission.assignment.course)

    submission = submission_service.grade_submission(
        db, submission, me, payload.grade, payload.feedback
    )
    return Envelope(data=SubmissionRead.model_validate(submission))
