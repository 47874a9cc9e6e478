from datetime import datetime

from pydantic import Field

from coursehub.schemas.common import CamelModel
from coursehub.schemas.submission import SubmissionRead


class EnrollmentRead(CamelModel):
    id: str
    student_id: str
    course_id: str
    enrolled_at: datetime
    progress: int
    completed_lessons: list[str] = []
    submissions: list[SubmissionRead] = []
    grade: float | None = None
    is_completed: bool
    completed_at: datetime | None = None


class EnrollmentGradeUpdate(CamelModel):
    grade: float = Field(ge=0, le=100)
