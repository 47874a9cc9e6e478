from datetime import datetime
from typing import Optional

from pydantic import Field

from coursehub.schemas.common import CamelModel


class SubmissionCreate(CamelModel):
    file_url: str = Field(min_length=1, max_length=1024)
    file_name: str = Field(min_length=1, max_length=255)
    file_size: Optional[int] = Field(default=None, ge=0)  # bytes


class SubmissionRead(CamelModel):
    id: str
    assignment_id: str
    student_id: str
    course_id: str
    file_url: str
    file_name: str
    file_size: Optional[int] = None
    submitted_at: datetime
    grade: Optional[float] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None
    graded_by: Optional[str] = None

    # computed from the assignment due date
    is_late: bool = False
    late_by_minutes: Optional[int] = None


class SubmissionGradeUpdate(CamelModel):
    grade: float = Field(ge=0)
    feedback: Optional[str] = None
