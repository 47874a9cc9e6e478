import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from coursehub.core.config import GRACE_PERIOD_MINUTES
from coursehub.db.base import Base


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes; treat as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    assignment_id = Column(String(36), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    enrollment_id = Column(String(36), ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String(128), nullable=False, index=True)
    course_id = Column(String(36), nullable=False, index=True)

    file_url = Column(String(1024), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=True)  # bytes

    submitted_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    # Grading fields (nullable until graded)
    grade = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)
    graded_by = Column(String(128), nullable=True)

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    assignment = relationship("Assignment", back_populates="submissions")
    enrollment = relationship("Enrollment", back_populates="submissions")

    @property
    def late_by_minutes(self) -> int | None:
        due_at = self.assignment.due_at if self.assignment is not None else None
        if due_at is None or self.submitted_at is None:
            return None
        minutes = int((_as_utc(self.submitted_at) - _as_utc(due_at)).total_seconds() // 60)
        return minutes if minutes > 0 else None

    @property
    def is_late(self) -> bool:
        # only "late" beyond the grace period
        late = self.late_by_minutes
        return late is not None and late > GRACE_PERIOD_MINUTES
