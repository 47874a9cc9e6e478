import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from coursehub.db.base import Base


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # plain uid, the directory lives with the identity provider's accounts
    student_id = Column(String(128), nullable=False, index=True)
    course_id = Column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    enrolled_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    progress = Column(Integer, nullable=False, default=0)
    grade = Column(Float, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "student_id", "course_id", name="uq_enrollments_student_course"
        ),
    )

    course = relationship("Course", back_populates="enrollments")
    lesson_completions = relationship(
        "LessonCompletion", back_populates="enrollment", cascade="all, delete-orphan"
    )
    submissions = relationship(
        "Submission", back_populates="enrollment", cascade="all, delete-orphan"
    )

    @property
    def completed_lessons(self) -> list[str]:
        return [c.lesson_id for c in self.lesson_completions]


class LessonCompletion(Base):
    __tablename__ = "lesson_completions"

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(
        String(36),
        ForeignKey("enrollments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    lesson_id = Column(
        String(36), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
    )
    completed_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "enrollment_id", "lesson_id", name="uq_lesson_completion_enrollment_lesson"
        ),
    )

    enrollment = relationship("Enrollment", back_populates="lesson_completions")
