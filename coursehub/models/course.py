import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursehub.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    syllabus: Mapped[str | None] = mapped_column(Text)
    instructor_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    instructor_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    # guarded by the conditional update in services.enrollment
    enrolled_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[float | None] = mapped_column(Float)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1024))
    prerequisites: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    learning_objectives: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    enrollments = relationship(
        "Enrollment",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Enrollment.enrolled_at",
    )

    lessons = relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Lesson.order",
    )

    assignments = relationship(
        "Assignment",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Assignment.created_at",
    )

    @property
    def enrolled_students(self) -> list[str]:
        return [e.student_id for e in self.enrollments]

    @property
    def is_full(self) -> bool:
        return self.enrolled_count >= self.max_students

    @property
    def published_lessons(self) -> list:
        return [lesson for lesson in self.lessons if lesson.is_published]

    @property
    def published_assignments(self) -> list:
        return [a for a in self.assignments if a.is_published]
