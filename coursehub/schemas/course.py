from datetime import datetime

from pydantic import AliasChoices, Field, field_validator

from coursehub.core.config import (
    COURSE_CATEGORIES,
    DEFAULT_CATEGORY,
    MAX_DURATION_HOURS,
    MAX_STUDENTS,
    MIN_DURATION_HOURS,
    MIN_STUDENTS,
)
from coursehub.schemas.assignment import AssignmentRead
from coursehub.schemas.common import CamelModel
from coursehub.schemas.lesson import LessonRead


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def _known_category(value: str) -> str:
    if value not in COURSE_CATEGORIES:
        raise ValueError(f"unknown category {value!r}")
    return value


class CourseCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    syllabus: str | None = None
    category: str = DEFAULT_CATEGORY
    duration: int = Field(default=8, ge=MIN_DURATION_HOURS, le=MAX_DURATION_HOURS)
    max_students: int = Field(default=50, ge=MIN_STUDENTS, le=MAX_STUDENTS)
    price: float | None = Field(default=None, ge=0)
    # the course form posts the image URL as "thumbnail"
    thumbnail_url: str | None = Field(
        default=None,
        max_length=1024,
        validation_alias=AliasChoices("thumbnailUrl", "thumbnail_url", "thumbnail"),
    )
    prerequisites: list[str] = []
    learning_objectives: list[str] = []

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _not_blank(value)

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, value):
        # the course form posts "" when no category is picked
        return value or DEFAULT_CATEGORY

    @field_validator("category")
    @classmethod
    def check_category(cls, value: str) -> str:
        return _known_category(value)


class CourseUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    syllabus: str | None = None
    category: str | None = None
    duration: int | None = Field(default=None, ge=MIN_DURATION_HOURS, le=MAX_DURATION_HOURS)
    max_students: int | None = Field(default=None, ge=MIN_STUDENTS, le=MAX_STUDENTS)
    price: float | None = Field(default=None, ge=0)
    # the course form posts the image URL as "thumbnail"
    thumbnail_url: str | None = Field(
        default=None,
        max_length=1024,
        validation_alias=AliasChoices("thumbnailUrl", "thumbnail_url", "thumbnail"),
    )
    prerequisites: list[str] | None = None
    learning_objectives: list[str] | None = None
    is_active: bool | None = None

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        return _not_blank(value) if value is not None else value

    @field_validator("category")
    @classmethod
    def check_category(cls, value: str | None) -> str | None:
        return _known_category(value) if value is not None else value


class CourseSummary(CamelModel):
    id: str
    title: str
    description: str
    instructor_name: str
    category: str
    duration: int
    max_students: int
    enrolled_students: list[str]
    is_active: bool
    thumbnail_url: str | None = None
    price: float | None = None


class CourseRead(CourseSummary):
    syllabus: str | None = None
    instructor: str = Field(validation_alias="instructor_id")
    is_approved: bool
    prerequisites: list[str] = []
    learning_objectives: list[str] = []
    created_at: datetime
    updated_at: datetime


class CourseDetail(CourseRead):
    lessons: list[LessonRead] = Field(default=[], validation_alias="published_lessons")
    assignments: list[AssignmentRead] = Field(
        default=[], validation_alias="published_assignments"
    )
