from datetime import datetime

from pydantic import Field, field_validator

from coursehub.core.config import MAX_UPLOAD_SIZE_MB
from coursehub.schemas.common import CamelModel


def normalize_extension(value: str) -> str:
    value = value.strip().lower()
    if value and not value.startswith("."):
        value = f".{value}"
    return value


class AssignmentCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    instructions: str = ""
    due_at: datetime | None = Field(default=None, alias="dueDate")
    max_points: int = Field(default=100, ge=1)
    allowed_file_types: list[str] = []
    max_file_size: int = Field(default=10, ge=1, le=MAX_UPLOAD_SIZE_MB)
    is_published: bool = True

    @field_validator("allowed_file_types")
    @classmethod
    def normalize_types(cls, value: list[str]) -> list[str]:
        return sorted({normalize_extension(v) for v in value if v.strip()})


class AssignmentRead(CamelModel):
    id: str
    course_id: str
    title: str
    description: str
    instructions: str
    due_at: datetime | None = Field(default=None, alias="dueDate")
    max_points: int
    allowed_file_types: list[str] = []
    max_file_size: int
    is_published: bool
    created_at: datetime
