import uuid
from datetime import datetime
from typing import Literal

from pydantic import Field

from coursehub.schemas.common import CamelModel


class Resource(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = Field(min_length=1, max_length=255)
    type: Literal["pdf", "video", "link", "document"]
    url: str = Field(min_length=1, max_length=1024)
    description: str | None = None


class LessonCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    content: str = ""
    video_url: str | None = None
    resources: list[Resource] = []
    order: int = Field(default=0, ge=0)
    is_published: bool = True


class LessonRead(CamelModel):
    id: str
    course_id: str
    title: str
    description: str
    content: str
    video_url: str | None = None
    resources: list[Resource] = []
    order: int
    is_published: bool
    created_at: datetime
    updated_at: datetime
