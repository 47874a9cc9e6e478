from datetime import datetime

from pydantic import Field, field_validator

from coursehub.models.user import Role
from coursehub.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    display_name: str | None = Field(default=None, max_length=255)


class UserRead(CamelModel):
    uid: str
    email: str
    display_name: str | None = None
    role: Role = Role.STUDENT
    created_at: datetime | None = None

    @field_validator("role", mode="before")
    @classmethod
    def default_role(cls, value):
        if value in {r.value for r in Role}:
            return value
        return Role.STUDENT


class IdentityRead(CamelModel):
    uid: str
    email: str
    role: Role


class RoleUpdate(CamelModel):
    role: Role
