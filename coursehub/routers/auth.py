from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursehub.core.current_user import get_current_user, get_verified_token
from coursehub.core.deps import get_db
from coursehub.core.errors import BadRequest
from coursehub.core.identity import Identity, VerifiedToken
from coursehub.schemas.common import Envelope
from coursehub.schemas.user import IdentityRead, RegisterRequest, UserRead
from coursehub.services.user_directory import UserDirectory

router = APIRouter()


@router.post(
    "/register",
    response_model=Envelope[UserRead],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "User already registered"},
    },
)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    token: VerifiedToken = Depends(get_verified_token),
):
    directory = UserDirectory(db)
    if directory.get(token.uid) is not None:
        raise BadRequest("User already registered")

    user = directory.create(
        uid=token.uid,
        email=token.email,
        display_name=payload.display_name,
    )
    return Envelope(data=UserRead.model_validate(user), message="Registration complete")


@router.get("/me", response_model=Envelope[IdentityRead])
def me(current_user: Identity = Depends(get_current_user)):
    return Envelope(data=IdentityRead.model_validate(current_user))
