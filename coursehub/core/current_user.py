from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from coursehub.core.deps import get_db
from coursehub.core.errors import Unauthenticated
from coursehub.core.identity import Identity, VerifiedToken

bearer_scheme = HTTPBearer(auto_error=False)


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    if credentials is None or not credentials.credentials.strip():
        raise Unauthenticated()
    return credentials.credentials.strip()


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    token = _bearer_token(credentials)
    identity = request.app.state.identity_resolver.resolve(token, db)
    request.state.identity = identity
    return identity


def get_verified_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> VerifiedToken:
    """Token check without the directory lookup, for account registration."""
    token = _bearer_token(credentials)
    return request.app.state.identity_resolver.verify(token)
