"""
Bearer token resolution.

Two layers live here:

* identity providers verify a raw token and return the decoded subject
  (``FirebaseIdentityProvider`` in production, ``DisabledIdentityProvider``
  when no Firebase project is configured in development);
* identity resolvers turn a token into a role-tagged ``Identity`` by
  combining a provider with the user directory. The resolver is picked once
  at startup by ``build_identity_resolver``.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin import exceptions as firebase_exceptions
from sqlalchemy.orm import Session

from coursehub.core.config import Settings
from coursehub.core.errors import ConfigurationError, InvalidToken, UserNotFound
from coursehub.models.user import Role
from coursehub.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class VerifiedToken:
    uid: str
    email: str = ""


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str
    role: Role


DEV_IDENTITY = Identity(uid="test-user-id", email="test@example.com", role=Role.ADMIN)


class TokenVerificationError(Exception):
    """The provider rejected a token or could not be reached.

    ``transient`` marks provider-side failures (unreachable, timeouts,
    certificate fetch). Callers currently treat both kinds alike.
    """

    def __init__(self, message: str, transient: bool = False):
        super().__init__(message)
        self.transient = transient


class IdentityProvider(Protocol):
    def verify_id_token(self, token: str) -> VerifiedToken: ...


_TRANSIENT_ERRORS = (
    auth.CertificateFetchError,
    firebase_exceptions.UnavailableError,
    firebase_exceptions.DeadlineExceededError,
    firebase_exceptions.UnknownError,
)


class FirebaseIdentityProvider:
    """Verifies Firebase ID tokens against an explicitly constructed app."""

    def __init__(self, app: firebase_admin.App):
        self._app = app

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseIdentityProvider":
        cert = credentials.Certificate(
            {
                "type": "service_account",
                "project_id": settings.firebase_project_id,
                "private_key": settings.private_key,
                "client_email": settings.firebase_client_email,
                "token_uri": GOOGLE_TOKEN_URI,
            }
        )
        app = firebase_admin.initialize_app(
            cert,
            {"projectId": settings.firebase_project_id},
            name=settings.firebase_app_name,
        )
        logger.info("Firebase app %r initialized", app.name)
        return cls(app)

    def verify_id_token(self, token: str) -> VerifiedToken:
        try:
            decoded = auth.verify_id_token(token, app=self._app)
        except _TRANSIENT_ERRORS as exc:
            raise TokenVerificationError(str(exc), transient=True) from exc
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise TokenVerificationError(str(exc)) from exc
        return VerifiedToken(uid=decoded["uid"], email=decoded.get("email") or "")

    def close(self) -> None:
        firebase_admin.delete_app(self._app)
        logger.info("Firebase app %r deleted", self._app.name)


class DisabledIdentityProvider:
    """Stand-in used in development when Firebase is not configured."""

    def verify_id_token(self, token: str) -> VerifiedToken:
        raise TokenVerificationError("identity provider is disabled")


def _role_of(record) -> Role:
    if not record.role:
        return Role.STUDENT
    try:
        return Role(record.role)
    except ValueError:
        logger.warning(
            "Unknown role %r for uid=%s, treating as student", record.role, record.uid
        )
        return Role.STUDENT


class TokenIdentityResolver:
    def __init__(self, provider: IdentityProvider):
        self.provider = provider

    def verify(self, token: str) -> VerifiedToken:
        try:
            return self.provider.verify_id_token(token)
        except TokenVerificationError as exc:
            # TODO: decide with the platform owners whether transient
            # provider failures should surface as 503 instead of 403.
            logger.warning(
                "Token verification failed (transient=%s): %s", exc.transient, exc
            )
            raise InvalidToken() from exc

    def resolve(self, token: str, db: Session) -> Identity:
        verified = self.verify(token)

        record = UserDirectory(db).get(verified.uid)
        if record is None:
            logger.info("No directory record for uid=%s", verified.uid)
            raise UserNotFound()

        return Identity(uid=verified.uid, email=verified.email, role=_role_of(record))


class DevelopmentIdentityResolver(TokenIdentityResolver):
    """Accepts the configured dev token as the fixed admin identity."""

    def __init__(self, provider: IdentityProvider, dev_token: str):
        super().__init__(provider)
        self.dev_token = dev_token

    def verify(self, token: str) -> VerifiedToken:
        if token == self.dev_token:
            return VerifiedToken(uid=DEV_IDENTITY.uid, email=DEV_IDENTITY.email)
        return super().verify(token)

    def resolve(self, token: str, db: Session) -> Identity:
        if token == self.dev_token:
            logger.warning("Development mode: using test token")
            return DEV_IDENTITY
        return super().resolve(token, db)


def build_identity_provider(settings: Settings) -> IdentityProvider:
    missing = settings.missing_firebase_settings()
    if settings.dev_mode and (missing or settings.firebase_placeholder):
        logger.warning("Running in test mode - Firebase disabled")
        return DisabledIdentityProvider()
    if missing:
        raise ConfigurationError(
            f"Missing required environment variable: {missing[0]}"
        )
    return FirebaseIdentityProvider.from_settings(settings)


def build_identity_resolver(
    settings: Settings, provider: IdentityProvider
) -> TokenIdentityResolver:
    if settings.dev_mode:
        return DevelopmentIdentityResolver(provider, settings.dev_token)
    return TokenIdentityResolver(provider)
