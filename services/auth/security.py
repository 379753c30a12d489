from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from passlib.context import CryptContext
from passlib.exc import UnknownHashError
from jose import JWTError, jwt

from core.config.settings import AuthSettings
from core.logging import get_logger
from .exceptions import InvalidTokenError
from .models import Identity

logger = get_logger(__name__, component="auth")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- Password Hashing ---
class PasswordVerifier:
    """One-way bcrypt hashing with constant-time verification.

    Holds no mutable state after construction; safe to share across requests
    and threads.
    """

    def __init__(self, settings: AuthSettings):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.bcrypt_rounds,
        )

    def hash(self, plain_password: str) -> str:
        """Hashes a plain password with a fresh random salt."""
        return self._context.hash(plain_password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verifies a plain password against its hashed version.

        A digest that is not a recognizable bcrypt hash never matches.
        """
        try:
            return self._context.verify(plain_password, hashed_password)
        except (UnknownHashError, ValueError):
            logger.warning("Stored password digest is not a valid bcrypt hash")
            return False


# --- JSON Web Tokens (JWT) ---
# Issued at login; presented as a bearer token on protected routes.
class TokenService:
    """Issues and validates signed, time-bound session tokens.

    The signing key is fixed at construction. Rotating it invalidates every
    previously issued token; there is no revocation list.
    """

    def __init__(self, settings: AuthSettings, clock: Optional[Clock] = None):
        self._secret_key = settings.secret_key
        self._algorithm = settings.algorithm
        self._lifetime = timedelta(minutes=settings.access_token_expire_minutes)
        self._clock = clock or utc_now

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, subject_id: str, subject_username: str) -> str:
        """Creates a new JWT access token for the subject."""
        issued_at = self._clock()
        claims = {
            "id": subject_id,
            "username": subject_username,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def validate(self, token: str) -> Identity:
        """
        Decodes and validates a JWT access token.

        Raises:
            InvalidTokenError: on a bad signature, malformed payload, missing
                claims or an expired token. Callers are not told which.
        """
        try:
            # Expiry is checked below against the injected clock
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.debug("Token rejected", reason=type(e).__name__)
            raise InvalidTokenError() from e

        subject_id = payload.get("id")
        subject_username = payload.get("username")
        expires_at = payload.get("exp")
        if not isinstance(subject_id, str) or not isinstance(subject_username, str):
            logger.debug("Token rejected", reason="missing_subject")
            raise InvalidTokenError()
        if not isinstance(expires_at, (int, float)):
            logger.debug("Token rejected", reason="missing_expiry")
            raise InvalidTokenError()
        if self._clock().timestamp() >= expires_at:
            logger.debug("Token rejected", reason="expired")
            raise InvalidTokenError()

        return Identity(subject_id=subject_id, subject_username=subject_username)
