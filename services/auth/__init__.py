"""Credential-based authentication: password hashing, session tokens and the request gate."""

from .service import AuthService
from .credential_store import CredentialStore
from .gate import extract_token, resolve_identity
from .security import PasswordVerifier, TokenService
from .models import (
    Identity,
    UserRecord,
    LoginResult,
    RegisterRequest,
    LoginRequest,
    LoginResponse,
)
from .exceptions import (
    AuthenticationError,
    DuplicateUserError,
    InvalidCredentialsError,
    MissingCredentialError,
    InvalidCredentialError,
    InvalidTokenError,
)

__all__ = [
    "AuthService",
    "CredentialStore",
    "PasswordVerifier",
    "TokenService",
    "extract_token",
    "resolve_identity",
    "Identity",
    "UserRecord",
    "LoginResult",
    "RegisterRequest",
    "LoginRequest",
    "LoginResponse",
    "AuthenticationError",
    "DuplicateUserError",
    "InvalidCredentialsError",
    "MissingCredentialError",
    "InvalidCredentialError",
    "InvalidTokenError",
]
