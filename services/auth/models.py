"""Authentication models: identities, user records and auth request/response contracts."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


@dataclass(frozen=True)
class Identity:
    """Authenticated subject resolved from a session token."""
    subject_id: str
    subject_username: str


@dataclass(frozen=True)
class UserRecord:
    """Public view of a registered user. Carries no password material."""
    id: str
    username: str
    email: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful login."""
    token: str
    user_id: str


class RegisterRequest(BaseModel):
    """Registration request body."""
    username: str = Field(min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)  # bcrypt ignores bytes past 72


class LoginRequest(BaseModel):
    """Login request body.

    Fields are not format-checked: a malformed email or oversized password is
    simply a failed login.
    """
    email: str
    password: str


class LoginResponse(BaseModel):
    """Login response: session token plus the caller's user id."""
    model_config = ConfigDict(populate_by_name=True)

    token: str
    user_id: str = Field(serialization_alias="userID", validation_alias="userID")
