"""Database-backed credential store: registered users and their password digests."""

import asyncio
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.database.connection import DatabaseManager
from core.database.models import User
from core.logging import get_logger
from core.utils.exceptions import PersistenceError
from core.utils.ids import generate_record_id
from .exceptions import DuplicateUserError
from .models import UserRecord
from .security import PasswordVerifier

logger = get_logger(__name__, component="auth")


def _to_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
    )


class CredentialStore:
    """Owns user rows. The password digest never leaves this class."""

    def __init__(self, db_manager: DatabaseManager, password_verifier: PasswordVerifier):
        self.db_manager = db_manager
        self.password_verifier = password_verifier
        # Stand-in digest checked for unknown emails; every failed login costs one bcrypt run
        self._placeholder_digest = password_verifier.hash(generate_record_id())

    async def register(self, username: str, email: str, password: str) -> UserRecord:
        """Create a user after checking that neither username nor email is taken.

        Raises:
            DuplicateUserError: username or email already registered, including
                a concurrent registration that wins the unique constraint.
            PersistenceError: any other store failure.
        """
        if await self._is_taken(username, email):
            raise DuplicateUserError()

        # No connection is held while hashing
        loop = asyncio.get_running_loop()
        password_hash = await loop.run_in_executor(None, self.password_verifier.hash, password)

        try:
            async with self.db_manager.get_session() as session:
                user = User(username=username, email=email, password_hash=password_hash)
                session.add(user)
                await session.commit()
                record = _to_record(user)
        except IntegrityError as e:
            logger.info("Registration lost unique-constraint race", username=username)
            raise DuplicateUserError() from e
        except SQLAlchemyError as e:
            raise PersistenceError("Registration failed.", operation="register",
                                   table=User.__tablename__) from e

        logger.info("User registered", user_id=record.id, username=record.username)
        return record

    async def verify_credentials(self, email: str, password: str) -> Optional[UserRecord]:
        """Return the user when email and password match, otherwise None.

        Unknown email and wrong password both yield None.
        """
        user = await self._load_by_email(email)
        digest = user.password_hash if user is not None else self._placeholder_digest

        loop = asyncio.get_running_loop()
        matches = await loop.run_in_executor(
            None, self.password_verifier.verify, password, digest
        )
        if user is None or not matches:
            return None
        return _to_record(user)

    async def count(self) -> int:
        """Number of registered users."""
        try:
            async with self.db_manager.get_session() as session:
                result = await session.execute(select(func.count(User.id)))
                return result.scalar_one()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to count users.", operation="count",
                                   table=User.__tablename__) from e

    async def _load_by_email(self, email: str) -> Optional[User]:
        try:
            async with self.db_manager.get_session() as session:
                result = await session.execute(select(User).where(User.email == email))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError("Login failed.", operation="verify_credentials",
                                   table=User.__tablename__) from e

    async def _is_taken(self, username: str, email: str) -> bool:
        try:
            async with self.db_manager.get_session() as session:
                result = await session.execute(
                    select(User.id)
                    .where(or_(User.username == username, User.email == email))
                    .limit(1)
                )
                return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            raise PersistenceError("Registration failed.", operation="register",
                                   table=User.__tablename__) from e
