from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from core.database.models import User
from core.utils.exceptions import PersistenceError, ValidationError
from services.auth.credential_store import CredentialStore
from services.auth.exceptions import DuplicateUserError


@pytest.mark.unit
class TestCredentialStore:

    async def test_register_returns_public_record(self, credential_store):
        user = await credential_store.register("alice", "a@x.io", "pw1")

        assert user.username == "alice"
        assert user.email == "a@x.io"
        assert len(user.id) == 32
        assert not hasattr(user, "password_hash")
        assert await credential_store.count() == 1

    async def test_stored_digest_is_not_plaintext(self, credential_store, db_manager, password_verifier):
        await credential_store.register("alice", "a@x.io", "pw1")

        async with db_manager.get_session() as session:
            row = (await session.execute(select(User).where(User.username == "alice"))).scalar_one()
        assert row.password_hash != "pw1"
        assert password_verifier.verify("pw1", row.password_hash)

    async def test_duplicate_username_rejected(self, credential_store):
        await credential_store.register("alice", "a@x.io", "pw1")

        with pytest.raises(DuplicateUserError) as exc_info:
            await credential_store.register("alice", "other@x.io", "pw2")
        assert exc_info.value.message == "Username or email already exists."
        assert isinstance(exc_info.value, ValidationError)
        assert await credential_store.count() == 1

    async def test_duplicate_email_rejected(self, credential_store):
        await credential_store.register("alice", "a@x.io", "pw1")

        with pytest.raises(DuplicateUserError):
            await credential_store.register("bob", "a@x.io", "pw2")
        assert await credential_store.count() == 1

    async def test_distinct_users_both_registered(self, credential_store):
        first = await credential_store.register("alice", "a@x.io", "pw1")
        second = await credential_store.register("bob", "b@x.io", "pw2")

        assert first.id != second.id
        assert await credential_store.count() == 2

    async def test_unknown_email_still_runs_password_check(self, credential_store, password_verifier,
                                                           monkeypatch):
        checked = []
        original_verify = password_verifier.verify

        def verify_spy(plain, digest):
            checked.append(digest)
            return original_verify(plain, digest)

        monkeypatch.setattr(password_verifier, "verify", verify_spy)

        assert await credential_store.verify_credentials("nobody@x.io", "pw1") is None
        assert len(checked) == 1
        assert checked[0].startswith("$2")

    async def test_password_hashed_outside_any_session(self, db_manager, password_verifier, monkeypatch):
        store = CredentialStore(db_manager, password_verifier)
        open_sessions = []
        original_get_session = db_manager.get_session

        @asynccontextmanager
        async def tracking_session():
            async with original_get_session() as session:
                open_sessions.append(session)
                try:
                    yield session
                finally:
                    open_sessions.pop()

        sessions_open_while_hashing = []
        original_hash = password_verifier.hash

        def hash_spy(plain):
            sessions_open_while_hashing.append(len(open_sessions))
            return original_hash(plain)

        monkeypatch.setattr(db_manager, "get_session", tracking_session)
        monkeypatch.setattr(password_verifier, "hash", hash_spy)

        await store.register("alice", "a@x.io", "pw1")

        assert sessions_open_while_hashing == [0]
        assert await store.count() == 1

    async def test_verify_credentials(self, credential_store):
        created = await credential_store.register("alice", "a@x.io", "pw1")

        assert (await credential_store.verify_credentials("a@x.io", "pw1")).id == created.id
        assert await credential_store.verify_credentials("a@x.io", "wrong") is None
        assert await credential_store.verify_credentials("nobody@x.io", "pw1") is None

    async def test_concurrent_duplicate_at_commit_is_duplicate(self, password_verifier):
        session = AsyncMock()
        session.add = MagicMock()
        existing = MagicMock()
        existing.scalar_one_or_none.return_value = None
        session.execute.return_value = existing
        session.commit.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        db_manager = MagicMock()
        db_manager.get_session.return_value.__aenter__.return_value = session
        db_manager.get_session.return_value.__aexit__.return_value = False

        store = CredentialStore(db_manager, password_verifier)
        with pytest.raises(DuplicateUserError):
            await store.register("alice", "a@x.io", "pw1")

    async def test_store_failure_is_persistence_error(self, password_verifier):
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

        db_manager = MagicMock()
        db_manager.get_session.return_value.__aenter__.return_value = session
        db_manager.get_session.return_value.__aexit__.return_value = False

        store = CredentialStore(db_manager, password_verifier)
        with pytest.raises(PersistenceError) as exc_info:
            await store.register("alice", "a@x.io", "pw1")
        assert exc_info.value.message == "Registration failed."
