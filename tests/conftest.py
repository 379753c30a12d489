"""
Pytest configuration and shared fixtures for Tradebook tests.
"""
import pytest
from datetime import datetime, timezone
from httpx import ASGITransport, AsyncClient

from core.config.settings import (
    Settings,
    DatabaseSettings,
    AuthSettings,
    LoggingSettings,
)
from core.database.connection import DatabaseManager
from services.auth.credential_store import CredentialStore
from services.auth.security import PasswordVerifier, TokenService
from services.orders.ledger import OrderLedger

TEST_SECRET_KEY = "test-secret-key-for-tradebook-unit-tests-0123456789"


class FakeClock:
    """Settable clock for token expiry tests."""

    def __init__(self, now: datetime = None):
        self.now = now or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta):
        self.now = self.now + delta


@pytest.fixture
def test_settings(tmp_path):
    """Test settings configuration backed by a throwaway SQLite file."""
    return Settings(
        environment="testing",
        database=DatabaseSettings(
            url=f"sqlite+aiosqlite:///{tmp_path / 'tradebook_test.db'}"
        ),
        auth=AuthSettings(
            secret_key=TEST_SECRET_KEY,
            bcrypt_rounds=4,  # Minimum cost keeps the suite fast
        ),
        logging=LoggingSettings(
            level="WARNING",
            file_enabled=False,
        ),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def password_verifier(test_settings):
    return PasswordVerifier(test_settings.auth)


@pytest.fixture
def token_service(test_settings, clock):
    return TokenService(test_settings.auth, clock=clock)


@pytest.fixture
async def db_manager(test_settings):
    """Initialized database manager; tables are created fresh per test."""
    manager = DatabaseManager(
        db_url=test_settings.database.url,
        environment=test_settings.environment.value,
    )
    await manager.init()
    yield manager
    await manager.shutdown()


@pytest.fixture
def credential_store(db_manager, password_verifier):
    return CredentialStore(db_manager, password_verifier)


@pytest.fixture
def order_ledger(db_manager):
    return OrderLedger(db_manager)


@pytest.fixture
async def app(test_settings):
    """FastAPI app wired to the test settings.

    httpx's ASGITransport does not run lifespan events, so tables are created here.
    """
    from api.main import create_app

    application = create_app(test_settings)
    container = application.state.container
    await container.db_manager().init()
    yield application
    await container.db_manager().shutdown()
    container.unwire()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
