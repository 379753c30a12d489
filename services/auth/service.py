# services/auth/service.py

from core.config.settings import Settings
from core.logging import get_logger, get_audit_logger_safe
from .credential_store import CredentialStore
from .exceptions import InvalidCredentialsError
from .models import LoginRequest, LoginResult, RegisterRequest, UserRecord
from .security import TokenService

logger = get_logger(__name__, component="auth")
audit_logger = get_audit_logger_safe("auth_service")


class AuthService:
    """High-level authentication service: account registration and login."""

    def __init__(self, settings: Settings, credential_store: CredentialStore,
                 token_service: TokenService):
        self.settings = settings
        self.credential_store = credential_store
        self.token_service = token_service

    async def register(self, request: RegisterRequest) -> UserRecord:
        """Registers a new account. Raises DuplicateUserError if taken."""
        try:
            user = await self.credential_store.register(
                username=request.username,
                email=request.email,
                password=request.password,
            )
        except Exception as e:
            audit_logger.info("Registration rejected",
                              action="register",
                              outcome="failure",
                              username=request.username,
                              reason=type(e).__name__)
            raise

        audit_logger.info("Registration succeeded",
                          action="register",
                          outcome="success",
                          user_id=user.id,
                          username=user.username)
        return user

    async def login(self, request: LoginRequest) -> LoginResult:
        """
        Verifies credentials and issues a session token.

        Unknown email and wrong password raise the same InvalidCredentialsError.
        """
        user = await self.credential_store.verify_credentials(request.email, request.password)
        if user is None:
            audit_logger.info("Login rejected", action="login", outcome="failure")
            raise InvalidCredentialsError()

        token = self.token_service.issue(user.id, user.username)
        audit_logger.info("Login succeeded",
                          action="login",
                          outcome="success",
                          user_id=user.id,
                          username=user.username,
                          token_lifetime_minutes=int(self.token_service.lifetime.total_seconds() // 60))
        return LoginResult(token=token, user_id=user.id)
