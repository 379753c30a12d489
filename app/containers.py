# DI container for the Tradebook API
from dependency_injector import containers, providers

from core.config.settings import Settings
from core.database.connection import DatabaseManager
from services.auth.credential_store import CredentialStore
from services.auth.security import PasswordVerifier, TokenService
from services.auth.service import AuthService
from services.orders.ledger import OrderLedger
from services.portfolio.repository import PortfolioRepository


class AppContainer(containers.DeclarativeContainer):
    """Application dependency injection container"""

    # Configuration
    settings = providers.Singleton(Settings)

    # Database with environment awareness
    db_manager = providers.Singleton(
        DatabaseManager,
        db_url=settings.provided.database.url,
        environment=settings.provided.environment,
        schema_management=settings.provided.database.schema_management,
        echo=settings.provided.database.echo,
    )

    # --- Authentication ---
    # Stateless after construction; shared by every request
    password_verifier = providers.Singleton(
        PasswordVerifier,
        settings=settings.provided.auth,
    )

    token_service = providers.Singleton(
        TokenService,
        settings=settings.provided.auth,
    )

    credential_store = providers.Singleton(
        CredentialStore,
        db_manager=db_manager,
        password_verifier=password_verifier,
    )

    auth_service = providers.Singleton(
        AuthService,
        settings=settings,
        credential_store=credential_store,
        token_service=token_service,
    )

    # --- Orders and portfolio listings ---
    order_ledger = providers.Singleton(
        OrderLedger,
        db_manager=db_manager,
    )

    portfolio_repository = providers.Singleton(
        PortfolioRepository,
        db_manager=db_manager,
    )
