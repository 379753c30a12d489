import pytest
from pydantic import ValidationError as PydanticValidationError

from core.config.settings import (
    DEFAULT_SECRET_KEY,
    APISettings,
    AuthSettings,
    DatabaseSettings,
    Environment,
    Settings,
)
from core.config.validator import ConfigurationValidator, validate_startup_configuration


@pytest.mark.unit
class TestSettings:

    def test_defaults(self, monkeypatch):
        for var in ("AUTH__SECRET_KEY", "API__PORT", "ENVIRONMENT"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)

        assert settings.environment == Environment.DEVELOPMENT
        assert settings.api.port == 8080
        assert settings.auth.algorithm == "HS256"
        assert settings.auth.access_token_expire_minutes == 60
        assert settings.auth.bcrypt_rounds == 10
        assert settings.uses_default_secret()

    def test_nested_env_vars(self, monkeypatch):
        monkeypatch.setenv("AUTH__SECRET_KEY", "from-env-secret-key-0123456789abcdef")
        monkeypatch.setenv("API__PORT", "9090")
        monkeypatch.setenv("DATABASE__URL", "sqlite+aiosqlite:///./env.db")
        settings = Settings(_env_file=None)

        assert settings.auth.secret_key == "from-env-secret-key-0123456789abcdef"
        assert settings.api.port == 9090
        assert settings.database.url == "sqlite+aiosqlite:///./env.db"
        assert not settings.uses_default_secret()

    def test_settings_are_immutable(self, test_settings):
        with pytest.raises(PydanticValidationError):
            test_settings.auth.secret_key = "changed"

    def test_bcrypt_rounds_bounds(self):
        with pytest.raises(PydanticValidationError):
            AuthSettings(bcrypt_rounds=3)

    def test_cors_wildcard_cannot_be_mixed(self):
        with pytest.raises(PydanticValidationError):
            APISettings(cors_origins=["*", "http://localhost:3000"])


@pytest.mark.unit
class TestConfigurationValidator:

    def test_test_settings_pass(self, test_settings):
        assert validate_startup_configuration(test_settings) is True

    def test_default_secret_warns_outside_production(self):
        settings = Settings(
            _env_file=None,
            environment="development",
            auth=AuthSettings(secret_key=DEFAULT_SECRET_KEY),
            database=DatabaseSettings(url="sqlite+aiosqlite:///./dev.db"),
        )
        validator = ConfigurationValidator(settings)

        assert validator.validate_all() is True
        summary = validator.get_validation_summary()
        assert summary["warnings"] == 1
        assert summary["warning_details"][0]["component"] == "Authentication"

    def test_default_secret_blocks_production(self):
        settings = Settings(
            _env_file=None,
            environment="production",
            auth=AuthSettings(secret_key=DEFAULT_SECRET_KEY),
            database=DatabaseSettings(url="postgresql+asyncpg://u:p@db/tradebook"),
        )
        validator = ConfigurationValidator(settings)

        assert validator.validate_all() is False
        assert validator.get_validation_summary()["errors"] == 1

    def test_sync_driver_rejected(self, test_settings):
        settings = test_settings.model_copy(
            update={"database": DatabaseSettings(url="postgresql://u:p@db/tradebook")}
        )
        assert validate_startup_configuration(settings) is False

    def test_invalid_log_level_rejected(self, test_settings):
        settings = test_settings.model_copy(
            update={"logging": test_settings.logging.model_copy(update={"level": "LOUD"})}
        )
        assert validate_startup_configuration(settings) is False
