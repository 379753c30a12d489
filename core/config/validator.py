"""
Configuration validation at application startup.

Validates critical configuration values before the API starts serving,
providing clear messages for missing or risky settings.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from core.logging import get_logger
from .settings import Environment, Settings

logger = get_logger(__name__, component="application")


@dataclass
class ValidationResult:
    """Result of a configuration validation check"""
    is_valid: bool
    component: str
    message: str
    severity: str = "error"  # "error", "warning", "info"


class ConfigurationValidator:
    """Startup configuration validator.

    Errors block startup; warnings are logged and startup continues.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.validation_results: List[ValidationResult] = []

    def validate_all(self) -> bool:
        """Run all validation checks. Returns True if no errors were found."""
        self.validation_results = []

        self._validate_auth_settings()
        self._validate_database_settings()
        self._validate_logging_settings()

        errors = [r for r in self.validation_results if r.severity == "error"]
        warnings = [r for r in self.validation_results if r.severity == "warning"]

        for result in errors:
            logger.error("Configuration error", component_name=result.component, detail=result.message)
        for result in warnings:
            logger.warning("Configuration warning", component_name=result.component, detail=result.message)

        if not errors and not warnings:
            logger.info("All configuration validation checks passed")
        elif not errors:
            logger.info("Configuration validation passed with warnings", warnings=len(warnings))

        return len(errors) == 0

    def _validate_auth_settings(self):
        """Validate token signing settings"""
        if self.settings.uses_default_secret():
            # Tokens are forgeable with the default key; production refuses it outright.
            severity = "error" if self.settings.environment == Environment.PRODUCTION else "warning"
            self.validation_results.append(ValidationResult(
                is_valid=False,
                component="Authentication",
                message="AUTH__SECRET_KEY is not set; tokens are signed with the insecure default key",
                severity=severity
            ))
        elif len(self.settings.auth.secret_key) < 32:
            self.validation_results.append(ValidationResult(
                is_valid=False,
                component="Authentication",
                message="JWT secret key should be at least 32 characters long",
                severity="warning"
            ))

        if not self.settings.auth.algorithm.startswith("HS"):
            self.validation_results.append(ValidationResult(
                is_valid=False,
                component="Authentication",
                message=f"Unsupported signing algorithm: {self.settings.auth.algorithm}",
                severity="error"
            ))

        if self.settings.auth.access_token_expire_minutes <= 0:
            self.validation_results.append(ValidationResult(
                is_valid=False,
                component="Authentication",
                message="Token lifetime must be positive",
                severity="error"
            ))

    def _validate_database_settings(self):
        """Validate the database URL is usable by the async engine"""
        try:
            url = make_url(self.settings.database.url)
        except ArgumentError as e:
            self.validation_results.append(ValidationResult(
                is_valid=False,
                component="Database",
                message=f"Invalid database URL: {e}",
                severity="error"
            ))
            return

        if url.drivername in ("postgresql", "sqlite"):
            self.validation_results.append(ValidationResult(
                is_valid=False,
                component="Database",
                message=f"Database URL uses a synchronous driver: {url.drivername}",
                severity="error"
            ))

    def _validate_logging_settings(self):
        """Validate logging configuration"""
        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        if self.settings.logging.level.upper() not in valid_log_levels:
            self.validation_results.append(ValidationResult(
                is_valid=False,
                component="Logging",
                message=f"Invalid log level: {self.settings.logging.level}",
                severity="error"
            ))

    def get_validation_summary(self) -> Dict[str, Any]:
        """Get a summary of validation results"""
        errors = [r for r in self.validation_results if r.severity == "error"]
        warnings = [r for r in self.validation_results if r.severity == "warning"]

        return {
            "total_checks": len(self.validation_results),
            "errors": len(errors),
            "warnings": len(warnings),
            "is_valid": len(errors) == 0,
            "error_details": [{"component": r.component, "message": r.message} for r in errors],
            "warning_details": [{"component": r.component, "message": r.message} for r in warnings]
        }


def validate_startup_configuration(settings: Settings) -> bool:
    """Convenience function to run startup configuration validation."""
    validator = ConfigurationValidator(settings)
    return validator.validate_all()
