# Structured logging with multi-channel support
import structlog
from typing import Optional

from core.config.settings import Settings
from .channels import LogChannel
from .correlation import CorrelationIdManager
from .enhanced_logging import (
    configure_enhanced_logging,
    get_enhanced_logger,
    get_channel_logger,
    get_api_logger,
    get_audit_logger,
    get_error_logger,
    get_database_logger,
)


def configure_logging(settings: Settings) -> None:
    """Configure the logging system (idempotent)."""
    configure_enhanced_logging(settings)


def get_logger(name: str, component: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return get_enhanced_logger(name, component)


def get_api_logger_safe(name: str) -> structlog.BoundLogger:
    """Get an API logger with safe fallback."""
    try:
        return get_api_logger(name)
    except KeyError:
        return get_logger(name, "api")


def get_audit_logger_safe(name: str) -> structlog.BoundLogger:
    """Get an audit logger with safe fallback."""
    try:
        return get_audit_logger(name)
    except KeyError:
        return get_logger(name, "audit")


def get_error_logger_safe(name: str) -> structlog.BoundLogger:
    """Get an error logger with safe fallback."""
    try:
        return get_error_logger(name)
    except KeyError:
        return get_logger(name, "error")


def get_database_logger_safe(name: str) -> structlog.BoundLogger:
    """Get a database logger with safe fallback."""
    try:
        return get_database_logger(name)
    except KeyError:
        return get_logger(name, "database")


__all__ = [
    "LogChannel",
    "CorrelationIdManager",
    "configure_logging",
    "get_logger",
    "get_channel_logger",
    "get_api_logger_safe",
    "get_audit_logger_safe",
    "get_error_logger_safe",
    "get_database_logger_safe",
]
