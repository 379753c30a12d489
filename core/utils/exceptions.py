# Structured exception hierarchy for Tradebook

from typing import Dict, Any, Optional
from datetime import datetime, timezone


class TradebookException(Exception):
    """Base exception for all Tradebook specific errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 correlation_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.correlation_id = correlation_id
        self.timestamp = datetime.now(timezone.utc)


# Validation Errors
class ValidationError(TradebookException):
    """Client input rejected before any state was mutated"""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


# Infrastructure Errors
class PersistenceError(TradebookException):
    """Unexpected failure from the backing store.

    Every store operation is a single-record write or a read, so no partial
    state is left behind when this is raised.
    """

    def __init__(self, message: str, operation: str, table: Optional[str] = None,
                 **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.table = table


# Configuration Errors
class ConfigurationError(TradebookException):
    """Configuration validation errors"""

    def __init__(self, message: str, config_field: str, **kwargs):
        super().__init__(message, **kwargs)
        self.config_field = config_field
