"""Authentication exceptions for Tradebook."""

from core.utils.exceptions import TradebookException, ValidationError


class DuplicateUserError(ValidationError):
    """Username or email is already registered."""

    def __init__(self, message: str = "Username or email already exists.", **kwargs):
        super().__init__(message, field="username_or_email", **kwargs)


class AuthenticationError(TradebookException):
    """Base authentication error."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password at login.

    Both causes share one message so a client cannot probe which accounts exist.
    """

    def __init__(self, message: str = "Invalid credentials.", **kwargs):
        super().__init__(message, **kwargs)


class MissingCredentialError(AuthenticationError):
    """No bearer token was presented on a protected route."""

    def __init__(self, message: str = "Unauthorized", **kwargs):
        super().__init__(message, **kwargs)


class InvalidCredentialError(AuthenticationError):
    """Presented token is malformed, expired or forged."""

    def __init__(self, message: str = "Forbidden", **kwargs):
        super().__init__(message, **kwargs)


class InvalidTokenError(InvalidCredentialError):
    """Token validation failed inside the token service."""
    pass
