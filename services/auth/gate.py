"""Request authorization step: raw Authorization header -> Identity.

Kept free of any web-framework types so the routing layer (or a test) can call
it directly before dispatching to a protected handler.
"""

from typing import Optional

from .exceptions import InvalidCredentialError, InvalidTokenError, MissingCredentialError
from .models import Identity
from .security import TokenService


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Return the second segment of a "<scheme> <token>" header, if any.

    The scheme word itself is not checked.
    """
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) < 2:
        return None
    return parts[1]


def resolve_identity(authorization: Optional[str], token_service: TokenService) -> Identity:
    """Validate a bearer-style credential and return the identity it proves.

    Raises:
        MissingCredentialError: header absent or carries no token segment.
        InvalidCredentialError: token failed validation for any reason.
    """
    token = extract_token(authorization)
    if token is None:
        raise MissingCredentialError()

    try:
        return token_service.validate(token)
    except InvalidTokenError as e:
        raise InvalidCredentialError() from e
