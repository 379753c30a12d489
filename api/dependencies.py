from typing import Optional

from fastapi import Depends, Header, Request
from dependency_injector.wiring import inject, Provide

from app.containers import AppContainer
from services.auth.gate import resolve_identity
from services.auth.models import Identity
from services.auth.security import TokenService


# Bearer authentication
@inject
async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    token_service: TokenService = Depends(Provide[AppContainer.token_service]),
) -> Identity:
    """Resolve the caller's identity from the Authorization header.

    Raises MissingCredentialError (401) or InvalidCredentialError (403) before
    the protected handler runs. On success the identity is also attached to
    request.state.identity.
    """
    identity = resolve_identity(authorization, token_service)
    request.state.identity = identity
    return identity

