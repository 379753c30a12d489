from fastapi import APIRouter, Depends, Request, status
from dependency_injector.wiring import inject, Provide
import time

from app.containers import AppContainer
from api.schemas.responses import MessageResponse, ErrorResponse
from services.auth.models import LoginRequest, LoginResponse, RegisterRequest
from services.auth.service import AuthService
from core.logging import get_api_logger_safe

router = APIRouter(tags=["Authentication"])

api_logger = get_api_logger_safe("auth_api")


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@inject
async def register(
    body: RegisterRequest,
    request: Request,
    auth_service: AuthService = Depends(Provide[AppContainer.auth_service]),
):
    """
    Create an account. Username and email must both be unused.
    """
    start_time = time.time()
    client_ip = request.client.host if request.client else "unknown"

    await auth_service.register(body)

    api_logger.info("Registration completed",
                    client_ip=client_ip,
                    endpoint="/register",
                    processing_time_ms=(time.time() - start_time) * 1000,
                    response_code=201)
    return MessageResponse(message="User registered successfully!")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@inject
async def login(
    body: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(Provide[AppContainer.auth_service]),
):
    """
    Exchange email and password for a session token.

    Unknown email and wrong password get the same 400 response.
    """
    start_time = time.time()
    client_ip = request.client.host if request.client else "unknown"

    result = await auth_service.login(body)

    api_logger.info("Login completed",
                    client_ip=client_ip,
                    endpoint="/login",
                    processing_time_ms=(time.time() - start_time) * 1000,
                    response_code=200)
    return LoginResponse(token=result.token, user_id=result.user_id)
