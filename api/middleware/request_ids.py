from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from uuid import uuid4

from core.logging.correlation import CorrelationIdManager

CORRELATION_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request_id and a correlation_id to every HTTP request.

    - Sets request.state.request_id
    - Reuses an incoming X-Correlation-ID, otherwise generates one
    - Adds X-Request-ID and X-Correlation-ID headers to the response
    """

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id

        incoming = request.headers.get(CORRELATION_HEADER)
        if incoming:
            corr_id = CorrelationIdManager.set_correlation_id(incoming)
        else:
            corr_id = CorrelationIdManager.ensure_correlation_id()
        CorrelationIdManager.set_correlation_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        finally:
            CorrelationIdManager.clear_correlation()

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[CORRELATION_HEADER] = corr_id
        return response
