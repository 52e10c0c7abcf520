"""
Global error handling middleware.

Routers translate campaign database failures themselves; this is the last
line for anything that escapes them.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from tracker.infrastructure.supabase_client import SupabaseAPIError


logger = logging.getLogger(__name__)


def _request_context(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


def _error_response(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Turns uncaught exceptions into JSON error bodies.

    - SupabaseAPIError: its own status code
    - ValueError: 400
    - anything else: 500, with the traceback logged
    """

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)

        except SupabaseAPIError as e:
            logger.error(
                f"Campaign database error on {request.url.path}: {e.message}",
                extra={**_request_context(request), "status_code": e.status_code},
            )
            return _error_response(e.status_code, "Campaign database error", e.message)

        except ValueError as e:
            logger.warning(f"Rejected request: {e}", extra=_request_context(request))
            return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", str(e))

        except Exception as e:
            logger.exception(f"Unhandled exception: {e}", extra=_request_context(request))
            return _error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal server error",
                "An unexpected error occurred",
            )
