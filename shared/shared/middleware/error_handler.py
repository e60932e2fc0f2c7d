import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def build_error_body(detail: Any, request: Request) -> dict[str, Any]:
    """Shape an HTTPException detail into the ``{"error": {...}, "request_id"}`` envelope.

    Dict details (``{"code": ..., "message": ..., ...}``) are passed through so
    machine-readable error kinds survive; plain strings become both code and message.
    """
    if isinstance(detail, dict):
        error = {"code": detail.get("code", "http_error"), **detail}
    elif isinstance(detail, str):
        error = {"code": detail, "message": detail}
    else:
        error = {"code": "http_error", "message": str(detail)}
    return {"error": error, "request_id": getattr(request.state, "request_id", None)}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_body(exc.detail, request),
        headers=getattr(exc, "headers", None),
    )


async def error_envelope_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    try:
        return await call_next(request)
    except StarletteHTTPException as exc:
        return await http_exception_handler(request, exc)
    except Exception:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {"code": "internal_error", "message": "An unexpected error occurred"},
                "request_id": getattr(request.state, "request_id", None),
            },
        )
