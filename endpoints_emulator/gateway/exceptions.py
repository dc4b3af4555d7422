"""
Where: endpoints_emulator/gateway/exceptions.py
What: Gateway exception handler registration and error response rendering.
Why: Keep error handling setup isolated from route and lifecycle concerns.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.deps import get_status_mapping
from .core.cors import CorsDecision, DEFAULT_CORS_POLICY
from .core.exceptions import (
    BackendUnreachableError,
    InvalidPathError,
    RequestError,
    RequestNormalizationError,
)
from .core.errors import REST_ERROR_LIST_TAG
from .core.responses import (
    send_error_response,
    send_not_found_response,
    send_rejected_response,
    send_response,
)
from .core.rpc import rpc_error_body

logger = logging.getLogger("gateway.main")


def _cors_for(request: Request):
    policy = getattr(request.app.state, "cors_policy", DEFAULT_CORS_POLICY)
    decision = getattr(request.state, "cors_decision", None)
    if decision is None:
        decision = CorsDecision.from_headers(request.headers, policy)
    return decision, policy


async def request_error_handler(request: Request, exc: RequestError):
    """
    Render a gateway error.

    JSON RPC errors are returned with status 200 and the error details in
    the body; REST errors use the error's own status.
    """
    decision, policy = _cors_for(request)
    api_request = getattr(request.state, "api_request", None)

    if api_request is not None and api_request.is_rpc:
        body = rpc_error_body(api_request, exc.error.rpc_error())
        status_code = status.HTTP_200_OK
    else:
        body = exc.error.rest_error()
        status_code = exc.error.status_code

    logger.info(
        f"Request failed: {exc.error.message}",
        extra={
            "path": request.url.path,
            "kind": exc.error.kind.value,
            "status": exc.error.status_code,
            "reason": exc.error.reason,
        },
    )
    return send_response(status_code, body, "application/json", decision, policy).response


async def normalization_error_handler(request: Request, exc: RequestNormalizationError):
    decision, policy = _cors_for(request)
    if isinstance(exc, InvalidPathError):
        return send_not_found_response(decision, policy).response

    logger.warning(
        f"Rejected request: {exc}",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    rejection = exc.to_error(get_status_mapping(request)).format_error(REST_ERROR_LIST_TAG)
    return send_rejected_response(rejection, decision, policy).response


async def backend_unreachable_handler(request: Request, exc: BackendUnreachableError):
    decision, policy = _cors_for(request)
    return send_error_response(str(exc), decision, policy).response


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error", "detail": str(exc)},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for HTTPException.
    """
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        decision, policy = _cors_for(request)
        return send_not_found_response(decision, policy).response
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for validation errors.
    """
    return JSONResponse(
        status_code=422,
        content={"message": "Validation Error", "detail": str(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RequestError, request_error_handler)
    app.add_exception_handler(RequestNormalizationError, normalization_error_handler)
    app.add_exception_handler(BackendUnreachableError, backend_unreachable_handler)
