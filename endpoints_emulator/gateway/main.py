"""
Endpoints dev gateway - API front-end compatible server

Makes local calls look to the backend like calls from the production API
front-end, and makes CORS headers and errors look to the caller like the
front-end's own.
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request

from .api.deps import CorsDecisionDep, CorsPolicyDep, SpiDispatcherDep, StatusMappingDep
from .config import config
from .core.api_request import normalize
from .core.error_info import DEFAULT_STATUS_CODE_MAPPING, StatusCodeMapping
from .core.errors import generic_error
from .core.exceptions import RequestError
from .core.logging_config import setup_logging
from .core.responses import send_not_found_response, send_redirect_response, send_response
from .core.rpc import rpc_result_body
from .exceptions import register_exception_handlers
from .lifecycle import manage_lifespan
from .middleware import request_context_middleware

# Logger setup
setup_logging()
logger = logging.getLogger("gateway.main")

API_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with manage_lifespan(app, config):
        yield


app = FastAPI(
    title="Endpoints Dev Gateway", version="1.0.0", lifespan=lifespan, root_path=config.root_path
)

app.middleware("http")(request_context_middleware)
register_exception_handlers(app)


def _decode_backend_result(
    body: bytes, mapping: StatusCodeMapping = DEFAULT_STATUS_CODE_MAPPING
) -> Any:
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        logger.warning(
            "Backend returned a non-JSON body for a JSON RPC call.",
            extra={"snippet": body[:200].decode("utf-8", errors="replace")},
        )
        raise RequestError(
            generic_error(503, "Non-JSON reply from backend", mapping=mapping)
        )


# ===========================================
# Endpoint definitions.
# ===========================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get(f"{config.API_PATH_PREFIX}explorer")
async def api_explorer_redirect(
    request: Request, cors_decision: CorsDecisionDep, cors_policy: CorsPolicyDep
):
    """Send the caller to the API explorer, pointed at this server."""
    base_url = f"{request.url.scheme}://{request.url.netloc}{config.API_PATH_PREFIX.rstrip('/')}"
    location = f"{config.API_EXPLORER_URL}?base={base_url}"
    return send_redirect_response(location, cors_decision, cors_policy).response


@app.options("/{path:path}")
async def cors_preflight(
    request: Request, cors_decision: CorsDecisionDep, cors_policy: CorsPolicyDep
):
    """Answer CORS preflight requests for API paths."""
    if not request.url.path.startswith(config.API_PATH_PREFIX):
        return send_not_found_response(cors_decision, cors_policy).response
    return send_response(200, "", "text/plain", cors_decision, cors_policy).response


@app.api_route("/{path:path}", methods=API_METHODS)
async def api_handler(
    request: Request,
    path: str,
    cors_decision: CorsDecisionDep,
    cors_policy: CorsPolicyDep,
    dispatcher: SpiDispatcherDep,
    status_mapping: StatusMappingDep,
):
    """
    Catch-all route: normalize the call and forward it to the backend SPI.

    Paths outside the API prefix and malformed bodies are answered by the
    exception handlers before the backend is called.
    """
    raw_body = await request.body()
    api_request = normalize(request.url.path, raw_body, api_prefix=config.API_PATH_PREFIX)
    request.state.api_request = api_request

    result = await dispatcher.dispatch(api_request)

    if api_request.is_rpc:
        body = rpc_result_body(api_request, _decode_backend_result(result, status_mapping))
    else:
        body = result
    return send_response(200, body, "application/json", cors_decision, cors_policy).response


if __name__ == "__main__":
    import uvicorn

    host, _, port = config.UVICORN_BIND_ADDR.rpartition(":")
    uvicorn.run(app, host=host or "0.0.0.0", port=int(port))
