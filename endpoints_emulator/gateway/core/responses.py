"""
Response helpers for the dev gateway.

Every helper merges the request's CORS decision into the headers and
returns the body text it wrote alongside the response object.
"""

import json
from typing import Any, Dict, NamedTuple, Optional, Union

from starlette.responses import RedirectResponse, Response

from . import cors
from .cors import CorsDecision, CorsPolicy, DEFAULT_CORS_POLICY


class WrittenResponse(NamedTuple):
    response: Response
    body: str


def send_response(
    status_code: int,
    body: Union[str, bytes],
    content_type: str,
    cors_decision: Optional[CorsDecision] = None,
    cors_policy: CorsPolicy = DEFAULT_CORS_POLICY,
    headers: Optional[Dict[str, str]] = None,
) -> WrittenResponse:
    """
    Build a response with an exact Content-Type and Content-Length.

    Headers passed in are applied first; CORS headers override them.
    """
    payload = body.encode("utf-8") if isinstance(body, str) else body
    response_headers = dict(headers or {})
    response_headers["Content-Type"] = content_type
    response_headers["Content-Length"] = str(len(payload))

    response = Response(content=payload, status_code=status_code, headers=response_headers)
    cors.apply(cors_decision, response.headers, cors_policy)
    return WrittenResponse(response, payload.decode("utf-8", errors="replace"))


def send_not_found_response(
    cors_decision: Optional[CorsDecision] = None,
    cors_policy: CorsPolicy = DEFAULT_CORS_POLICY,
) -> WrittenResponse:
    return send_response(404, "Not Found", "text/plain", cors_decision, cors_policy)


def send_error_response(
    message: str,
    cors_decision: Optional[CorsDecision] = None,
    cors_policy: CorsPolicy = DEFAULT_CORS_POLICY,
) -> WrittenResponse:
    body = json.dumps({"error": {"message": message}}, separators=(",", ":"))
    return send_response(500, body, "application/json", cors_decision, cors_policy)


def send_rejected_response(
    rejection_error: Dict[str, Any],
    cors_decision: Optional[CorsDecision] = None,
    cors_policy: CorsPolicy = DEFAULT_CORS_POLICY,
) -> WrittenResponse:
    """Send a 400 whose body is the given error, typically a REST error rendering."""
    body = json.dumps(rejection_error, separators=(",", ":"))
    return send_response(400, body, "application/json", cors_decision, cors_policy)


def send_redirect_response(
    redirect_location: str,
    cors_decision: Optional[CorsDecision] = None,
    cors_policy: CorsPolicy = DEFAULT_CORS_POLICY,
) -> WrittenResponse:
    response = RedirectResponse(url=redirect_location, status_code=302)
    cors.apply(cors_decision, response.headers, cors_policy)
    return WrittenResponse(response, "")
