"""
Where: endpoints_emulator/gateway/core/cors.py
What: CORS decision and response-header application for gateway requests.
Why: Echo CORS headers the way the production API front-end does.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, MutableMapping, Optional, Tuple

logger = logging.getLogger("gateway.cors")

CORS_HEADER_ORIGIN = "Origin"
CORS_HEADER_REQUEST_METHOD = "Access-Control-Request-Method"
CORS_HEADER_REQUEST_HEADERS = "Access-Control-Request-Headers"
CORS_HEADER_ALLOW_ORIGIN = "Access-Control-Allow-Origin"
CORS_HEADER_ALLOW_METHODS = "Access-Control-Allow-Methods"
CORS_HEADER_ALLOW_HEADERS = "Access-Control-Allow-Headers"


@dataclass(frozen=True)
class CorsPolicy:
    """Methods a cross-origin caller may use, in header order."""

    allowed_methods: Tuple[str, ...] = ("DELETE", "GET", "PATCH", "POST", "PUT")

    @property
    def allow_methods_header(self) -> str:
        return ",".join(self.allowed_methods)

    def allows_method(self, method: str) -> bool:
        return method.upper() in self.allowed_methods


DEFAULT_CORS_POLICY = CorsPolicy()


@dataclass(frozen=True)
class CorsDecision:
    origin: str
    requested_method: Optional[str]
    requested_headers: Optional[str]
    allowed: bool

    @classmethod
    def from_headers(
        cls, headers: Mapping[str, str], policy: CorsPolicy = DEFAULT_CORS_POLICY
    ) -> "CorsDecision":
        """Evaluate the CORS headers of an incoming request."""
        return evaluate(
            headers.get(CORS_HEADER_ORIGIN),
            headers.get(CORS_HEADER_REQUEST_METHOD),
            headers.get(CORS_HEADER_REQUEST_HEADERS),
            policy,
        )


def evaluate(
    origin: Optional[str],
    request_method: Optional[str],
    request_headers: Optional[str],
    policy: CorsPolicy = DEFAULT_CORS_POLICY,
) -> CorsDecision:
    """
    Decide whether a request gets a CORS response.

    A request qualifies when it names an origin and either asks for no
    particular method or asks for one of the policy's methods.
    """
    origin = origin or ""
    request_method = request_method or None
    request_headers = request_headers or None

    allowed = bool(origin) and (request_method is None or policy.allows_method(request_method))
    return CorsDecision(
        origin=origin,
        requested_method=request_method,
        requested_headers=request_headers,
        allowed=allowed,
    )


def apply(
    decision: Optional[CorsDecision],
    headers: MutableMapping[str, str],
    policy: CorsPolicy = DEFAULT_CORS_POLICY,
) -> None:
    """Add CORS headers to the response, if needed."""
    if decision is None or not decision.allowed:
        return

    headers[CORS_HEADER_ALLOW_ORIGIN] = decision.origin
    headers[CORS_HEADER_ALLOW_METHODS] = policy.allow_methods_header
    if decision.requested_headers:
        headers[CORS_HEADER_ALLOW_HEADERS] = decision.requested_headers
    logger.debug("CORS allowed for origin %s", decision.origin)
