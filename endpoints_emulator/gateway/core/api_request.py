"""
Where: endpoints_emulator/gateway/core/api_request.py
What: Parse a raw gateway path and body into one canonical API request.
Why: REST, JSON RPC and batch-wrapped calls must reach the backend in a single shape.
"""

import io
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from .exceptions import (
    BodyNotObjectError,
    EmptyBatchError,
    InvalidPathError,
    MalformedBodyError,
)

logger = logging.getLogger("gateway.api_request")

API_PREFIX = "/_ah/api/"
RPC_PATH = "rpc"


@dataclass(frozen=True)
class ApiRequest:
    """
    A normalized API request.

    ``raw_path`` and ``raw_body`` are the request as received; ``body`` is
    the canonical body bytes (the unwrapped element for batch calls).
    """

    raw_path: str
    raw_body: bytes
    path: str
    body: bytes
    body_json: Dict[str, Any]
    is_batch: bool = False
    request_id: str = ""
    api_prefix: str = field(default=API_PREFIX, repr=False)

    @property
    def is_rpc(self) -> bool:
        # JSON RPC clients (e.g. the iOS client libraries) post every call to
        # the single /rpc handler with the method name in the body.
        return self.path == RPC_PATH

    def body_stream(self) -> io.BytesIO:
        """Return a fresh, independent reader over the canonical body."""
        return io.BytesIO(self.body)

    def copy(self) -> "ApiRequest":
        """Re-derive the request from the raw path and body."""
        return normalize(self.raw_path, self.raw_body, api_prefix=self.api_prefix)


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON.
    raise ValueError(f"Invalid JSON constant: {name}")


def _unwrap_batch(body_json: list) -> Any:
    # Only single-element batches are handled here; RPC and JS clients send
    # every call that way.
    n = len(body_json)
    if n == 0:
        raise EmptyBatchError()
    if n > 1:
        logger.warning(
            "Batch requests with more than 1 element aren't supported. "
            "Only the first element will be handled. Found %d elements.",
            n,
            extra={"batch_size": n},
        )
    logger.info("Converting batch request to single request.")
    return body_json[0]


def normalize(raw_path: str, raw_body: bytes, api_prefix: str = API_PREFIX) -> ApiRequest:
    """
    Build an ApiRequest from a raw request path and body.

    Args:
        raw_path: Request path, including the gateway prefix.
        raw_body: Request body bytes, possibly empty.
        api_prefix: Gateway prefix to strip from the path.

    Raises:
        InvalidPathError: path does not start with the prefix
        MalformedBodyError: body is not valid JSON
        EmptyBatchError: body is an empty JSON array
        BodyNotObjectError: body (or its first batch element) is not an object
    """
    if isinstance(raw_body, str):
        raw_body = raw_body.encode("utf-8")
    raw_body = bytes(raw_body or b"")

    if not raw_path.startswith(api_prefix):
        raise InvalidPathError(raw_path)
    path = raw_path[len(api_prefix):]

    if raw_body:
        try:
            body_json = json.loads(raw_body, parse_constant=_reject_constant)
        except (ValueError, RecursionError):
            raise MalformedBodyError(raw_body)
    else:
        body_json = {}

    is_batch = isinstance(body_json, list)
    if is_batch:
        body_json = _unwrap_batch(body_json)

    if not isinstance(body_json, dict):
        raise BodyNotObjectError(body_json)

    body = json.dumps(body_json, allow_nan=False).encode("utf-8") if is_batch else raw_body

    return ApiRequest(
        raw_path=raw_path,
        raw_body=raw_body,
        path=path,
        body=body,
        body_json=body_json,
        is_batch=is_batch,
        api_prefix=api_prefix,
    )
