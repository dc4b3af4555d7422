"""
Errors reported by the dev gateway.

Every error is an ErrorRecord tagged with its kind. The kind-specific data
travels in ``detail``; rendering is shared by all kinds so REST and RPC
callers see the same fields the production front-end produces.
"""

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .error_info import DEFAULT_STATUS_CODE_MAPPING, StatusCodeMapping

logger = logging.getLogger("gateway.errors")

REST_ERROR_LIST_TAG = "errors"
RPC_ERROR_LIST_TAG = "data"


class ErrorKind(str, enum.Enum):
    GENERIC = "generic"
    ENUM_REJECTION = "enum_rejection"
    BACKEND = "backend"


@dataclass(frozen=True)
class EnumRejectionDetail:
    parameter_name: str
    value: str
    allowed_values: List[str]


@dataclass(frozen=True)
class BackendDetail:
    upstream_status: int
    upstream_body: str


@dataclass(frozen=True)
class ErrorRecord:
    kind: ErrorKind
    status_code: int
    message: str
    reason: str
    domain: str = "global"
    extra_fields: Dict[str, Any] = field(default_factory=dict)
    detail: Optional[Union[EnumRejectionDetail, BackendDetail]] = None

    def format_error(self, error_list_tag: str) -> Dict[str, Any]:
        return format_error(self, error_list_tag)

    def rest_error(self) -> str:
        return rest_error(self)

    def rpc_error(self) -> Dict[str, Any]:
        return rpc_error(self)


def format_error(record: ErrorRecord, error_list_tag: str) -> Dict[str, Any]:
    """
    Format an error into the front-end's JSON error shape.

    Args:
        record: The error to format.
        error_list_tag: Key the single-element error list is stored under,
            "errors" for REST and "data" for JSON RPC.
    """
    error = {
        "domain": record.domain,
        "reason": record.reason,
        "message": record.message,
    }
    error.update(record.extra_fields)
    return {
        "error": {
            error_list_tag: [error],
            "code": record.status_code,
            "message": record.message,
        }
    }


def rest_error(record: ErrorRecord) -> str:
    """Format an error into a response body for a REST request."""
    return json.dumps(format_error(record, REST_ERROR_LIST_TAG), indent=2, sort_keys=True)


def rpc_error(record: ErrorRecord) -> Dict[str, Any]:
    """Format an error into the error member of a JSON RPC response."""
    return format_error(record, RPC_ERROR_LIST_TAG)


def generic_error(
    status_code: int,
    message: str,
    reason: Optional[str] = None,
    domain: str = "global",
    mapping: StatusCodeMapping = DEFAULT_STATUS_CODE_MAPPING,
) -> ErrorRecord:
    """A plain error. Without a reason, the one the front-end uses for the status applies."""
    if reason is None:
        reason = mapping.get_error_info(status_code).reason
    return ErrorRecord(
        kind=ErrorKind.GENERIC,
        status_code=status_code,
        message=message,
        reason=reason,
        domain=domain,
    )


def _format_allowed_values(allowed_values: Sequence[str]) -> str:
    return "[" + " ".join(str(v) for v in allowed_values) + "]"


def enum_rejection_error(
    parameter_name: str, value: str, allowed_values: Sequence[str]
) -> ErrorRecord:
    """Request rejection for a value outside an enum parameter's allowed set."""
    allowed = list(allowed_values)
    return ErrorRecord(
        kind=ErrorKind.ENUM_REJECTION,
        status_code=400,
        message=(
            f"Invalid string value: {value}. "
            f"Allowed values: {_format_allowed_values(allowed)}"
        ),
        reason="invalidParameter",
        extra_fields={"locationType": "parameter", "location": parameter_name},
        detail=EnumRejectionDetail(
            parameter_name=parameter_name, value=value, allowed_values=allowed
        ),
    )


def _backend_message(body: str) -> str:
    try:
        error_json = json.loads(body)
    except ValueError:
        return body

    if isinstance(error_json, dict):
        message = error_json.get("error_message")
        if isinstance(message, str):
            return message
    return body


def backend_error(
    response: Any, mapping: StatusCodeMapping = DEFAULT_STATUS_CODE_MAPPING
) -> ErrorRecord:
    """
    Error returned when the backend SPI answers with an error status.

    Status, reason and domain come from the mapping rather than from the
    backend response, to match what the live server reports.

    Args:
        response: The backend response; needs ``status_code`` and ``text``.
        mapping: Status code translation table.
    """
    error_info = mapping.get_error_info(response.status_code)
    body = response.text
    message = _backend_message(body)

    logger.debug(
        "Backend error %s mapped to %s",
        response.status_code,
        error_info.http_status,
        extra={"upstream_status": response.status_code, "reason": error_info.reason},
    )

    return ErrorRecord(
        kind=ErrorKind.BACKEND,
        status_code=error_info.http_status,
        message=message,
        reason=error_info.reason,
        domain=error_info.domain,
        detail=BackendDetail(upstream_status=response.status_code, upstream_body=body),
    )
