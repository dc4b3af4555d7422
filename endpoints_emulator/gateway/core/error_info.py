"""
Backend status code translation.

Maps the status code returned by a backend to the status, reason and domain
the production API front-end reports for it.
"""

from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional


class ErrorInfo(NamedTuple):
    http_status: int
    reason: str
    domain: str = "global"


_UNSUPPORTED_ERROR = ErrorInfo(404, "unsupportedProtocol")
_BACKEND_ERROR = ErrorInfo(503, "backendError")

_ERROR_INFO = {
    400: ErrorInfo(400, "badRequest"),
    401: ErrorInfo(401, "required"),
    402: ErrorInfo(404, "unsupportedProtocol"),
    403: ErrorInfo(403, "forbidden"),
    404: ErrorInfo(404, "notFound"),
    405: ErrorInfo(501, "unsupportedMethod"),
    406: ErrorInfo(404, "unsupportedProtocol"),
    407: ErrorInfo(404, "unsupportedProtocol"),
    408: ErrorInfo(503, "backendError"),
    409: ErrorInfo(409, "conflict"),
    410: ErrorInfo(410, "deleted"),
    411: ErrorInfo(404, "unsupportedProtocol"),
    412: ErrorInfo(412, "conditionNotMet"),
    413: ErrorInfo(413, "uploadTooLarge"),
    414: ErrorInfo(404, "unsupportedProtocol"),
    415: ErrorInfo(404, "unsupportedProtocol"),
    416: ErrorInfo(404, "unsupportedProtocol"),
    417: ErrorInfo(404, "unsupportedProtocol"),
}


class StatusCodeMapping:
    """
    Read-only lookup of backend status codes.

    Build one at startup and share it; lookups never mutate it.
    """

    def __init__(
        self,
        table: Optional[Mapping[int, ErrorInfo]] = None,
        server_error: ErrorInfo = _BACKEND_ERROR,
        fallback: ErrorInfo = _UNSUPPORTED_ERROR,
    ):
        self._table = MappingProxyType(dict(_ERROR_INFO if table is None else table))
        self._server_error = server_error
        self._fallback = fallback

    @property
    def table(self) -> Mapping[int, ErrorInfo]:
        return self._table

    def get_error_info(self, status_code: int) -> ErrorInfo:
        """
        Get info that would be returned by the live server for a status code.

        Every 5xx becomes a 503 backendError; anything not in the table is
        reported as unsupportedProtocol.
        """
        if status_code >= 500:
            return self._server_error
        return self._table.get(status_code, self._fallback)


DEFAULT_STATUS_CODE_MAPPING = StatusCodeMapping()


def get_error_info(status_code: int) -> ErrorInfo:
    return DEFAULT_STATUS_CODE_MAPPING.get_error_info(status_code)
