"""
Custom exception classes.

Represent errors raised while shaping a request for the backend.
"""

from .error_info import DEFAULT_STATUS_CODE_MAPPING, StatusCodeMapping
from .errors import ErrorRecord, generic_error


class RequestNormalizationError(Exception):
    """Base exception for requests that cannot be turned into an API request."""

    status_code = 400

    def to_error(self, mapping: StatusCodeMapping = DEFAULT_STATUS_CODE_MAPPING) -> ErrorRecord:
        return generic_error(self.status_code, str(self), mapping=mapping)


class InvalidPathError(RequestNormalizationError):
    """Raised when the request path is outside the gateway prefix."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Invalid request path: {path}")


class MalformedBodyError(RequestNormalizationError):
    """Raised when a non-empty body is not valid JSON."""

    def __init__(self, body: bytes):
        self.body = body
        super().__init__(
            f"Problem unmarshalling request body: {body.decode('utf-8', errors='replace')}"
        )


class EmptyBatchError(RequestNormalizationError):
    """Raised when a batch request has no parts."""

    def __init__(self):
        super().__init__("Batch request has zero parts")


class BodyNotObjectError(RequestNormalizationError):
    """Raised when the (unwrapped) body is not a JSON object."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"JSON request body must be a map: {value!r}")


class RequestError(Exception):
    """Carries an ErrorRecord up to the exception handlers."""

    def __init__(self, error: ErrorRecord):
        self.error = error
        super().__init__(error.message)

    @property
    def status_code(self) -> int:
        return self.error.status_code


class BackendUnreachableError(Exception):
    """Raised when the backend SPI cannot be reached at all."""

    def __init__(self, url: str, cause: Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"Backend unreachable at {url}: {cause}")
