"""
Core logic package.

Provides CORS handling, request normalization, errors and responses.
"""

from .api_request import ApiRequest, normalize
from .cors import CorsDecision, CorsPolicy
from .error_info import ErrorInfo, StatusCodeMapping
from .errors import ErrorKind, ErrorRecord, backend_error, enum_rejection_error, generic_error

__all__ = [
    "ApiRequest",
    "normalize",
    "CorsDecision",
    "CorsPolicy",
    "ErrorInfo",
    "StatusCodeMapping",
    "ErrorKind",
    "ErrorRecord",
    "backend_error",
    "enum_rejection_error",
    "generic_error",
]
