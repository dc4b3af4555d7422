"""
JSON RPC envelope handling.

Calls to the rpc path carry the method name and its params in the body;
answers go back as a result or error member with the caller's id echoed.
"""

import json
from typing import Any, Dict, NamedTuple, Optional

from .api_request import ApiRequest
from .errors import generic_error
from .exceptions import RequestError


class RpcCall(NamedTuple):
    method: str
    params: Dict[str, Any]
    id: Optional[Any]


def transform_rpc_request(request: ApiRequest) -> RpcCall:
    """Pull the method name, params and id out of a JSON RPC request body."""
    method = request.body_json.get("method")
    if not isinstance(method, str) or not method:
        raise RequestError(generic_error(400, "JSON RPC request is missing a method name"))

    params = request.body_json.get("params", {})
    if not isinstance(params, dict):
        raise RequestError(generic_error(400, "JSON RPC params must be an object"))

    return RpcCall(method=method, params=params, id=request.body_json.get("id"))


def finish_rpc_response(id_: Optional[Any], is_batch: bool, body: Dict[str, Any]) -> str:
    """
    Finish a JSON RPC response body.

    Args:
        id_: The id of the request, echoed when present.
        is_batch: Whether the request arrived wrapped in a batch list.
        body: The result or error member of the response.
    """
    if id_ is not None:
        body["id"] = id_
    if is_batch:
        body = [body]
    return json.dumps(body, indent=1)


def rpc_result_body(request: ApiRequest, result: Any) -> str:
    return finish_rpc_response(request.body_json.get("id"), request.is_batch, {"result": result})


def rpc_error_body(request: ApiRequest, error: Dict[str, Any]) -> str:
    """Wrap an rpc_error() rendering for the caller; it already holds the error member."""
    return finish_rpc_response(request.body_json.get("id"), request.is_batch, dict(error))
