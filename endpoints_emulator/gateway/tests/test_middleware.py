import uuid

import pytest
from fastapi import Request, Response
from unittest.mock import MagicMock, patch

from endpoints_emulator.common.core import request_context
from endpoints_emulator.gateway.middleware import request_context_middleware


def _request(headers=None):
    request = MagicMock(spec=Request)
    request.headers = headers or {}
    request.method = "GET"
    request.url.path = "/_ah/api/foo"
    request.query_params = {}
    request.client = MagicMock()
    request.client.host = "127.0.0.1"
    request.state = MagicMock()
    return request


@pytest.mark.asyncio
async def test_middleware_generates_request_id():
    request = _request()

    async def call_next(req):
        req.state.captured_req_id = request_context.get_request_id()
        return Response(status_code=200)

    request_context.clear_request_id()
    response = await request_context_middleware(request, call_next)

    req_id = request.state.captured_req_id
    uuid.UUID(req_id)
    assert response.headers["X-Request-Id"] == req_id
    # Context is cleared once the response is produced.
    assert request_context.get_request_id() is None


@pytest.mark.asyncio
async def test_middleware_keeps_incoming_request_id():
    request = _request({"X-Request-Id": "req-from-client"})

    async def call_next(req):
        return Response(status_code=204)

    response = await request_context_middleware(request, call_next)

    assert response.headers["X-Request-Id"] == "req-from-client"


@pytest.mark.asyncio
async def test_middleware_writes_access_log():
    request = _request({"origin": "http://localhost:3000"})

    async def call_next(req):
        return Response(status_code=404)

    with patch("endpoints_emulator.gateway.middleware.logger") as mock_logger:
        await request_context_middleware(request, call_next)

    mock_logger.info.assert_called_once()
    extra = mock_logger.info.call_args.kwargs["extra"]
    assert extra["status"] == 404
    assert extra["path"] == "/_ah/api/foo"
    assert extra["origin"] == "http://localhost:3000"
