"""
Where: endpoints_emulator/gateway/tests/test_routing.py
What: End-to-end tests of the gateway routes against a mock backend.
Why: CORS, normalization, dispatch and error rendering must compose correctly.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from endpoints_emulator.gateway.core.error_info import ErrorInfo, StatusCodeMapping
from endpoints_emulator.gateway.main import app

ORIGIN = "http://localhost:3000"


@pytest.fixture
def backend(make_backend):
    return make_backend(body={"items": [{"message": "hello"}]})


@pytest.fixture
def client(monkeypatch, make_dispatcher, backend):
    monkeypatch.setattr(app.state, "spi_dispatcher", make_dispatcher(backend), raising=False)
    return TestClient(app)


def test_rest_call_passes_backend_body_through(client, backend):
    response = client.post(
        "/_ah/api/guestbook/v1/greetings", json={"limit": 1}, headers={"Origin": ORIGIN}
    )

    assert response.status_code == 200
    assert response.json() == {"items": [{"message": "hello"}]}
    assert response.headers["content-type"] == "application/json"
    assert response.headers["access-control-allow-origin"] == ORIGIN
    assert str(backend.calls[0].url) == "http://backend/_ah/spi/guestbook/v1/greetings"
    assert backend.last_json == {"limit": 1}


def test_rpc_batch_call_is_wrapped_back(client, backend):
    response = client.post(
        "/_ah/api/rpc",
        content=json.dumps(
            [{"method": "guestbook.greetings.list", "params": {"limit": 1}, "id": "gapiRpc"}]
        ),
    )

    assert response.status_code == 200
    assert response.json() == [{"result": {"items": [{"message": "hello"}]}, "id": "gapiRpc"}]
    assert str(backend.calls[0].url) == "http://backend/_ah/spi/guestbook.greetings.list"


def test_rest_backend_error_is_remapped(client, backend):
    backend.status_code = 500
    backend.body = "Traceback (most recent call last)"

    response = client.get("/_ah/api/guestbook/v1/greetings", headers={"Origin": ORIGIN})

    assert response.status_code == 503
    error = response.json()["error"]
    assert error["code"] == 503
    assert error["errors"] == [
        {
            "domain": "global",
            "reason": "backendError",
            "message": "Traceback (most recent call last)",
        }
    ]
    assert response.headers["access-control-allow-origin"] == ORIGIN


def test_rpc_backend_error_is_returned_with_200(client, backend):
    backend.status_code = 404
    backend.body = {"error_message": "Greeting not found"}

    response = client.post(
        "/_ah/api/rpc", json=[{"method": "guestbook.greetings.get", "id": "gapiRpc"}]
    )

    assert response.status_code == 200
    assert response.json() == [
        {
            "error": {
                "data": [
                    {"domain": "global", "reason": "notFound", "message": "Greeting not found"}
                ],
                "code": 404,
                "message": "Greeting not found",
            },
            "id": "gapiRpc",
        }
    ]


@pytest.mark.parametrize(
    "body, message",
    [
        (b"[]", "Batch request has zero parts"),
        (b"{oops", "Problem unmarshalling request body: {oops"),
        (b'"just a string"', "JSON request body must be a map: 'just a string'"),
    ],
)
def test_malformed_requests_are_rejected_before_dispatch(client, backend, body, message):
    response = client.post("/_ah/api/foo", content=body, headers={"Origin": ORIGIN})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == 400
    assert error["message"] == message
    assert error["errors"][0]["reason"] == "badRequest"
    assert response.headers["access-control-allow-origin"] == ORIGIN
    assert backend.calls == []


def test_deeply_nested_body_is_rejected_before_dispatch(client, backend):
    response = client.post("/_ah/api/foo", content=b"[" * 200000, headers={"Origin": ORIGIN})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == 400
    assert error["errors"][0]["reason"] == "badRequest"
    assert response.headers["access-control-allow-origin"] == ORIGIN
    assert backend.calls == []


def test_rejections_use_the_configured_status_mapping(client, backend, monkeypatch):
    mapping = StatusCodeMapping({400: ErrorInfo(400, "customReason", "custom")})
    monkeypatch.setattr(app.state, "status_mapping", mapping, raising=False)

    response = client.post("/_ah/api/foo", content=b"{oops")

    assert response.status_code == 400
    assert response.json()["error"]["errors"][0]["reason"] == "customReason"
    assert backend.calls == []


def test_rpc_non_json_backend_reply_uses_the_configured_status_mapping(
    client, backend, monkeypatch
):
    mapping = StatusCodeMapping(server_error=ErrorInfo(503, "backendDown"))
    monkeypatch.setattr(app.state, "status_mapping", mapping, raising=False)
    backend.body = "<html>oops</html>"

    response = client.post(
        "/_ah/api/rpc",
        content=json.dumps({"method": "guestbook.greetings.list", "id": "gapiRpc"}),
    )

    assert response.status_code == 200
    error = response.json()["error"]
    assert error["code"] == 503
    assert error["message"] == "Non-JSON reply from backend"
    assert error["data"][0]["reason"] == "backendDown"


def test_path_outside_prefix_is_not_found(client, backend):
    response = client.get("/somewhere/else", headers={"Origin": ORIGIN})

    assert response.status_code == 404
    assert response.text == "Not Found"
    assert response.headers["content-type"] == "text/plain"
    assert response.headers["content-length"] == "9"
    assert response.headers["access-control-allow-origin"] == ORIGIN
    assert backend.calls == []


def test_unreachable_backend_is_500(client, backend):
    backend.raise_error = httpx.ConnectError("Connection refused")

    response = client.get("/_ah/api/foo")

    assert response.status_code == 500
    assert "Backend unreachable" in response.json()["error"]["message"]


def test_preflight(client, backend):
    response = client.options(
        "/_ah/api/guestbook/v1/greetings",
        headers={
            "Origin": ORIGIN,
            "Access-Control-Request-Method": "post",
            "Access-Control-Request-Headers": "content-type, authorization",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == ORIGIN
    assert response.headers["access-control-allow-methods"] == "DELETE,GET,PATCH,POST,PUT"
    assert response.headers["access-control-allow-headers"] == "content-type, authorization"
    assert backend.calls == []


def test_preflight_for_unsupported_method_gets_no_cors_headers(client):
    response = client.options(
        "/_ah/api/foo",
        headers={"Origin": ORIGIN, "Access-Control-Request-Method": "TRACE"},
    )

    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


def test_explorer_redirect(client):
    response = client.get("/_ah/api/explorer", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == (
        "https://apis-explorer.appspot.com/apis-explorer/?base=http://testserver/_ah/api"
    )


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "x-request-id" in response.headers
