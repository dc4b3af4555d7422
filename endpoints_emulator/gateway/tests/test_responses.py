"""
Where: endpoints_emulator/gateway/tests/test_responses.py
What: Unit tests for the response helpers.
Why: Status, body, Content-Type/Length and CORS headers must line up exactly.
"""

import json

from endpoints_emulator.gateway.core import cors
from endpoints_emulator.gateway.core.errors import enum_rejection_error
from endpoints_emulator.gateway.core.responses import (
    send_error_response,
    send_not_found_response,
    send_redirect_response,
    send_rejected_response,
    send_response,
)

ORIGIN = "http://localhost:8080"


def _allowed():
    return cors.evaluate(ORIGIN, None, None)


def test_not_found_with_cors():
    written = send_not_found_response(_allowed())

    assert written.body == "Not Found"
    assert written.response.status_code == 404
    assert written.response.body == b"Not Found"
    assert written.response.headers["Content-Type"] == "text/plain"
    assert written.response.headers["Content-Length"] == "9"
    assert written.response.headers["Access-Control-Allow-Origin"] == ORIGIN
    assert written.response.headers["Access-Control-Allow-Methods"] == "DELETE,GET,PATCH,POST,PUT"


def test_not_found_without_cors():
    written = send_not_found_response(cors.evaluate("", None, None))

    assert "Access-Control-Allow-Origin" not in written.response.headers


def test_error_response():
    written = send_error_response("Backend went away")

    assert written.response.status_code == 500
    assert written.body == '{"error":{"message":"Backend went away"}}'
    assert written.response.headers["Content-Type"] == "application/json"
    assert written.response.headers["Content-Length"] == str(len(written.body.encode("utf-8")))


def test_rejected_response_serializes_payload():
    payload = json.loads(enum_rejection_error("color", "puprle", ["red", "blue"]).rest_error())

    written = send_rejected_response(payload, _allowed())

    assert written.response.status_code == 400
    assert json.loads(written.body) == payload
    assert written.body == json.dumps(payload, separators=(",", ":"))
    assert written.response.headers["Content-Type"] == "application/json"
    assert written.response.headers["Access-Control-Allow-Origin"] == ORIGIN


def test_redirect_response():
    written = send_redirect_response("https://example.com/explorer?base=x", _allowed())

    assert written.body == ""
    assert written.response.status_code == 302
    assert written.response.headers["Location"] == "https://example.com/explorer?base=x"
    assert written.response.headers["Access-Control-Allow-Origin"] == ORIGIN


def test_content_length_counts_bytes_not_characters():
    written = send_response(200, '{"name": "Zoë ☃"}', "application/json")

    assert written.response.headers["Content-Length"] == str(len('{"name": "Zoë ☃"}'.encode("utf-8")))
    assert written.response.body == '{"name": "Zoë ☃"}'.encode("utf-8")


def test_cors_overrides_passed_headers():
    written = send_response(
        200,
        b"{}",
        "application/json",
        _allowed(),
        headers={"Access-Control-Allow-Origin": "*"},
    )

    assert written.response.headers["Access-Control-Allow-Origin"] == ORIGIN
    assert written.body == "{}"
