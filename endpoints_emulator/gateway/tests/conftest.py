import json
import os
from typing import Callable, List

import httpx
import pytest

# Config is loaded when the gateway modules are imported; keep a developer's
# .env and logging file out of the test run.
os.environ.setdefault("LOG_CONFIG_PATH", "/tmp/endpoints-emulator-missing-logging.yml")
os.environ.setdefault("BACKEND_URL", "http://backend")

from endpoints_emulator.gateway.services.spi_dispatcher import SpiDispatcher  # noqa: E402


class RecordingBackend:
    """Mock SPI backend: records calls and answers with a fixed response."""

    def __init__(self, status_code: int = 200, body=None, raise_error: Exception = None):
        self.status_code = status_code
        self.body = {} if body is None else body
        self.raise_error = raise_error
        self.calls: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, content=json.dumps(self.body).encode("utf-8"))
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, content=self.body.encode("utf-8"))
        return httpx.Response(self.status_code, content=self.body)

    @property
    def last_json(self):
        return json.loads(self.calls[-1].content)


@pytest.fixture
def make_dispatcher() -> Callable[[RecordingBackend], SpiDispatcher]:
    def _make(backend: RecordingBackend) -> SpiDispatcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
        return SpiDispatcher(client=client, backend_url="http://backend")

    return _make


@pytest.fixture
def make_backend() -> Callable[..., RecordingBackend]:
    return RecordingBackend
