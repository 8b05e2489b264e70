from typing import Any, List, NamedTuple, Optional
import asyncio
import json
import os

from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port
import pytest
import pytest_asyncio
import requests

class RecordedRequest(NamedTuple):
    method: str
    content_type: str
    body: Any

class _Reply(NamedTuple):
    status: int
    body: bytes
    delay: float

class MockSqld:
    """An in-process HTTP server that speaks the sqld batch protocol.

    Replies queued with `reply()` are served in order. When the queue is empty, the server answers every
    statement with a single row `{"sql": <statement text>}`, so tests can check which result belongs to
    which statement.
    """

    url: str
    requests: List[RecordedRequest]

    def __init__(self) -> None:
        self.url = ""
        self.requests = []
        self._replies: List[_Reply] = []

    def reply(
        self, body: Any = None, *,
        status: int = 200,
        raw: Optional[bytes] = None,
        delay: float = 0,
    ) -> None:
        if raw is None:
            raw = json.dumps(body).encode()
        self._replies.append(_Reply(status, raw, delay))

    async def handle(self, request: web.Request) -> web.Response:
        req_body = await request.read()
        self.requests.append(RecordedRequest(request.method, request.content_type, json.loads(req_body)))

        if self._replies:
            reply = self._replies.pop(0)
        else:
            echo = [
                {"success": True, "rows": [{"sql": stmt}], "meta": {"duration": 0}}
                for stmt in json.loads(req_body)["statements"]
            ]
            reply = _Reply(200, json.dumps(echo).encode(), 0)

        if reply.delay:
            await asyncio.sleep(reply.delay)
        return web.Response(status=reply.status, body=reply.body, content_type="application/json")

@pytest_asyncio.fixture
async def mock_sqld():
    sqld = MockSqld()
    app = web.Application()
    app.router.add_post("/", sqld.handle)
    server = TestServer(app)
    await server.start_server()
    sqld.url = str(server.make_url("/"))
    yield sqld
    await server.close()

@pytest.fixture
def unreachable_url():
    return f"http://127.0.0.1:{unused_port()}/"

@pytest.fixture
def http_url():
    env_name = "SQLD_DRIVER_TEST_URL"
    env_url = os.getenv(env_name)
    if env_url is not None:
        return env_url

    default_url = "http://localhost:8080"
    if is_sqld_alive(default_url):
        return default_url

    pytest.skip(f"Skipping live HTTP test because environment variable {env_name} is not defined "
        f"and we could not reach the default server at {default_url}")

def is_sqld_alive(url: str) -> bool:
    try:
        return requests.get(f"{url}/health", timeout=1).status_code == 200
    except requests.RequestException:
        return False
