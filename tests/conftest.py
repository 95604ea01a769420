import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from couchlink import CouchClient
from fake_couch import create_app

BASE_URL = "http://couch.test:5984"


class Recorder:
    """MockTransport handler that records every request and answers with a
    canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.respond(200, {"ok": True})

    def respond(self, status_code: int = 200, json=None, content: bytes | None = None, headers=None) -> None:
        self.status_code = status_code
        self.json = json
        self.content = content
        self.headers = headers

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content, headers=self.headers)
        return httpx.Response(self.status_code, json=self.json, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
async def stub(recorder):
    """CouchClient whose transport is the recorder; nothing leaves the process."""
    async with AsyncClient(transport=httpx.MockTransport(recorder)) as http:
        yield CouchClient(BASE_URL, http=http)


@pytest.fixture
async def couch():
    """CouchClient talking to a fresh in-memory fake server."""
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url=BASE_URL) as http:
        yield CouchClient(BASE_URL, http=http)
