import httpx
import pytest

from fastapi import FastAPI
from fastapi.testclient import TestClient

from sfetch import SFetch
from sfetch.config import ConfigManager


class OriginStream(httpx.AsyncByteStream):
    """Unread body, so the dispatcher can stream it raw like a network response."""

    def __init__(self, data: bytes):
        self.data = data

    async def __aiter__(self):
        if self.data:
            yield self.data


class FakeOrigin:
    """Records every outbound request and answers with a canned response."""

    def __init__(self):
        self.requests = []
        self.respond = lambda request: self.reply(200, content=b"ok")

    @staticmethod
    def reply(status_code, headers=None, content=b""):
        return httpx.Response(status_code, headers=headers, stream=OriginStream(content))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def transport(self):
        return httpx.MockTransport(self)


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def origin():
    return FakeOrigin()


@pytest.fixture
def make_client(origin):
    def factory(config=None):
        app = FastAPI()
        SFetch(config=config or ConfigManager(), transport=origin.transport).to_fastapi(app)
        return TestClient(app)
    return factory


@pytest.fixture
def client(make_client):
    return make_client()
