import asyncio
from typing import Callable, Optional

import httpx
import pytest

from medibot.config import settings
from medibot.main import create_controller
from medibot.schemas.session import SessionContext, SessionUser
from medibot.services.analysis import AnalysisClient
from medibot.services.history import HistoryClient
from medibot.services.profile import ProfileClient
from medibot.state.active_context import ActiveContextStore
from medibot.state.upload import SelectedFile

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Routes requests by path and records every one it sees."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.routes: dict[str, Handler] = {
            settings.analysis_path: lambda r: httpx.Response(200, json={"medicines": []}),
            settings.history_path: lambda r: httpx.Response(200, json={"history": []}),
            settings.profile_path: lambda r: httpx.Response(200, json={"ok": True}),
            settings.session_path: lambda r: httpx.Response(200, json={}),
            settings.signout_path: lambda r: httpx.Response(200, json={}),
        }

    def on(self, path: str, handler: Handler):
        self.routes[path] = handler

    def reply(self, path: str, status: int = 200, json=None, content: Optional[bytes] = None):
        if content is not None:
            self.routes[path] = lambda r: httpx.Response(status, content=content)
        else:
            self.routes[path] = lambda r: httpx.Response(status, json=json)

    def fail(self, path: str):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        self.routes[path] = handler

    def hold(self, path: str) -> asyncio.Event:
        """Block responses on ``path`` until the returned event is set."""
        gate = asyncio.Event()
        self.gates[path] = gate
        return gate

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        gate = self.gates.get(request.url.path)
        if gate is not None:
            await gate.wait()
        return self.routes[request.url.path](request)


async def wait_for(predicate, attempts: int = 100):
    """Yield to the event loop until ``predicate()`` holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
async def http(backend):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(backend.handle),
        base_url=settings.api_base_url,
    ) as client:
        yield client


@pytest.fixture
def store():
    return ActiveContextStore()


@pytest.fixture
def analysis(http):
    return AnalysisClient(http)


@pytest.fixture
def history_client(http):
    return HistoryClient(http)


@pytest.fixture
def profile_client(http):
    return ProfileClient(http)


@pytest.fixture
def redirects():
    return []


@pytest.fixture
def controller(http, redirects):
    return create_controller(redirect=redirects.append, client=http)


@pytest.fixture
def user():
    return SessionUser(id="u-1", name="Asha Rao", email="asha@example.com")


@pytest.fixture
def signed_in(user):
    return SessionContext.signed_in(user)


def photo(name: str = "rx.jpg", content: bytes = b"\xff\xd8fake-jpeg") -> SelectedFile:
    return SelectedFile(filename=name, content=content, content_type="image/jpeg")
