import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from boarddoc.core.documents.schemas import Card, TrelloCredentials
from boarddoc.integrations.trello import TrelloClient

API_URL = "https://trello.test/1"


class FakeTrello:
    """In-memory stand-in for the Trello REST API behind ``httpx.MockTransport``.

    Routes map a path (``/lists/L1/cards``) to either a JSON-able payload or an
    ``httpx.Response``.  Every request is recorded for assertions.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {"/members/me": {"id": "me", "fullName": "Test User"}}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/1")
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, content=json.dumps(route), headers={"Content-Type": "application/json"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [r.url.path.removeprefix("/1") for r in self.requests]


@pytest.fixture
def fake_trello() -> FakeTrello:
    return FakeTrello()


@pytest.fixture
def credentials() -> TrelloCredentials:
    return TrelloCredentials(api_key="test-key", token="test-token")


@pytest.fixture
def trello_client(fake_trello, credentials) -> TrelloClient:
    return TrelloClient(credentials, api_url=API_URL, transport=fake_trello.transport)


@pytest.fixture
def make_card() -> Callable[..., Card]:
    counter = {"n": 0}

    def _make(list_id: str = "L1", name: str | None = None, desc: str = "Some description", **extra: Any) -> Card:
        counter["n"] += 1
        n = counter["n"]
        return Card.model_validate(
            {
                "id": f"card{n}",
                "idShort": n,
                "name": name or f"Card {n}",
                "desc": desc,
                "url": f"https://trello.com/c/{n}",
                "idList": list_id,
                **extra,
            }
        )

    return _make


@pytest.fixture
async def client(trello_client):
    from boarddoc.api.deps import get_trello_client
    from boarddoc.main import app

    app.dependency_overrides[get_trello_client] = lambda: trello_client

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
