import httpx
import pytest
from pydantic import ValidationError

from boarddoc.common.exceptions import CredentialError, TransientFetchError
from boarddoc.core.documents.schemas import RawAttachment, TrelloCredentials
from boarddoc.integrations.trello import TrelloClient

API_URL = "https://trello.test/1"


@pytest.mark.asyncio
async def test_fetch_user_boards(trello_client, fake_trello):
    fake_trello.routes["/members/me/boards"] = [
        {"id": "b1", "name": "Product", "url": "https://trello.com/b/b1", "prefs": {}},
        {"id": "b2", "name": "Ops"},
    ]

    boards = await trello_client.fetch_user_boards()

    assert [(b.id, b.name) for b in boards] == [("b1", "Product"), ("b2", "Ops")]
    request = fake_trello.requests[0]
    assert request.url.params["key"] == "test-key"
    assert request.url.params["token"] == "test-token"


@pytest.mark.asyncio
async def test_fetch_lists_by_board_id(trello_client, fake_trello):
    fake_trello.routes["/boards/b1/lists"] = [{"id": "L1", "name": "Rules"}, {"id": "L2", "name": "Notes"}]

    lists = await trello_client.fetch_lists_by_board_id("b1")

    assert [lst.name for lst in lists] == ["Rules", "Notes"]
    assert fake_trello.paths() == ["/boards/b1/lists"]


@pytest.mark.asyncio
async def test_fetch_list_cards_tags_list_and_asks_for_attachments(trello_client, fake_trello):
    fake_trello.routes["/lists/L1/cards"] = [
        {
            "id": "c1",
            "idShort": 7,
            "name": "Login",
            "desc": "Users log in",
            "idList": "somewhere-else",
            "badges": {"comments": 2},
            "attachments": [{"id": "a1", "name": "s.png", "url": "u", "mimeType": "image/png", "isUpload": True}],
        }
    ]

    cards = await trello_client.fetch_list_cards("L1")

    assert len(cards) == 1
    card = cards[0]
    assert card.list_id == "L1"
    assert card.id_short == 7
    assert card.comment_count == 2
    assert isinstance(card.attachments[0], RawAttachment)
    assert card.attachments[0].is_upload is True
    assert fake_trello.requests[0].url.params["attachments"] == "true"


@pytest.mark.asyncio
async def test_fetch_list_cards_without_attachments(trello_client, fake_trello):
    fake_trello.routes["/lists/L1/cards"] = []

    await trello_client.fetch_list_cards("L1", include_attachments=False)

    assert "attachments" not in fake_trello.requests[0].url.params


@pytest.mark.asyncio
async def test_fetch_cards_from_lists_keeps_list_order(trello_client, fake_trello):
    fake_trello.routes["/lists/L2/cards"] = [{"id": "c3", "name": "Third"}]
    fake_trello.routes["/lists/L1/cards"] = [{"id": "c1", "name": "First"}, {"id": "c2", "name": "Second"}]

    cards = await trello_client.fetch_cards_from_lists(["L1", "L2"])

    assert [c.id for c in cards] == ["c1", "c2", "c3"]
    assert [c.list_id for c in cards] == ["L1", "L1", "L2"]
    assert fake_trello.paths() == ["/lists/L1/cards", "/lists/L2/cards"]


@pytest.mark.asyncio
async def test_fetch_cards_from_lists_aborts_on_failure(trello_client, fake_trello):
    fake_trello.routes["/lists/L1/cards"] = [{"id": "c1"}]
    fake_trello.routes["/lists/L2/cards"] = httpx.Response(500, text="boom")

    with pytest.raises(TransientFetchError) as exc_info:
        await trello_client.fetch_cards_from_lists(["L1", "L2", "L3"])

    assert exc_info.value.status_code == 502
    assert "HTTP 500" in exc_info.value.detail
    assert fake_trello.paths() == ["/lists/L1/cards", "/lists/L2/cards"]


@pytest.mark.asyncio
async def test_fetch_card_comments(trello_client, fake_trello):
    fake_trello.routes["/cards/c1/actions"] = [
        {
            "id": "act1",
            "date": "2024-03-01T10:15:00.000Z",
            "memberCreator": {"fullName": "Ann Lee"},
            "data": {"text": "Ship it"},
        },
        {"id": "act2", "date": "2024-03-02T08:00:00.000Z", "data": {"text": "No author"}},
    ]

    comments = await trello_client.fetch_card_comments("c1")

    assert [c.author for c in comments] == ["Ann Lee", "Unknown"]
    assert comments[0].text == "Ship it"
    assert comments[0].date.year == 2024
    assert fake_trello.requests[0].url.params["filter"] == "commentCard"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403])
async def test_rejected_credentials(trello_client, fake_trello, status_code):
    fake_trello.routes["/members/me/boards"] = httpx.Response(status_code, text="invalid key")

    with pytest.raises(CredentialError) as exc_info:
        await trello_client.fetch_user_boards()

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_network_error_is_transient(credentials):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = TrelloClient(credentials, api_url=API_URL, transport=httpx.MockTransport(handler))

    with pytest.raises(TransientFetchError) as exc_info:
        await client.fetch_lists_by_board_id("b1")

    assert "connection refused" in exc_info.value.detail


@pytest.mark.asyncio
async def test_missing_credentials_never_hit_the_network(fake_trello):
    incomplete = TrelloCredentials(api_key="key", token=" ")
    client = TrelloClient(incomplete, api_url=API_URL, transport=fake_trello.transport)

    assert client.has_credentials is False
    with pytest.raises(CredentialError):
        await client.fetch_user_boards()
    assert fake_trello.requests == []


@pytest.mark.asyncio
async def test_health_check(trello_client, fake_trello):
    assert await trello_client.health_check() is True

    fake_trello.routes["/members/me"] = httpx.Response(401, text="invalid token")
    assert await trello_client.health_check() is False


@pytest.mark.asyncio
async def test_with_credentials_returns_new_client(trello_client, fake_trello):
    replacement = TrelloCredentials(api_key="other-key", token="other-token")

    other = trello_client.with_credentials(replacement)
    await other.health_check()

    assert other is not trello_client
    assert trello_client.credentials.api_key == "test-key"
    assert other.credentials.api_key == "other-key"
    assert other.api_url == trello_client.api_url
    assert fake_trello.requests[0].url.params["key"] == "other-key"


def test_credentials_are_immutable(credentials):
    with pytest.raises(ValidationError):
        credentials.api_key = "changed"


@pytest.mark.asyncio
async def test_non_json_response_is_transient(trello_client, fake_trello):
    fake_trello.routes["/cards/c1/actions"] = httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(TransientFetchError) as exc_info:
        await trello_client.fetch_card_comments("c1")

    assert exc_info.value.status_code == 502
    assert "invalid JSON" in exc_info.value.detail
