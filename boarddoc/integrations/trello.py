"""Trello REST API client.

Read-only: boards, lists, cards and card comments.  Every call hits the API;
nothing is cached and failed requests are not retried.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from boarddoc.common.exceptions import CredentialError, TransientFetchError
from boarddoc.config import settings
from boarddoc.core.documents.schemas import Board, Card, Comment, TrelloCredentials, TrelloList
from boarddoc.integrations.base import BaseIntegration

_AUTH_FAILURE_CODES = {401, 403}


class TrelloClient(BaseIntegration):
    """Trello integration bound to one immutable set of credentials."""

    def __init__(
        self,
        credentials: TrelloCredentials,
        *,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__("trello")
        self.credentials = credentials
        self.api_url = (api_url or settings.TRELLO_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.TRELLO_TIMEOUT
        self._transport = transport

    @classmethod
    def from_settings(cls, **kwargs: Any) -> TrelloClient:
        credentials = TrelloCredentials(api_key=settings.TRELLO_API_KEY, token=settings.TRELLO_TOKEN)
        return cls(credentials, **kwargs)

    def with_credentials(self, credentials: TrelloCredentials) -> TrelloClient:
        """Return a new client using *credentials*; this one is left unchanged."""
        return TrelloClient(
            credentials,
            api_url=self.api_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    @property
    def has_credentials(self) -> bool:
        return self.credentials.is_complete

    def _params(self) -> dict[str, str]:
        return {"key": self.credentials.api_key, "token": self.credentials.token}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        if not self.has_credentials:
            raise CredentialError("Missing Trello API credentials (TRELLO_API_KEY / TRELLO_TOKEN)")

        params = {**self._params(), **kwargs.pop("params", {})}
        self.logger.debug("%s %s", method, path)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method, f"{self.api_url}{path}", params=params, **kwargs)
        except httpx.HTTPError as e:
            raise self.service_error(method, path, str(e)) from e

        if resp.status_code in _AUTH_FAILURE_CODES:
            self.logger.error("Trello rejected credentials (%d) for %s", resp.status_code, path)
            raise CredentialError(f"Trello rejected the API key/token (HTTP {resp.status_code})")
        if resp.is_error:
            raise self.service_error(method, path, f"HTTP {resp.status_code}: {resp.text}")
        try:
            return resp.json()
        except ValueError as e:
            raise self.service_error(method, path, f"invalid JSON response: {e}") from e

    async def health_check(self) -> bool:
        try:
            await self._request("GET", "/members/me")
            return True
        except (CredentialError, TransientFetchError) as e:
            self.logger.error("Trello health check failed: %s", e.detail)
            return False

    # ------------------------------------------------------------------
    # Boards & lists
    # ------------------------------------------------------------------

    async def fetch_user_boards(self) -> list[Board]:
        data = await self._request("GET", "/members/me/boards")
        boards = [Board.model_validate(item) for item in data]
        self.logger.info("Fetched %d board(s)", len(boards))
        return boards

    async def fetch_lists_by_board_id(self, board_id: str) -> list[TrelloList]:
        data = await self._request("GET", f"/boards/{board_id}/lists")
        lists = [TrelloList.model_validate(item) for item in data]
        self.logger.info("Fetched %d list(s) for board %s", len(lists), board_id)
        return lists

    # ------------------------------------------------------------------
    # Cards & comments
    # ------------------------------------------------------------------

    async def fetch_list_cards(self, list_id: str, include_attachments: bool = True) -> list[Card]:
        params = {"attachments": "true"} if include_attachments else {}
        data = await self._request("GET", f"/lists/{list_id}/cards", params=params)
        cards = []
        for item in data:
            card = Card.model_validate(item)
            card.list_id = list_id
            cards.append(card)
        return cards

    async def fetch_cards_from_lists(
        self, list_ids: Sequence[str], include_attachments: bool = True
    ) -> list[Card]:
        """Fetch cards list by list, in order; any failure aborts the whole call."""
        all_cards: list[Card] = []
        for list_id in list_ids:
            cards = await self.fetch_list_cards(list_id, include_attachments)
            self.logger.info("Fetched %d card(s) from list %s", len(cards), list_id)
            all_cards.extend(cards)
        return all_cards

    async def fetch_card_comments(self, card_id: str) -> list[Comment]:
        data = await self._request("GET", f"/cards/{card_id}/actions", params={"filter": "commentCard"})
        return [Comment.from_action(action) for action in data]
