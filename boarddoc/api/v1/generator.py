from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from boarddoc.api.deps import get_trello_client
from boarddoc.common.exceptions import ConfigurationError
from boarddoc.core.documents.config import create_config
from boarddoc.core.documents.schemas import Board, TrelloList
from boarddoc.core.documents.service import DocumentService
from boarddoc.integrations.trello import TrelloClient

router = APIRouter(tags=["Generator"])


# ---------- Schemas ----------


class _Response(BaseModel):
    success: bool = True

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class GenerateResponse(_Response):
    html: str
    card_count: int


class BoardsResponse(_Response):
    boards: list[Board]


class ListsResponse(_Response):
    lists: list[TrelloList]


# ---------- Endpoints ----------


@router.post("/generate", response_model=GenerateResponse)
async def generate_documentation(
    payload: dict[str, Any] = Body(...),
    client: TrelloClient = Depends(get_trello_client),
):
    try:
        config = create_config(payload)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e.error_count()} field error(s)") from e

    document = await DocumentService(client).generate(config)
    return GenerateResponse(html=document.html, card_count=document.card_count)


@router.get("/boards", response_model=BoardsResponse)
async def list_boards(client: TrelloClient = Depends(get_trello_client)):
    boards = await client.fetch_user_boards()
    return BoardsResponse(boards=boards)


@router.get("/lists", response_model=ListsResponse)
async def list_board_lists(
    board_id: str | None = Query(None, alias="boardId"),
    client: TrelloClient = Depends(get_trello_client),
):
    if not board_id:
        raise ConfigurationError("Board ID required")
    lists = await client.fetch_lists_by_board_id(board_id)
    return ListsResponse(lists=lists)
