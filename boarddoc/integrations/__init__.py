"""Clients for the remote services boarddoc reads from."""

from boarddoc.integrations.base import BaseIntegration
from boarddoc.integrations.trello import TrelloClient

__all__ = [
    "BaseIntegration",
    "TrelloClient",
]
