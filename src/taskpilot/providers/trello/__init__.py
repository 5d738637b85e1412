"""Trello provider."""

from .client import TRELLO_API_URL, TrelloClient
from .mapper import TrelloMapper
from .provider import TrelloProvider

__all__ = [
    "TRELLO_API_URL",
    "TrelloClient",
    "TrelloMapper",
    "TrelloProvider",
]
