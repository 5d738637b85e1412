"""Task providers: the unified interface and its vendor backends."""

from .github import GitHubProvider
from .protocol import ProviderType, TaskProvider
from .registry import ProviderFactory, ProviderRegistry, build_registry
from .trello import TrelloProvider

__all__ = [
    "GitHubProvider",
    "ProviderFactory",
    "ProviderRegistry",
    "ProviderType",
    "TaskProvider",
    "TrelloProvider",
    "build_registry",
]
