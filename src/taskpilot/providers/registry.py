"""Provider registry.

The registry is an ordinary object built once at application start and
passed to whatever needs to construct providers. There is no module-level
instance and no import-time registration.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import NotFoundError
from ..utils.rate_limiter import ConcurrencyLimiter
from .http import DEFAULT_TIMEOUT
from .protocol import ProviderType, TaskProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], TaskProvider]


class ProviderRegistry:
    """Maps provider type tags to zero-argument factories."""

    def __init__(self) -> None:
        self._factories: dict[str, ProviderFactory] = {}

    def register(self, type: ProviderType | str, factory: ProviderFactory) -> None:
        logger.debug("Registering provider: %s", type)
        self._factories[type] = factory

    def create(self, type: ProviderType | str) -> TaskProvider:
        """Build a new provider instance.

        Raises:
            NotFoundError: ``type`` is not registered. The message lists the
                registered types.
        """
        factory = self._factories.get(type)
        if factory is None:
            available = ", ".join(self.list()) or "none"
            raise NotFoundError(f"Provider '{type}' (available providers: {available})")
        return factory()

    def has(self, type: ProviderType | str) -> bool:
        return type in self._factories

    def list(self) -> list[str]:
        return list(self._factories)


def build_registry(
    timeout: float = DEFAULT_TIMEOUT,
    limiter: ConcurrencyLimiter | None = None,
) -> ProviderRegistry:
    """Composition root: register the built-in backends."""
    from .github import GitHubProvider
    from .trello import TrelloProvider

    registry = ProviderRegistry()
    registry.register("trello", lambda: TrelloProvider(timeout=timeout, limiter=limiter))
    registry.register("github", lambda: GitHubProvider(timeout=timeout, limiter=limiter))
    return registry
