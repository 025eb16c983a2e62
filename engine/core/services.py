"""
Per-game service registry.

Screens look up shared managers (audio, images, the dialogue driver)
through the game's registry instead of process-wide singletons. A
service key can only be provided once; later registrations are
rejected so the first instance stays authoritative.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Typed first-writer-wins lookup table."""

    def __init__(self):
        self._services: dict[type, Any] = {}

    def provide(self, key: type[T], instance: T) -> T:
        """
        Register a service.

        Returns:
            The instance that is registered under ``key`` afterwards,
            which is the earlier one if ``key`` was already taken.
        """
        existing = self._services.get(key)
        if existing is not None:
            if existing is not instance:
                logger.error(
                    "Multiple instances of %s detected; keeping the first one",
                    key.__name__,
                )
            return existing

        self._services[key] = instance
        return instance

    def get(self, key: type[T]) -> T | None:
        return self._services.get(key)

    def require(self, key: type[T]) -> T:
        """Get a service, raising KeyError if it was never provided."""
        try:
            return self._services[key]
        except KeyError:
            raise KeyError(f"Service not provided: {key.__name__}") from None

    def remove(self, key: type) -> None:
        self._services.pop(key, None)

    def __contains__(self, key: type) -> bool:
        return key in self._services
