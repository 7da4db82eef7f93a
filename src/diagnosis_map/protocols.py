"""Protocols for dependency injection in the explorer."""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from diagnosis_map.models.search import SearchOutcome


@runtime_checkable
class ApiProtocol(Protocol):
    """Protocol for diagnosis API clients."""

    def call(self, path: str, args: dict[str, Any]) -> dict[str, Any]:
        """Invoke an API endpoint and return the JSON response."""
        ...


@runtime_checkable
class ResolverProtocol(Protocol):
    """Protocol for free-text to node resolvers."""

    def search(self, query: str) -> SearchOutcome:
        """Resolve a problem description to the best-matching node."""
        ...


@runtime_checkable
class SchedulerProtocol(Protocol):
    """Protocol for one-shot timers on the UI event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        """Run callback once, after delay seconds."""
        ...
