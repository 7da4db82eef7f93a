"""Search and assist outcome models."""

from dataclasses import dataclass
from typing import Literal

NO_MATCH_MESSAGE = "No relevant issue found. Try rephrasing your query."
TRANSPORT_FAILURE_MESSAGE = "Failed to search. Please try again."


@dataclass(frozen=True)
class SearchMatch:
    """The resolver's best-matching node for a query."""

    node_id: str
    label: str
    confidence: float
    reasoning: str = ""
    kind: Literal["match"] = "match"

    @property
    def message(self) -> str:
        return f"Found: {self.label}"

    @property
    def confidence_percent(self) -> int:
        return round(self.confidence * 100)


@dataclass(frozen=True)
class NoMatch:
    """The resolver ran but found nothing."""

    query: str
    kind: Literal["no_match"] = "no_match"

    @property
    def message(self) -> str:
        return NO_MATCH_MESSAGE


@dataclass(frozen=True)
class TransportFailure:
    """The resolver could not be reached or answered garbage. Retryable."""

    query: str
    reason: str
    kind: Literal["transport_failure"] = "transport_failure"

    @property
    def message(self) -> str:
        return TRANSPORT_FAILURE_MESSAGE


SearchOutcome = SearchMatch | NoMatch | TransportFailure

AssistMode = Literal["explain", "solve"]


@dataclass(frozen=True)
class AssistReply:
    """Text returned by the explain/solve endpoint for one node."""

    node_id: str
    mode: AssistMode
    title: str
    content: str
    ok: bool = True
