"""Resolve a free-text problem description to a diagnosis node.

The matching itself happens behind the hosted search endpoint. This module
sends the query and sorts whatever comes back into exactly one of
SearchMatch, NoMatch or TransportFailure.
"""

import math
from typing import Any

import requests
from loguru import logger

from diagnosis_map.api import ApiError
from diagnosis_map.config import SEARCH_ENDPOINT
from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.search import NoMatch, SearchMatch, SearchOutcome, TransportFailure
from diagnosis_map.protocols import ApiProtocol


class EmptyQueryError(ValueError):
    """Raised before dispatch when the query is blank."""


def _coerce_confidence(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(confidence):
        return 0.0
    return min(max(confidence, 0.0), 1.0)


def classify_response(
    query: str, payload: dict[str, Any], store: TreeStore | None = None
) -> SearchMatch | NoMatch:
    """Turn a resolver response body into a match or a no-match."""
    node_id = payload.get("nodeId")
    if not isinstance(node_id, str) or not node_id:
        return NoMatch(query=query)

    label = payload.get("label")
    if not isinstance(label, str) or not label:
        node = store.find_by_id(node_id) if store else None
        label = node.label if node else node_id

    reasoning = payload.get("reasoning")
    return SearchMatch(
        node_id=node_id,
        label=label,
        confidence=_coerce_confidence(payload.get("confidence")),
        reasoning=reasoning if isinstance(reasoning, str) else "",
    )


class SearchResolver:
    """Sends queries to the search endpoint."""

    def __init__(self, api: ApiProtocol, *, store: TreeStore | None = None) -> None:
        self.api = api
        self.store = store

    def search(self, query: str) -> SearchOutcome:
        """Resolve a problem description to the best-matching node.

        Raises:
            EmptyQueryError: If the query is blank. Nothing is sent.
        """
        text = query.strip()
        if not text:
            msg = "Search query is empty"
            raise EmptyQueryError(msg)

        try:
            payload = self.api.call(SEARCH_ENDPOINT, {"query": text})
        except (requests.RequestException, ApiError) as e:
            logger.warning("Diagnosis search failed for {!r}: {}", text, e)
            return TransportFailure(query=text, reason=str(e))

        outcome = classify_response(text, payload, self.store)
        if isinstance(outcome, SearchMatch):
            logger.debug(
                "Search {!r} -> {} ({:.0%})", text, outcome.node_id, outcome.confidence
            )
            if self.store is not None and outcome.node_id not in self.store:
                logger.warning("Resolver returned unknown node id {!r}", outcome.node_id)
        else:
            logger.debug("Search {!r} -> no match", text)
        return outcome
