"""Tests for SearchResolver and response classification."""

import pytest
import requests

from diagnosis_map.api import ApiError
from diagnosis_map.core.search.resolver import EmptyQueryError, SearchResolver, classify_response
from diagnosis_map.core.tree.loader import default_store
from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.search import NoMatch, SearchMatch, TransportFailure
from tests.unit.fakes import FakeApi

SEARCH = "api/diagnosis-search"


def test_match_is_returned_with_reasoning() -> None:
    api = FakeApi()
    api.add_response(
        SEARCH,
        {
            "nodeId": "competitor-stole",
            "label": "Competitor stole them with better offer",
            "confidence": 0.85,
            "reasoning": "Clients leaving for a rival's offer",
        },
    )
    resolver = SearchResolver(api, store=default_store())

    outcome = resolver.search("  my clients are leaving for a competitor  ")

    assert outcome == SearchMatch(
        node_id="competitor-stole",
        label="Competitor stole them with better offer",
        confidence=0.85,
        reasoning="Clients leaving for a rival's offer",
    )
    assert api.calls == [(SEARCH, {"query": "my clients are leaving for a competitor"})]


@pytest.mark.parametrize("query", ["", "   ", "\n\t"])
def test_blank_query_raises_without_dispatch(query: str) -> None:
    api = FakeApi()
    with pytest.raises(EmptyQueryError):
        SearchResolver(api).search(query)
    assert api.calls == []


@pytest.mark.parametrize(
    "payload",
    [{}, {"nodeId": None}, {"nodeId": ""}, {"nodeId": 42}, {"error": "nothing relevant"}],
)
def test_missing_node_id_is_no_match(payload: dict[str, object]) -> None:
    api = FakeApi()
    api.add_response(SEARCH, payload)
    assert SearchResolver(api).search("q") == NoMatch(query="q")


@pytest.mark.parametrize(
    "error",
    [
        ApiError("HTTP 500", status_code=500),
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
    ],
)
def test_transport_errors_are_transport_failures(error: Exception) -> None:
    api = FakeApi()
    api.add_response(SEARCH, error)
    outcome = SearchResolver(api).search("q")
    assert isinstance(outcome, TransportFailure)
    assert outcome.message == "Failed to search. Please try again."


def test_retry_after_failure_succeeds() -> None:
    api = FakeApi()
    api.add_response(SEARCH, ApiError("HTTP 500", status_code=500))
    api.add_response(SEARCH, {"nodeId": "b1", "label": "Tool sprawl", "confidence": 0.6})
    resolver = SearchResolver(api)

    assert isinstance(resolver.search("tools"), TransportFailure)
    assert isinstance(resolver.search("tools"), SearchMatch)
    assert len(api.calls) == 2


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (1.7, 1.0),
        (-0.2, 0.0),
        ("0.4", 0.4),
        (None, 0.0),
        ("high", 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
    ],
)
def test_confidence_is_clamped(raw: object, expected: float) -> None:
    outcome = classify_response("q", {"nodeId": "x", "label": "X", "confidence": raw})
    assert isinstance(outcome, SearchMatch)
    assert outcome.confidence == expected


def test_low_confidence_is_still_a_match() -> None:
    outcome = classify_response("q", {"nodeId": "x", "label": "X", "confidence": 0.01})
    assert isinstance(outcome, SearchMatch)


def test_missing_label_falls_back_to_tree_then_id(store: TreeStore) -> None:
    from_tree = classify_response("q", {"nodeId": "b1"}, store)
    assert isinstance(from_tree, SearchMatch)
    assert from_tree.label == "Tool sprawl"

    unknown = classify_response("q", {"nodeId": "ghost"}, store)
    assert isinstance(unknown, SearchMatch)
    assert unknown.label == "ghost"
