"""Tests for explain/solve requests."""

import requests

from diagnosis_map.api import ApiError
from diagnosis_map.core.assist.client import AssistClient
from diagnosis_map.core.tree.store import TreeStore
from tests.unit.fakes import FakeApi

ASSIST = "api/ai-diagnosis"


def test_explain_sends_node_and_subtree(store: TreeStore) -> None:
    api = FakeApi()
    api.add_response(ASSIST, {"content": "Cash arrives weeks after the work."})

    reply = AssistClient(api, store).explain("a")

    assert reply is not None
    assert reply.ok
    assert reply.title == "Explaining: MONEY TOO SLOW"
    assert reply.content == "Cash arrives weeks after the work."
    assert api.calls == [
        (
            ASSIST,
            {
                "nodeId": "a",
                "nodeLabel": "MONEY TOO SLOW",
                "mode": "explain",
                "nodeContext": (
                    "- MONEY TOO SLOW\n  - Long payment terms\n    - NET-90 clients\n"
                    "  - Late invoicing\n"
                ),
            },
        )
    ]


def test_solve_uses_solutions_title(store: TreeStore) -> None:
    api = FakeApi()
    api.add_response(ASSIST, {"content": "**Easy**: cancel unused tools."})
    reply = AssistClient(api, store).solve("b1")
    assert reply is not None
    assert reply.title == "Solutions for: Tool sprawl"
    assert api.calls[0][1]["mode"] == "solve"


def test_empty_content_uses_fallback(store: TreeStore) -> None:
    api = FakeApi()
    api.add_response(ASSIST, {"content": "  "})
    reply = AssistClient(api, store).solve("c")
    assert reply is not None
    assert reply.ok
    assert reply.content == "Unable to generate solutions."


def test_transport_failure_is_reported(store: TreeStore) -> None:
    client = AssistClient(FakeApi(), store)
    for error in (ApiError("HTTP 502", status_code=502), requests.ConnectionError("down")):
        api = FakeApi()
        api.add_response(ASSIST, error)
        client.api = api
        reply = client.explain("c")
        assert reply is not None
        assert not reply.ok
        assert reply.content == "Failed to generate explanation. Please try again."


def test_unknown_node_sends_nothing(store: TreeStore) -> None:
    api = FakeApi()
    assert AssistClient(api, store).ask("missing", "explain") is None
    assert api.calls == []
