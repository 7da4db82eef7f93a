"""Shared test fixtures."""

from typing import Any

import pytest

from diagnosis_map.core.tree.loader import parse_tree_data
from diagnosis_map.core.tree.store import TreeStore
from tests.unit.fakes import FakeScheduler

SMALL_TREE: dict[str, Any] = {
    "id": "root",
    "label": "NOT ENOUGH MONEY",
    "level": 1,
    "children": [
        {
            "id": "a",
            "label": "MONEY TOO SLOW",
            "level": 2,
            "children": [
                {
                    "id": "a1",
                    "label": "Long payment terms",
                    "level": 3,
                    "children": [{"id": "a1x", "label": "NET-90 clients", "level": 4}],
                },
                {"id": "a2", "label": "Late invoicing", "level": 3},
            ],
        },
        {
            "id": "b",
            "label": "MONEY OUT TOO FAST",
            "level": 2,
            "children": [{"id": "b1", "label": "Tool sprawl", "level": 3}],
        },
        {"id": "c", "label": "PERSONAL BOTTLENECKS", "level": 2},
    ],
}


@pytest.fixture
def store() -> TreeStore:
    """Return a store over an eight-node tree.

    root -> a (a1 (a1x), a2), b (b1), c
    """
    return TreeStore(parse_tree_data(SMALL_TREE))


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
