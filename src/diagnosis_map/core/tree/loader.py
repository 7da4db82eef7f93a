"""Parse the static diagnostic tree JSON into domain models."""

import json
from collections import Counter, deque
from functools import lru_cache
from pathlib import Path
from typing import Any

from loguru import logger

from diagnosis_map.config import TREE_DATA_PATH
from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.node import DiagnosisNode


def parse_tree_data(data: dict[str, Any]) -> DiagnosisNode:
    """Parse a nested ``{"id", "label", "level", "children"}`` dict.

    Args:
        data: Raw tree data (as from diagnostic_tree.json).

    Returns:
        The root DiagnosisNode with all descendants attached.
    """
    for key in ("id", "label"):
        if key not in data:
            msg = f"Tree node is missing {key!r}: {sorted(data)!r}"
            raise ValueError(msg)

    return DiagnosisNode(
        id=data["id"],
        label=data["label"],
        level=int(data.get("level", 1)),
        children=tuple(parse_tree_data(child) for child in data.get("children", [])),
    )


def validate_tree(root: DiagnosisNode) -> None:
    """Check the tree invariants that construction is trusted to uphold.

    Raises:
        ValueError: If ids are duplicated or empty.
    """
    counts: Counter[str] = Counter()
    todo: deque[DiagnosisNode] = deque([root])
    while todo:
        node = todo.popleft()
        if not node.id:
            msg = f"Tree node with label {node.label!r} has an empty id"
            raise ValueError(msg)
        counts[node.id] += 1
        todo.extend(node.children)

    duplicates = sorted(node_id for node_id, n in counts.items() if n > 1)
    if duplicates:
        msg = f"Duplicate node ids: {duplicates!r}"
        raise ValueError(msg)


def load_tree(path: Path = TREE_DATA_PATH, *, validate: bool = __debug__) -> DiagnosisNode:
    """Load the diagnostic tree from a JSON file."""
    with open(path, encoding="utf-8") as f:
        root = parse_tree_data(json.load(f))
    if validate:
        validate_tree(root)
    logger.debug("Loaded diagnostic tree from {}", path)
    return root


@lru_cache(maxsize=1)
def default_store() -> TreeStore:
    """Return the process-wide store for the shipped tree. Never mutated."""
    return TreeStore(load_tree())
