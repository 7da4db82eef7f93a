"""Tests for loading and validating the diagnostic tree."""

import json
from pathlib import Path

import pytest

from diagnosis_map.core.tree.loader import default_store, load_tree, parse_tree_data, validate_tree
from tests.unit.conftest import SMALL_TREE


def test_parse_tree_data_builds_nested_nodes() -> None:
    root = parse_tree_data(SMALL_TREE)
    assert root.id == "root"
    assert [c.id for c in root.children] == ["a", "b", "c"]
    assert root.children[0].children[0].children[0].id == "a1x"
    assert root.children[2].is_leaf


def test_parse_tree_data_defaults_level_and_children() -> None:
    root = parse_tree_data({"id": "x", "label": "X"})
    assert root.level == 1
    assert root.children == ()


def test_parse_tree_data_rejects_missing_label() -> None:
    with pytest.raises(ValueError, match="missing 'label'"):
        parse_tree_data({"id": "root", "children": [{"id": "child"}]})


def test_validate_tree_rejects_duplicate_ids() -> None:
    root = parse_tree_data(
        {
            "id": "root",
            "label": "Root",
            "children": [
                {"id": "dup", "label": "One"},
                {"id": "x", "label": "X", "children": [{"id": "dup", "label": "Two"}]},
            ],
        }
    )
    with pytest.raises(ValueError, match="Duplicate node ids: \\['dup'\\]"):
        validate_tree(root)


def test_validate_tree_rejects_empty_id() -> None:
    root = parse_tree_data({"id": "root", "label": "Root", "children": [{"id": "", "label": "?"}]})
    with pytest.raises(ValueError, match="empty id"):
        validate_tree(root)


def test_load_tree_reads_json_file(tmp_path: Path) -> None:
    path = tmp_path / "tree.json"
    path.write_text(json.dumps(SMALL_TREE))
    root = load_tree(path, validate=True)
    assert root.label == "NOT ENOUGH MONEY"


def test_shipped_tree_is_valid() -> None:
    """The packaged tree loads, has unique ids and the expected top level."""
    store = default_store()
    validate_tree(store.root)
    assert store.root_id == "root"
    assert len(store) == 450
    assert len(set(store.all_ids())) == len(store)
    assert store.children_ids("root") == (
        "money-slow",
        "money-out-fast",
        "not-enough-revenue",
        "personal-bottlenecks",
    )


def test_shipped_tree_levels_follow_depth() -> None:
    store = default_store()
    for node in store:
        assert node.level == node.depth + 1
