"""Render node subtrees as markdown lists and box-drawing outlines."""

import io
from collections.abc import Collection

from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.node import FlatNode


def render_subtree_as_markdown(
    store: TreeStore,
    *,
    node_id: str,
    max_depth: int | None = None,
    show_ids: bool = False,
) -> str:
    """Render a node and its descendants as indented markdown.

    Args:
        store: Tree store to read from.
        node_id: The root node to start rendering from.
        max_depth: Max levels below the start node to include (None = unlimited).
        show_ids: Append each node's id after its label.

    Returns:
        Markdown string with bullet-list hierarchy, or "" for an unknown node.
    """
    start = store.find_by_id(node_id)
    if start is None:
        return ""

    out = io.StringIO()
    stack: list[tuple[FlatNode, int]] = [(start, 0)]
    while stack:
        node, relative_depth = stack.pop()
        indent = "    " * relative_depth
        suffix = f" (id={node.id})" if show_ids else ""
        out.write(f"{indent}- {node.label}{suffix}\n")

        if max_depth is not None and relative_depth == max_depth:
            # Truncation indicator when children are cut off by max_depth
            if node.child_count > 0:
                child_indent = "    " * (relative_depth + 1)
                noun = "child" if node.child_count == 1 else "children"
                out.write(f"{child_indent}- ... ({node.child_count} more {noun}, id={node.id})\n")
            continue

        stack.extend((c, relative_depth + 1) for c in reversed(store.children(node.id)))

    return out.getvalue()


def render_node_context(store: TreeStore, node_id: str) -> str:
    """Render a node's full subtree as two-space indented ``- label`` lines.

    This is the sub-issue breakdown sent along with explain/solve requests.
    """
    node = store.find_by_id(node_id)
    if node is None:
        return ""
    out = io.StringIO()
    stack = [node]
    while stack:
        flat = stack.pop()
        out.write(f"{'  ' * (flat.depth - node.depth)}- {flat.label}\n")
        stack.extend(reversed(store.children(flat.id)))
    return out.getvalue()


def render_outline(
    store: TreeStore,
    *,
    node_id: str | None = None,
    visible: Collection[str] | None = None,
    collapsed: Collection[str] = (),
    highlighted: str | None = None,
) -> str:
    """Render a box-drawing outline with ids, e.g. ``├─ LABEL (id)``.

    Args:
        store: Tree store to read from.
        node_id: Start node (defaults to the root).
        visible: If given, only these node ids are drawn.
        collapsed: Ids drawn with a ``[+N]`` marker for their hidden children.
        highlighted: Id drawn with a trailing ``<--`` marker.
    """
    start = node_id or store.root_id
    start_node = store.find_by_id(start)
    if start_node is None:
        return ""

    def line_for(node: FlatNode) -> str:
        text = f"{node.label} ({node.id})"
        if node.id in collapsed and node.child_count:
            text += f" [+{node.child_count}]"
        if node.id == highlighted:
            text += " <--"
        return text

    out = io.StringIO()
    out.write(line_for(start_node) + "\n")

    def walk(current: FlatNode, prefix: str) -> None:
        children = [c for c in store.children(current.id) if visible is None or c.id in visible]
        for i, child in enumerate(children):
            last = i == len(children) - 1
            out.write(f"{prefix}{'└─ ' if last else '├─ '}{line_for(child)}\n")
            walk(child, prefix + ("   " if last else "│  "))

    walk(start_node, "")
    return out.getvalue()
