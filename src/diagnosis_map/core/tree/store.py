"""In-memory tree store: flattening, lookup, breadcrumbs, siblings."""

from collections.abc import Iterator

from diagnosis_map.models.graph import GraphEdge
from diagnosis_map.models.node import DiagnosisNode, FlatNode, NodeContext


def flatten(tree: DiagnosisNode) -> list[FlatNode]:
    """Pre-order traversal of the tree, each node annotated with its parent id."""
    result: list[FlatNode] = []
    # Stack holds (node, parent_id, depth, sort_order); children pushed reversed
    # so they pop in display order.
    stack: list[tuple[DiagnosisNode, str | None, int, int]] = [(tree, None, 0, 0)]
    while stack:
        node, parent_id, depth, sort_order = stack.pop()
        result.append(
            FlatNode(
                id=node.id,
                label=node.label,
                level=node.level,
                parent_id=parent_id,
                depth=depth,
                sort_order=sort_order,
                child_ids=tuple(c.id for c in node.children),
            )
        )
        for i in range(len(node.children) - 1, -1, -1):
            stack.append((node.children[i], node.id, depth + 1, i))
    return result


class TreeStore:
    """Read-only index over a static diagnosis tree.

    Built once; lookups by id and parent walks are O(1) per step.
    """

    def __init__(self, root: DiagnosisNode) -> None:
        self.root = root
        self._nodes = flatten(root)
        self._by_id: dict[str, FlatNode] = {n.id: n for n in self._nodes}

    @property
    def root_id(self) -> str:
        return self.root.id

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __iter__(self) -> Iterator[FlatNode]:
        return iter(self._nodes)

    def flatten(self) -> list[FlatNode]:
        """All nodes in pre-order."""
        return list(self._nodes)

    def all_ids(self) -> list[str]:
        return [n.id for n in self._nodes]

    def find_by_id(self, node_id: str) -> FlatNode | None:
        """Return the node with this id, or None. Never raises."""
        return self._by_id.get(node_id)

    def children_ids(self, node_id: str) -> tuple[str, ...]:
        """Child ids in display order; empty for leaves and unknown ids."""
        node = self._by_id.get(node_id)
        return node.child_ids if node else ()

    def children(self, node_id: str) -> tuple[FlatNode, ...]:
        return tuple(self._by_id[c] for c in self.children_ids(node_id))

    def parent_id(self, node_id: str) -> str | None:
        node = self._by_id.get(node_id)
        return node.parent_id if node else None

    def ancestor_ids(self, node_id: str) -> list[str]:
        """Ancestors from the immediate parent up to the root."""
        ancestors: list[str] = []
        current = self.parent_id(node_id)
        while current is not None:
            ancestors.append(current)
            current = self.parent_id(current)
        return ancestors

    def descendant_ids(self, node_id: str) -> list[str]:
        """All descendants in pre-order, excluding node_id itself."""
        result: list[str] = []
        stack = list(reversed(self.children_ids(node_id)))
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(self.children_ids(current)))
        return result

    def sibling_ids(self, node_id: str) -> list[str]:
        """Other children of node_id's parent. The root has no siblings."""
        parent = self.parent_id(node_id)
        if parent is None:
            return []
        return [c for c in self.children_ids(parent) if c != node_id]

    def edges(self) -> list[GraphEdge]:
        """Parent -> child edges in pre-order."""
        return [GraphEdge(n.id, c) for n in self._nodes for c in n.child_ids]

    def breadcrumbs(self, node_id: str) -> tuple[FlatNode, ...]:
        """Ancestors ordered from the root to the immediate parent."""
        return tuple(self._by_id[a] for a in reversed(self.ancestor_ids(node_id)))

    def node_context(self, node_id: str, *, sibling_count: int = 3) -> NodeContext | None:
        """Get a node with breadcrumbs, nearby siblings and children."""
        node = self._by_id.get(node_id)
        if node is None:
            return None

        before: tuple[FlatNode, ...] = ()
        after: tuple[FlatNode, ...] = ()
        if node.parent_id is not None:
            siblings = self.children(node.parent_id)
            before = siblings[max(0, node.sort_order - sibling_count) : node.sort_order]
            after = siblings[node.sort_order + 1 : node.sort_order + 1 + sibling_count]

        return NodeContext(
            node=node,
            breadcrumbs=self.breadcrumbs(node_id),
            children=self.children(node_id),
            siblings_before=before,
            siblings_after=after,
        )
