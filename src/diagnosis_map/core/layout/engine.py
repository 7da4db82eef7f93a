"""Layered top-to-bottom layout for the diagnosis graph.

The layout is computed once over the complete graph and cached. Toggling
collapse state only filters which cached positions are shown, so nodes never
jump around as branches open and close.

Steps:
    1. Rank: longest path from the sources.
    2. Order within rank: DFS discovery order, refined by barycenter sweeps
       that keep the ordering with the fewest edge crossings.
    3. Coordinates: parents centred over their children along the
       first-parent spanning forest, then a per-rank sweep that enforces
       minimum separation in rank order.

Same input gives the same output; nothing here is randomised.
"""

from bisect import bisect_right, insort
from collections import deque
from collections.abc import Collection, Iterable, Sequence

from loguru import logger

from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.graph import GraphEdge, LayoutSpacing, Position

MAX_ORDER_SWEEPS = 4


def _assign_ranks(
    ids: Sequence[str], succ: dict[str, list[str]], pred: dict[str, list[str]]
) -> dict[str, int]:
    rank = {node_id: 0 for node_id in ids}
    indegree = {node_id: len(pred[node_id]) for node_id in ids}
    queue = deque(node_id for node_id in ids if indegree[node_id] == 0)
    seen = 0
    while queue:
        current = queue.popleft()
        seen += 1
        for child in succ[current]:
            rank[child] = max(rank[child], rank[current] + 1)
            indegree[child] -= 1
            if indegree[child] == 0:
                queue.append(child)
    if seen < len(ids):
        logger.warning("Layout input has a cycle; {} nodes ranked at 0", len(ids) - seen)
    return rank


def _initial_order(
    ids: Sequence[str], succ: dict[str, list[str]], rank: dict[str, int]
) -> list[list[str]]:
    layers: list[list[str]] = [[] for _ in range(max(rank.values()) + 1)]
    visited: set[str] = set()
    for start in ids:
        if start in visited:
            continue
        stack = [start]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            layers[rank[current]].append(current)
            stack.extend(reversed(succ[current]))
    return layers


def _count_crossings(upper: list[str], lower: list[str], succ: dict[str, list[str]]) -> int:
    lower_pos = {node_id: i for i, node_id in enumerate(lower)}
    targets = [
        lower_pos[child]
        for node_id in upper
        for child in sorted(succ[node_id], key=lambda c: lower_pos.get(c, -1))
        if child in lower_pos
    ]
    # Inversions in the target sequence are exactly the crossing edge pairs.
    seen: list[int] = []
    crossings = 0
    for target in targets:
        crossings += len(seen) - bisect_right(seen, target)
        insort(seen, target)
    return crossings


def _total_crossings(layers: list[list[str]], succ: dict[str, list[str]]) -> int:
    return sum(_count_crossings(layers[i], layers[i + 1], succ) for i in range(len(layers) - 1))


def _reorder_layer(
    layer: list[str], fixed: list[str], neighbours: dict[str, list[str]]
) -> list[str]:
    """Sort a layer by the mean position of each node's neighbours in ``fixed``.

    Nodes without neighbours in the fixed layer keep their slot.
    """
    fixed_pos = {node_id: i for i, node_id in enumerate(fixed)}
    movable: list[tuple[float, int, str]] = []
    result: list[str | None] = [None] * len(layer)
    for i, node_id in enumerate(layer):
        positions = [fixed_pos[n] for n in neighbours[node_id] if n in fixed_pos]
        if positions:
            movable.append((sum(positions) / len(positions), i, node_id))
        else:
            result[i] = node_id
    movable.sort()
    free_slots = (i for i, slot in enumerate(result) if slot is None)
    for (_, _, node_id), slot in zip(movable, list(free_slots), strict=True):
        result[slot] = node_id
    return [node_id for node_id in result if node_id is not None]


def _minimise_crossings(
    layers: list[list[str]], succ: dict[str, list[str]], pred: dict[str, list[str]]
) -> list[list[str]]:
    best = [list(layer) for layer in layers]
    best_crossings = _total_crossings(best, succ)
    current = [list(layer) for layer in layers]
    for sweep in range(MAX_ORDER_SWEEPS):
        if best_crossings == 0:
            break
        if sweep % 2 == 0:
            for r in range(1, len(current)):
                current[r] = _reorder_layer(current[r], current[r - 1], pred)
        else:
            for r in range(len(current) - 2, -1, -1):
                current[r] = _reorder_layer(current[r], current[r + 1], succ)
        crossings = _total_crossings(current, succ)
        if crossings < best_crossings:
            best = [list(layer) for layer in current]
            best_crossings = crossings
    logger.debug("Layout ordering: {} crossings after sweeps", best_crossings)
    return best


def _assign_x(
    layers: list[list[str]],
    pred: dict[str, list[str]],
    rank: dict[str, int],
    spacing: LayoutSpacing,
) -> dict[str, float]:
    order = {node_id: i for layer in layers for i, node_id in enumerate(layer)}
    box = spacing.node_width
    sep = spacing.node_sep

    # First-parent spanning forest; the parent is the leftmost predecessor.
    forest_children: dict[str, list[str]] = {node_id: [] for node_id in order}
    roots: list[str] = []
    for layer in layers:
        for node_id in layer:
            parents = [p for p in pred[node_id] if p in order]
            if parents:
                parent = min(parents, key=lambda p: (rank[p], order[p]))
                forest_children[parent].append(node_id)
            else:
                roots.append(node_id)
    for children in forest_children.values():
        children.sort(key=lambda c: (rank[c], order[c]))

    preorder: list[str] = []
    stack = list(reversed(roots))
    while stack:
        current = stack.pop()
        preorder.append(current)
        stack.extend(reversed(forest_children[current]))

    width: dict[str, float] = {}
    for node_id in reversed(preorder):
        children = forest_children[node_id]
        span = sum(width[c] for c in children) + sep * max(len(children) - 1, 0)
        width[node_id] = max(box, span)

    left: dict[str, float] = {}
    cursor = 0.0
    for root in roots:
        left[root] = cursor
        cursor += width[root] + sep
    for node_id in preorder:
        children = forest_children[node_id]
        span = sum(width[c] for c in children) + sep * max(len(children) - 1, 0)
        child_left = left[node_id] + (width[node_id] - span) / 2
        for child in children:
            left[child] = child_left
            child_left += width[child] + sep

    center: dict[str, float] = {}
    for node_id in reversed(preorder):
        children = forest_children[node_id]
        if children:
            center[node_id] = (center[children[0]] + center[children[-1]]) / 2
        else:
            center[node_id] = left[node_id] + box / 2

    # Enforce separation in crossing-minimised order within each rank.
    for layer in layers:
        for prev, node_id in zip(layer, layer[1:], strict=False):
            min_center = center[prev] + box + sep
            if center[node_id] < min_center:
                center[node_id] = min_center
    return center


def compute_layout(
    node_ids: Iterable[str],
    edges: Iterable[GraphEdge],
    spacing: LayoutSpacing = LayoutSpacing(),
) -> dict[str, Position]:
    """Compute top-left positions for every node of a directed graph.

    Args:
        node_ids: Node ids; their order breaks ties.
        edges: Parent -> child edges; their order sets child order.
        spacing: Box size and separation constants.

    Returns:
        Dictionary mapping node_id -> Position (top-left of the node box).
    """
    ids = list(dict.fromkeys(node_ids))
    if not ids:
        logger.debug("No nodes to layout")
        return {}

    known = set(ids)
    succ: dict[str, list[str]] = {node_id: [] for node_id in ids}
    pred: dict[str, list[str]] = {node_id: [] for node_id in ids}
    for edge in edges:
        if edge.source not in known or edge.target not in known:
            logger.debug("Skipping edge with unknown endpoint: {}", edge.id)
            continue
        if edge.source == edge.target or edge.target in succ[edge.source]:
            continue
        succ[edge.source].append(edge.target)
        pred[edge.target].append(edge.source)

    rank = _assign_ranks(ids, succ, pred)
    layers = _minimise_crossings(_initial_order(ids, succ, rank), succ, pred)
    center_x = _assign_x(layers, pred, rank, spacing)

    half = spacing.node_width / 2
    min_left = min(center_x.values()) - half
    positions = {
        node_id: Position(
            x=center_x[node_id] - half - min_left + spacing.margin_x,
            y=spacing.margin_y + rank[node_id] * (spacing.node_height + spacing.rank_sep),
        )
        for node_id in ids
    }
    logger.debug("Layered layout: {} nodes in {} ranks", len(positions), len(layers))
    return positions


def layout_bounds(
    positions: dict[str, Position], spacing: LayoutSpacing = LayoutSpacing()
) -> tuple[float, float]:
    """Return (width, height) of the drawing including margins."""
    if not positions:
        return 0.0, 0.0
    width = max(p.x for p in positions.values()) + spacing.node_width + spacing.margin_x
    height = max(p.y for p in positions.values()) + spacing.node_height + spacing.margin_y
    return width, height


class LayoutCache:
    """Lazily computed, reused layout of a complete tree."""

    def __init__(self, store: TreeStore, spacing: LayoutSpacing = LayoutSpacing()) -> None:
        self.store = store
        self.spacing = spacing
        self._signature: tuple[tuple[str, ...], tuple[GraphEdge, ...]] | None = None
        self._positions: dict[str, Position] = {}
        self._edges: list[GraphEdge] = []

    def _ensure(self) -> None:
        signature = (tuple(self.store.all_ids()), tuple(self.store.edges()))
        if signature == self._signature:
            return
        ids, edges = signature
        self._positions = compute_layout(ids, edges, self.spacing)
        self._edges = list(edges)
        self._signature = signature

    @property
    def positions(self) -> dict[str, Position]:
        self._ensure()
        return self._positions

    @property
    def edges(self) -> list[GraphEdge]:
        self._ensure()
        return self._edges

    def visible_elements(
        self, visible_ids: Collection[str]
    ) -> tuple[dict[str, Position], list[GraphEdge]]:
        """Filter cached positions and edges down to the visible node set."""
        self._ensure()
        visible_positions = {
            node_id: pos for node_id, pos in self._positions.items() if node_id in visible_ids
        }
        visible_edges = [
            e for e in self._edges if e.source in visible_ids and e.target in visible_ids
        ]
        return visible_positions, visible_edges
