"""Collapse state: which subtrees are hidden, and what is therefore visible."""

from collections.abc import Callable, Iterable

from loguru import logger

from diagnosis_map.config import FIT_AFTER_TOGGLE
from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.graph import FitViewRequest

FitListener = Callable[[FitViewRequest], None]


class CollapseState:
    """The set of collapsed node ids for one session.

    The root is never a member. Expanding a node closes its siblings'
    subtrees so only one branch per level is open at a time.
    """

    def __init__(self, store: TreeStore, *, on_fit: FitListener | None = None) -> None:
        self.store = store
        self.on_fit = on_fit
        self._collapsed: set[str] = set()
        self.collapse_all()

    @property
    def collapsed(self) -> frozenset[str]:
        return frozenset(self._collapsed)

    def is_collapsed(self, node_id: str) -> bool:
        return node_id in self._collapsed

    def _collapse_subtree(self, node_id: str) -> None:
        if node_id != self.store.root_id:
            self._collapsed.add(node_id)
        self._collapsed.update(self.store.descendant_ids(node_id))

    def toggle(self, node_id: str) -> bool:
        """Expand a collapsed node or collapse an expanded one.

        Returns:
            True if the node is expanded afterwards. Unknown ids return False
            and change nothing.
        """
        if node_id not in self.store:
            logger.debug("Toggle ignored for unknown node {}", node_id)
            return False

        expanded = node_id in self._collapsed
        if expanded:
            self._collapsed.discard(node_id)
            for sibling in self.store.sibling_ids(node_id):
                self._collapse_subtree(sibling)
        else:
            self._collapse_subtree(node_id)

        logger.debug("{} {}", "Expanded" if expanded else "Collapsed", node_id)
        self._request_fit()
        return expanded

    def expand(self, node_ids: Iterable[str]) -> None:
        """Expand the given nodes without touching anything else."""
        self._collapsed.difference_update(node_ids)

    def collapse_all(self) -> None:
        """Collapse every node except the root."""
        root_id = self.store.root_id
        self._collapsed = {n for n in self.store.all_ids() if n != root_id}

    def visible_set(self) -> set[str]:
        """Ids reachable from the root without descending into collapsed nodes."""
        visible: set[str] = set()
        stack = [self.store.root_id]
        while stack:
            current = stack.pop()
            visible.add(current)
            if current not in self._collapsed:
                stack.extend(self.store.children_ids(current))
        return visible

    def _request_fit(self) -> None:
        if self.on_fit is None:
            return
        padding, duration_ms, delay_ms = FIT_AFTER_TOGGLE
        self.on_fit(FitViewRequest(padding=padding, duration_ms=duration_ms, delay_ms=delay_ms))
