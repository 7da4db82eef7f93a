"""The diagnosis explorer: one object owning all per-session graph state."""

from collections.abc import Callable

from loguru import logger

from diagnosis_map.config import FIT_AFTER_RECENTER
from diagnosis_map.core.assist.client import AssistClient
from diagnosis_map.core.layout.engine import LayoutCache
from diagnosis_map.core.scheduling import PollingScheduler
from diagnosis_map.core.search.session import SearchSession
from diagnosis_map.core.state.collapse import CollapseState
from diagnosis_map.core.state.navigation import Navigator
from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.graph import FitViewRequest, GraphNode, LayoutSpacing, VisibleGraph
from diagnosis_map.models.search import AssistReply, SearchOutcome
from diagnosis_map.protocols import ResolverProtocol, SchedulerProtocol


class DiagnosisExplorer:
    """Single source of truth for collapse, highlight and search state.

    Every read of ``visible_graph`` derives the visible set from the collapsed
    set and filters the cached full-tree layout by it.
    """

    def __init__(
        self,
        store: TreeStore,
        *,
        resolver: ResolverProtocol | None = None,
        assist: AssistClient | None = None,
        scheduler: SchedulerProtocol | None = None,
        spacing: LayoutSpacing = LayoutSpacing(),
    ) -> None:
        self.store = store
        self.scheduler: SchedulerProtocol = scheduler or PollingScheduler()
        self.layout = LayoutCache(store, spacing)
        self.collapse = CollapseState(store, on_fit=self._emit_fit)
        self.navigator = Navigator(self.collapse, self.scheduler, on_fit=self._emit_fit)
        self.search_session = SearchSession(resolver, self.scheduler) if resolver else None
        self.assist = assist
        self._fit_listeners: list[Callable[[FitViewRequest], None]] = []

    def on_fit(self, listener: Callable[[FitViewRequest], None]) -> None:
        """Register a renderer callback for viewport refit requests."""
        self._fit_listeners.append(listener)

    def _emit_fit(self, request: FitViewRequest) -> None:
        for listener in self._fit_listeners:
            listener(request)

    # --- Graph state ---

    def toggle(self, node_id: str) -> bool:
        return self.collapse.toggle(node_id)

    def navigate_to(self, node_id: str) -> bool:
        return self.navigator.navigate_to(node_id)

    def recenter(self) -> None:
        """Collapse everything back to the first level and frame the view."""
        self.collapse.collapse_all()
        padding, duration_ms, delay_ms = FIT_AFTER_RECENTER
        self._emit_fit(FitViewRequest(padding=padding, duration_ms=duration_ms, delay_ms=delay_ms))

    @property
    def highlighted(self) -> str | None:
        return self.navigator.highlighted

    def visible_set(self) -> set[str]:
        return self.collapse.visible_set()

    def visible_graph(self) -> VisibleGraph:
        visible = self.collapse.visible_set()
        positions, edges = self.layout.visible_elements(visible)
        highlighted = self.navigator.highlighted
        nodes = []
        for flat in self.store:
            if flat.id not in positions:
                continue
            nodes.append(
                GraphNode(
                    id=flat.id,
                    label=flat.label,
                    level=flat.level,
                    position=positions[flat.id],
                    collapsed=self.collapse.is_collapsed(flat.id),
                    child_count=flat.child_count,
                    highlighted=flat.id == highlighted,
                )
            )
        return VisibleGraph(nodes=tuple(nodes), edges=tuple(edges))

    # --- Search and assist ---

    def search(self, query: str) -> SearchOutcome | None:
        if self.search_session is None:
            logger.warning("Search requested but no resolver is configured")
            return None
        return self.search_session.submit(query)

    def go_to_result(self) -> bool:
        if self.search_session is None:
            return False
        return self.search_session.go_to_result(self.navigator)

    def explain(self, node_id: str) -> AssistReply | None:
        return self.assist.explain(node_id) if self.assist else None

    def solve(self, node_id: str) -> AssistReply | None:
        return self.assist.solve(node_id) if self.assist else None
