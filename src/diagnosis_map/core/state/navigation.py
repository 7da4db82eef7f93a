"""Reveal a node found by search and highlight it for a few seconds."""

from loguru import logger

from diagnosis_map.config import FIT_AFTER_NAVIGATE, HIGHLIGHT_DURATION_SECONDS, NAVIGATE_ZOOM_RANGE
from diagnosis_map.core.state.collapse import CollapseState, FitListener
from diagnosis_map.models.graph import FitViewRequest
from diagnosis_map.protocols import SchedulerProtocol


class Navigator:
    """Expands the path to a node and tracks the current highlight.

    Unlike a manual toggle, navigating leaves sibling branches as they are.
    """

    def __init__(
        self,
        collapse: CollapseState,
        scheduler: SchedulerProtocol,
        *,
        on_fit: FitListener | None = None,
        highlight_duration: float = HIGHLIGHT_DURATION_SECONDS,
    ) -> None:
        self.collapse = collapse
        self.scheduler = scheduler
        self.on_fit = on_fit
        self.highlight_duration = highlight_duration
        self._highlighted: str | None = None
        self._generation = 0

    @property
    def highlighted(self) -> str | None:
        return self._highlighted

    def navigate_to(self, node_id: str) -> bool:
        """Expand every ancestor of node_id, highlight it and request a refit.

        Returns:
            False (and does nothing) when the node does not exist.
        """
        store = self.collapse.store
        if node_id not in store:
            logger.debug("Navigate ignored for unknown node {}", node_id)
            return False

        ancestors = store.ancestor_ids(node_id)
        self.collapse.expand(ancestors)

        self._generation += 1
        generation = self._generation
        self._highlighted = node_id
        self.scheduler.call_later(
            self.highlight_duration, lambda: self._clear_highlight(generation)
        )
        logger.debug("Navigated to {} ({} ancestors expanded)", node_id, len(ancestors))

        if self.on_fit is not None:
            padding, duration_ms, delay_ms = FIT_AFTER_NAVIGATE
            min_zoom, max_zoom = NAVIGATE_ZOOM_RANGE
            self.on_fit(
                FitViewRequest(
                    padding=padding,
                    duration_ms=duration_ms,
                    delay_ms=delay_ms,
                    node_ids=(node_id,),
                    min_zoom=min_zoom,
                    max_zoom=max_zoom,
                )
            )
        return True

    def _clear_highlight(self, generation: int) -> None:
        # A newer navigation owns the highlight now.
        if generation != self._generation:
            return
        self._highlighted = None
