"""Search panel state: one query in flight at a time, last outcome kept."""

from loguru import logger

from diagnosis_map.config import SEARCH_CLEAR_DELAY_SECONDS
from diagnosis_map.core.state.navigation import Navigator
from diagnosis_map.models.search import SearchMatch, SearchOutcome
from diagnosis_map.protocols import ResolverProtocol, SchedulerProtocol


class SearchSession:
    """Serialises searches and holds the result until cleared."""

    def __init__(self, resolver: ResolverProtocol, scheduler: SchedulerProtocol) -> None:
        self.resolver = resolver
        self.scheduler = scheduler
        self.query = ""
        self.is_loading = False
        self.outcome: SearchOutcome | None = None
        self._generation = 0

    @property
    def match(self) -> SearchMatch | None:
        return self.outcome if isinstance(self.outcome, SearchMatch) else None

    @property
    def message(self) -> str | None:
        """Text for the result/error bubble, if one is showing."""
        return self.outcome.message if self.outcome is not None else None

    @property
    def can_submit(self) -> bool:
        return not self.is_loading and bool(self.query.strip())

    def submit(self, query: str | None = None) -> SearchOutcome | None:
        """Run a search for query (or the current query).

        Returns None without dispatching when the query is blank or a search
        is already in flight.
        """
        if query is not None:
            self.query = query
        if not self.can_submit:
            logger.debug(
                "Search not submitted (loading={}, query={!r})", self.is_loading, self.query
            )
            return None

        self._generation += 1
        self.is_loading = True
        self.outcome = None
        try:
            self.outcome = self.resolver.search(self.query)
        finally:
            self.is_loading = False
        return self.outcome

    def clear(self) -> None:
        self.query = ""
        self.outcome = None

    def go_to_result(self, navigator: Navigator) -> bool:
        """Navigate to the current match, then reset the panel shortly after."""
        match = self.match
        if match is None:
            return False
        navigated = navigator.navigate_to(match.node_id)
        generation = self._generation
        self.scheduler.call_later(
            SEARCH_CLEAR_DELAY_SECONDS, lambda: self._clear_if_current(generation)
        )
        return navigated

    def _clear_if_current(self, generation: int) -> None:
        # A newer search owns the panel now.
        if generation != self._generation:
            return
        self.clear()
