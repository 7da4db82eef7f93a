"""Tests for search-result navigation and the timed highlight."""

from diagnosis_map.core.state.collapse import CollapseState
from diagnosis_map.core.state.navigation import Navigator
from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.graph import FitViewRequest
from tests.unit.fakes import FakeScheduler


def test_navigate_reveals_path_and_highlights(store: TreeStore, scheduler: FakeScheduler) -> None:
    state = CollapseState(store)
    nav = Navigator(state, scheduler)
    assert nav.navigate_to("a1x") is True
    assert {"root", "a", "a1", "a1x"} <= state.visible_set()
    assert nav.highlighted == "a1x"


def test_navigate_keeps_open_siblings(store: TreeStore, scheduler: FakeScheduler) -> None:
    state = CollapseState(store)
    state.toggle("b")
    Navigator(state, scheduler).navigate_to("a2")
    assert {"b1", "a2"} <= state.visible_set()


def test_navigate_does_not_expand_target(store: TreeStore, scheduler: FakeScheduler) -> None:
    state = CollapseState(store)
    Navigator(state, scheduler).navigate_to("a1")
    assert state.is_collapsed("a1")
    assert "a1x" not in state.visible_set()


def test_highlight_clears_when_timer_fires(store: TreeStore, scheduler: FakeScheduler) -> None:
    nav = Navigator(CollapseState(store), scheduler)
    nav.navigate_to("b1")
    assert [delay for delay, _ in scheduler.timers] == [3.0]
    scheduler.fire_all()
    assert nav.highlighted is None


def test_stale_timer_keeps_newer_highlight(store: TreeStore, scheduler: FakeScheduler) -> None:
    nav = Navigator(CollapseState(store), scheduler)
    nav.navigate_to("b1")
    _, first_timer = scheduler.timers[0]
    nav.navigate_to("a2")

    first_timer()
    assert nav.highlighted == "a2"

    scheduler.fire_all()
    assert nav.highlighted is None


def test_navigate_unknown_node_is_noop(store: TreeStore, scheduler: FakeScheduler) -> None:
    fits: list[FitViewRequest] = []
    state = CollapseState(store)
    nav = Navigator(state, scheduler, on_fit=fits.append)
    assert nav.navigate_to("missing") is False
    assert nav.highlighted is None
    assert scheduler.timers == []
    assert fits == []
    assert state.visible_set() == {"root", "a", "b", "c"}


def test_navigate_requests_focused_refit(store: TreeStore, scheduler: FakeScheduler) -> None:
    fits: list[FitViewRequest] = []
    Navigator(CollapseState(store), scheduler, on_fit=fits.append).navigate_to("a2")
    assert fits == [
        FitViewRequest(
            padding=0.5,
            duration_ms=800,
            delay_ms=100,
            node_ids=("a2",),
            min_zoom=0.5,
            max_zoom=1.2,
        )
    ]
