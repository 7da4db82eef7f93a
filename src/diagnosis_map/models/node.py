"""Domain models for the diagnostic tree."""

from dataclasses import dataclass, field

_SEVERITY_BY_LEVEL = {
    1: "Critical",
    2: "Major",
    3: "Moderate",
    4: "Minor",
    5: "Specific",
}


def severity_for_level(level: int) -> str:
    """Map a node level to its presentational severity name."""
    return _SEVERITY_BY_LEVEL[min(max(level, 1), 5)]


@dataclass(frozen=True)
class DiagnosisNode:
    """A business problem or sub-cause in the static diagnostic tree."""

    id: str
    label: str
    level: int
    children: tuple["DiagnosisNode", ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass(frozen=True)
class FlatNode:
    """A tree node annotated with its position, as produced by flattening."""

    id: str
    label: str
    level: int
    parent_id: str | None
    depth: int
    sort_order: int
    child_ids: tuple[str, ...] = field(default=())

    @property
    def child_count(self) -> int:
        return len(self.child_ids)

    @property
    def severity(self) -> str:
        return severity_for_level(self.level)


@dataclass(frozen=True)
class NodeContext:
    """A node with its surrounding context."""

    node: FlatNode
    breadcrumbs: tuple[FlatNode, ...]
    children: tuple[FlatNode, ...]
    siblings_before: tuple[FlatNode, ...]
    siblings_after: tuple[FlatNode, ...]
