"""Business problem diagnostic tree: collapse, navigation, layout and search."""

from diagnosis_map.api import ApiError, DiagnosisApi
from diagnosis_map.core.tree.loader import default_store, load_tree
from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.explorer import DiagnosisExplorer
from diagnosis_map.protocols import ApiProtocol, ResolverProtocol, SchedulerProtocol

__all__ = [
    "ApiError",
    "ApiProtocol",
    "DiagnosisApi",
    "DiagnosisExplorer",
    "ResolverProtocol",
    "SchedulerProtocol",
    "TreeStore",
    "default_store",
    "load_tree",
]
