"""Data models for locale trees, snapshots and analysis results."""

from .locale_tree import Leaf, Branch, Opaque, Node, from_json, to_json
from .key_path import get_value, set_value, delete_value, iter_keys
from .snapshot import LocaleSnapshot
from .analysis_result import AnalysisOutcome, AnalysisResult

__all__ = [
    "Leaf",
    "Branch",
    "Opaque",
    "Node",
    "from_json",
    "to_json",
    "get_value",
    "set_value",
    "delete_value",
    "iter_keys",
    "LocaleSnapshot",
    "AnalysisOutcome",
    "AnalysisResult",
]
