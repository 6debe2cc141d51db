"""Data models for usage analysis results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .snapshot import LocaleSnapshot


class AnalysisOutcome(str, Enum):
    """Terminal outcome of an analysis run."""

    COMPLETED = "completed"
    NO_LOCALE_FILES = "no_locale_files"
    NO_KEYS = "no_keys"
    CANCELLED = "cancelled"


@dataclass
class AnalysisResult:
    """Result of scanning a project for unused keys."""

    outcome: AnalysisOutcome
    total_keys: int = 0
    unused_keys: List[str] = field(default_factory=list)
    scanned_file_count: int = 0
    candidate_file_count: int = 0
    snapshot: Optional[LocaleSnapshot] = None

    @property
    def completed(self) -> bool:
        return self.outcome == AnalysisOutcome.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.outcome == AnalysisOutcome.CANCELLED

    @property
    def used_count(self) -> int:
        return self.total_keys - len(self.unused_keys)

    def to_dict(self) -> dict:
        """Serializable summary, without the snapshot."""
        return {
            "outcome": self.outcome.value,
            "total_keys": self.total_keys,
            "unused_keys": list(self.unused_keys),
            "scanned_file_count": self.scanned_file_count,
            "candidate_file_count": self.candidate_file_count,
        }
