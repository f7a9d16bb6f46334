# miroku/domain/dataclasses/reports.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Base report (shared fields + utilities)
# ---------------------------------------------------------------------------
@dataclass
class BaseReport:
    """Common report base:
    - timing: started_at / finished_at
    - error capture: error_details
    - helpers: start(), stop(), add_error(), as_dict()
    """
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    # Each tuple is (subject, message)
    error_details: List[Tuple[str, str]] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is None:
            self.started_at = datetime.now()

    def stop(self) -> None:
        self.finished_at = datetime.now()

    def add_error(self, subject: str, message: str) -> None:
        self.error_details.append((subject, message))

    @property
    def ok(self) -> bool:
        return not self.error_details

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Single-movie refresh apply
# ---------------------------------------------------------------------------
@dataclass
class RefreshApplyReport(BaseReport):
    applied: List[str] = field(default_factory=list)   # field names written
    failed: List[str] = field(default_factory=list)    # field names rolled back
    persons_created: int = 0
    persons_renamed: int = 0
    credits_linked: int = 0


# ---------------------------------------------------------------------------
# Bulk "refresh all movies"
# ---------------------------------------------------------------------------
@dataclass
class BulkRefreshReport(BaseReport):
    total: int = 0
    refreshed: int = 0

    @property
    def errors(self) -> List[Tuple[str, str]]:
        return self.error_details

    def as_dict(self) -> Dict[str, Any]:
        out = super().as_dict()
        out["errors"] = [f"{subject}: {message}" for subject, message in self.error_details]
        return out


# ---------------------------------------------------------------------------
# Duplicate-person cleanup
# ---------------------------------------------------------------------------
@dataclass
class DedupeReport(BaseReport):
    groups: int = 0           # external ids with more than one active person
    merged: int = 0           # duplicate persons tombstoned
    deleted_links: int = 0    # colliding credits removed
    relinked: int = 0         # credits moved onto the primary

