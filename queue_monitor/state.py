from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .models import StatsSnapshot

VIEWS = ("dashboard", "jobs", "chains", "groups")


@dataclass
class JobsSelection:
    status: str = ""
    queue: str = ""
    page_index: int = 0


@dataclass
class AppState:
    """What the user is currently looking at.

    Each view hands out increasing request sequence numbers; a response is only
    applied while its number is still the latest one issued for that view.
    """

    current_view: str = "dashboard"
    jobs: JobsSelection = field(default_factory=JobsSelection)
    stats: Optional[StatsSnapshot] = None
    _sequences: Dict[str, int] = field(default_factory=dict)

    def switch_view(self, view: str) -> None:
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view}")
        self.current_view = view

    def begin(self, view: str) -> int:
        seq = self._sequences.get(view, 0) + 1
        self._sequences[view] = seq
        return seq

    def is_current(self, view: str, seq: int) -> bool:
        return self._sequences.get(view, 0) == seq
