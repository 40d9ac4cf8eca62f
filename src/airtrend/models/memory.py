"""
Memory budget data models.

This module contains the budget configuration objects enforced by the
cleanup coordinator, the transient budget classification produced by the
monitor, and the records describing usage readings and cleanup passes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class BudgetState(Enum):
    """
    Memory pressure classification, ordered from least to most severe.
    """

    OK = "ok"
    WARN = "warn"
    CRITICAL = "critical"
    EMERGENCY = "emergency"

    @property
    def rank(self) -> int:
        return _STATE_RANKS[self]

    def __ge__(self, other: "BudgetState") -> bool:
        if not isinstance(other, BudgetState):
            return NotImplemented
        return self.rank >= other.rank

    def __gt__(self, other: "BudgetState") -> bool:
        if not isinstance(other, BudgetState):
            return NotImplemented
        return self.rank > other.rank

    def __le__(self, other: "BudgetState") -> bool:
        if not isinstance(other, BudgetState):
            return NotImplemented
        return self.rank <= other.rank

    def __lt__(self, other: "BudgetState") -> bool:
        if not isinstance(other, BudgetState):
            return NotImplemented
        return self.rank < other.rank


_STATE_RANKS = {
    BudgetState.OK: 0,
    BudgetState.WARN: 1,
    BudgetState.CRITICAL: 2,
    BudgetState.EMERGENCY: 3,
}


@dataclass(frozen=True)
class MemoryBudget:
    """
    Process-wide megabyte thresholds, fixed at startup.

    Invariant: warn_mb < critical_mb < emergency_mb <= hard_max_mb.
    """

    warn_mb: float = 80.0
    critical_mb: float = 120.0
    emergency_mb: float = 140.0
    hard_max_mb: float = 150.0

    def __post_init__(self):
        if not (self.warn_mb < self.critical_mb < self.emergency_mb <= self.hard_max_mb):
            raise ValueError(
                "Memory budget thresholds must satisfy warn < critical < emergency <= hard_max, "
                f"got {self.warn_mb}/{self.critical_mb}/{self.emergency_mb}/{self.hard_max_mb}"
            )

    def classify(self, usage_mb: Optional[float]) -> BudgetState:
        """
        Classify a usage reading; an unavailable reading is OK.
        """
        if usage_mb is None:
            return BudgetState.OK
        if usage_mb >= self.emergency_mb:
            return BudgetState.EMERGENCY
        if usage_mb >= self.critical_mb:
            return BudgetState.CRITICAL
        if usage_mb >= self.warn_mb:
            return BudgetState.WARN
        return BudgetState.OK


@dataclass(frozen=True)
class SubsystemBudget:
    """Limits for one named cache. Either limit may be absent."""

    max_entries: Optional[int] = None
    max_array_length: Optional[int] = None


@dataclass
class MemoryUsage:
    """A single resident memory reading."""

    used_mb: float
    # Share of the hard maximum, in percent.
    percent_of_max: float
    # Scheduler clock reading when the sample was taken.
    timestamp: float
    state: BudgetState


@dataclass
class CleanupReport:
    """
    Summary of one cleanup pass, returned by the coordinator and forwarded
    to the diagnostics sink.
    """

    severity: BudgetState
    reason: str
    started_at: float
    entries_truncated: int = 0
    entries_evicted: int = 0
    caches_cleared: List[str] = field(default_factory=list)
    session_stores_cleared: int = 0
    gc_hint_issued: bool = False
    failed_caches: List[str] = field(default_factory=list)
