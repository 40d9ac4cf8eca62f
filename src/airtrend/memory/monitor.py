"""
Memory budget monitor.

A periodic tick reads resident usage, classifies it against the memory
budget and forwards any non-Ok classification to the cleanup coordinator.
A second, coarser periodic sweep requests a Warn pass regardless of usage
(Emergency while the host reports the session as hidden).
"""

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional

from ..models.memory import BudgetState, MemoryBudget, MemoryUsage
from .cleanup import CleanupCoordinator
from .diagnostics import DiagnosticsSink, NullDiagnostics
from .probes import MemoryProbe, NullMemoryProbe
from .scheduler import RepeatingHandle, Scheduler

logger = logging.getLogger(__name__)

Listener = Callable[[BudgetState, Optional[MemoryUsage]], None]


class MemoryBudgetMonitor:
    """
    Classifies memory usage on a fixed interval and triggers cleanup.

    Args:
        budget: Thresholds to classify against
        coordinator: Receives cleanup requests
        scheduler: Timer source for the tick and the sweep
        probe: Usage source; a probe returning None keeps the state Ok
        interval_seconds: Tick interval
        sweep_interval_seconds: Hygiene sweep interval, None to disable
        history_limit: Number of readings kept for get_stats()
        diagnostics: Sink for state transitions
    """

    def __init__(
        self,
        budget: MemoryBudget,
        coordinator: CleanupCoordinator,
        scheduler: Scheduler,
        probe: Optional[MemoryProbe] = None,
        interval_seconds: float = 10.0,
        sweep_interval_seconds: Optional[float] = 30.0,
        history_limit: int = 60,
        diagnostics: Optional[DiagnosticsSink] = None,
    ):
        self.budget = budget
        self.coordinator = coordinator
        self.scheduler = scheduler
        self.probe = probe or NullMemoryProbe()
        self.interval_seconds = interval_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self.diagnostics = diagnostics or NullDiagnostics()

        self.state = BudgetState.OK
        self.last_usage: Optional[MemoryUsage] = None
        self.high_water_mb: Optional[float] = None
        self.hidden = False
        self.history: Deque[MemoryUsage] = deque(maxlen=history_limit)

        self._listeners: List[Listener] = []
        self._tick_handle: Optional[RepeatingHandle] = None
        self._sweep_handle: Optional[RepeatingHandle] = None

    @classmethod
    def from_config(
        cls,
        coordinator: CleanupCoordinator,
        scheduler: Scheduler,
        probe: Optional[MemoryProbe] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> "MemoryBudgetMonitor":
        """Build a monitor from the `[memory]` section of the global configuration."""
        from ..config import get_config

        memory_config = get_config().memory
        return cls(
            budget=memory_config.budget,
            coordinator=coordinator,
            scheduler=scheduler,
            probe=probe,
            interval_seconds=memory_config.monitor_interval_seconds,
            sweep_interval_seconds=memory_config.sweep_interval_seconds,
            history_limit=memory_config.history_limit,
            diagnostics=diagnostics,
        )

    @property
    def running(self) -> bool:
        return self._tick_handle is not None

    def start(self) -> None:
        """Arm the tick and sweep timers. Starting twice is a no-op."""
        if self.running:
            return
        self._tick_handle = self.scheduler.call_every(self.interval_seconds, self.tick)
        if self.sweep_interval_seconds:
            self._sweep_handle = self.scheduler.call_every(self.sweep_interval_seconds, self.sweep)
        logger.info(
            f"Memory monitor started: tick every {self.interval_seconds}s, "
            f"sweep every {self.sweep_interval_seconds}s, budget "
            f"{self.budget.warn_mb}/{self.budget.critical_mb}/{self.budget.emergency_mb}MB"
        )

    def stop(self) -> None:
        """Cancel all timers owned by the monitor and the coordinator."""
        for handle in (self._tick_handle, self._sweep_handle):
            if handle is not None:
                handle.cancel()
        self._tick_handle = None
        self._sweep_handle = None
        self.coordinator.cancel_pending()
        logger.info("Memory monitor stopped")

    def tick(self) -> BudgetState:
        """
        Take one reading, update the state and request cleanup if needed.

        Returns:
            The new budget state
        """
        usage_mb = self.probe.read_usage_mb()
        if usage_mb is None:
            usage = None
            new_state = BudgetState.OK
        else:
            new_state = self.budget.classify(usage_mb)
            usage = MemoryUsage(
                used_mb=usage_mb,
                percent_of_max=usage_mb / self.budget.hard_max_mb * 100.0,
                timestamp=self.scheduler.now(),
                state=new_state,
            )
            self.history.append(usage)
            self.last_usage = usage
            if self.high_water_mb is None or usage_mb > self.high_water_mb:
                self.high_water_mb = usage_mb

        previous = self.state
        self.state = new_state
        if new_state is not previous:
            self._log_transition(previous, new_state, usage_mb)

        if new_state is not BudgetState.OK:
            self.coordinator.request_cleanup(new_state, reason=f"usage {usage_mb:.1f}MB")

        self._notify(new_state, usage)
        return new_state

    def sweep(self) -> None:
        """Steady-state hygiene pass, escalated while hidden."""
        severity = BudgetState.EMERGENCY if self.hidden else BudgetState.WARN
        self.coordinator.request_cleanup(severity, reason="periodic sweep")

    def set_visibility(self, hidden: bool) -> None:
        """
        Report the host's visibility. Becoming hidden forces an
        Emergency-grade pass regardless of measured usage.
        """
        was_hidden = self.hidden
        self.hidden = hidden
        if hidden and not was_hidden:
            logger.info("Session hidden, forcing emergency cleanup")
            self.coordinator.request_cleanup(BudgetState.EMERGENCY, reason="session hidden")

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked after every tick with (state, usage).

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_stats(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "used_mb": self.last_usage.used_mb if self.last_usage else None,
            "percent_of_max": self.last_usage.percent_of_max if self.last_usage else None,
            "high_water_mb": self.high_water_mb,
            "history_length": len(self.history),
            "listeners": len(self._listeners),
            "hidden": self.hidden,
            "cleanup_passes": self.coordinator.pass_count,
            "cleanups_dropped": self.coordinator.dropped_count,
        }

    def _log_transition(self, previous: BudgetState, new_state: BudgetState, usage_mb: Optional[float]) -> None:
        usage_text = f"{usage_mb:.1f}MB" if usage_mb is not None else "unavailable"
        message = f"Memory state {previous.value} -> {new_state.value} (usage {usage_text})"
        if new_state is BudgetState.EMERGENCY:
            logger.error(message)
        elif new_state > previous:
            logger.warning(message)
        else:
            logger.info(message)
        self.diagnostics.record(
            "state_transition", previous=previous.value, state=new_state.value, usage_mb=usage_mb
        )

    def _notify(self, state: BudgetState, usage: Optional[MemoryUsage]) -> None:
        for listener in list(self._listeners):
            try:
                listener(state, usage)
            except Exception as e:
                logger.error(f"Memory monitor listener {listener!r} failed: {e}", exc_info=True)
