"""
Cleanup coordinator for memory budget enforcement.

The coordinator turns a budget severity into concrete eviction actions on
the registered caches:

- Warn: truncate oversized arrays to their budget (keeping the newest
  items) and evict least-recently-updated entries above the entry limit.
- Critical: the Warn actions, then clear every cache and session store
  and issue a garbage collection hint.
- Emergency: the Critical actions, then re-measure after a short delay
  and request a process restart if usage is still at or above the
  emergency threshold.

Warn-triggered passes are throttled; a Warn request arriving within the
throttle interval of the previous pass is dropped rather than queued.
"""

import gc
import logging
from typing import Callable, Iterable, Optional

from ..models.memory import BudgetState, CleanupReport, MemoryBudget
from ..validation import ErrorSeverity, handle_error
from .caches import CacheRegistry, SessionStore
from .diagnostics import DiagnosticsSink, NullDiagnostics
from .probes import MemoryProbe, NullMemoryProbe
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

# Exit status asking a supervisor to restart the process.
EXIT_RESTART_REQUESTED = 75


def request_process_restart() -> None:
    """Default restart handler: exit with EXIT_RESTART_REQUESTED."""
    logger.critical(
        f"Memory pressure persists after emergency cleanup, exiting with status "
        f"{EXIT_RESTART_REQUESTED} to request a restart"
    )
    raise SystemExit(EXIT_RESTART_REQUESTED)


class CleanupCoordinator:
    """
    Applies severity-graded cleanup to a cache registry.

    Args:
        registry: Caches and their budgets
        budget: Process-wide thresholds, used by the emergency re-check
        scheduler: Clock and timer source
        probe: Memory probe for the emergency re-check
        session_stores: Transient stores wiped on Critical and above
        throttle_seconds: Minimum interval between Warn-triggered passes
        recheck_seconds: Delay before the emergency re-measurement
        restart_handler: Called when emergency pressure persists
        gc_hint: Best-effort garbage collection hook, or None if unavailable
        diagnostics: Sink receiving one event per pass
    """

    def __init__(
        self,
        registry: CacheRegistry,
        budget: MemoryBudget,
        scheduler: Scheduler,
        probe: Optional[MemoryProbe] = None,
        session_stores: Iterable[SessionStore] = (),
        throttle_seconds: float = 5.0,
        recheck_seconds: float = 1.0,
        restart_handler: Optional[Callable[[], None]] = None,
        gc_hint: Optional[Callable[[], object]] = gc.collect,
        diagnostics: Optional[DiagnosticsSink] = None,
    ):
        self.registry = registry
        self.budget = budget
        self.scheduler = scheduler
        self.probe = probe or NullMemoryProbe()
        self.session_stores = list(session_stores)
        self.throttle_seconds = throttle_seconds
        self.recheck_seconds = recheck_seconds
        self.restart_handler = restart_handler or request_process_restart
        self.gc_hint = gc_hint
        self.diagnostics = diagnostics or NullDiagnostics()

        self.pass_count = 0
        self.dropped_count = 0
        self.last_cleanup_at: Optional[float] = None
        self.last_report: Optional[CleanupReport] = None
        self._recheck_handle: Optional[TimerHandle] = None

    @property
    def recheck_pending(self) -> bool:
        return self._recheck_handle is not None and not self._recheck_handle.cancelled

    def request_cleanup(self, severity: BudgetState, reason: str = "") -> Optional[CleanupReport]:
        """
        Run a cleanup pass unless it is unnecessary or throttled.

        Ok requests do nothing. Warn requests within the throttle interval
        of the previous pass are dropped. Critical and Emergency requests
        always run.

        Returns:
            The CleanupReport of the pass, or None if nothing ran
        """
        if severity is BudgetState.OK:
            return None

        if severity is BudgetState.WARN and self.last_cleanup_at is not None:
            elapsed = self.scheduler.now() - self.last_cleanup_at
            if elapsed < self.throttle_seconds:
                self.dropped_count += 1
                logger.debug(
                    f"Dropped throttled warn cleanup ({reason}): last pass {elapsed:.1f}s ago"
                )
                self.diagnostics.record("cleanup_throttled", reason=reason, elapsed=elapsed)
                return None

        return self.cleanup(severity, reason)

    def cleanup(self, severity: BudgetState, reason: str = "") -> CleanupReport:
        """
        Run a cleanup pass at the given severity, bypassing the throttle.

        An Ok pass is empty: it neither counts as a pass nor stamps the
        throttle clock.
        """
        started_at = self.scheduler.now()
        report = CleanupReport(severity=severity, reason=reason, started_at=started_at)
        if severity is BudgetState.OK:
            return report

        self.last_cleanup_at = started_at
        self.pass_count += 1

        self._apply_budgets(report)

        if severity >= BudgetState.CRITICAL:
            self._clear_everything(report)

        if severity is BudgetState.EMERGENCY:
            self._schedule_recheck()

        level = logging.INFO if severity is BudgetState.WARN else logging.WARNING
        logger.log(
            level,
            f"Cleanup pass #{self.pass_count} ({severity.value}, {reason or 'no reason given'}): "
            f"{report.entries_truncated} truncated, {report.entries_evicted} evicted, "
            f"{len(report.caches_cleared)} caches cleared",
        )
        self.diagnostics.record(
            "cleanup",
            severity=severity.value,
            reason=reason,
            truncated=report.entries_truncated,
            evicted=report.entries_evicted,
            cleared=",".join(report.caches_cleared),
            failed=",".join(report.failed_caches),
        )
        self.last_report = report
        return report

    def _apply_budgets(self, report: CleanupReport) -> None:
        for cache, subsystem in self.registry.items():
            try:
                if subsystem.max_array_length is not None:
                    report.entries_truncated += cache.truncate(subsystem.max_array_length)
                if subsystem.max_entries is not None:
                    report.entries_evicted += cache.evict_lru(subsystem.max_entries)
            except Exception as e:
                handle_error(
                    e,
                    f"applying budget to cache '{cache.name}'",
                    severity=ErrorSeverity.ERROR,
                    reraise=False,
                    logger=logger,
                )
                report.failed_caches.append(cache.name)

    def _clear_everything(self, report: CleanupReport) -> None:
        for cache, _ in self.registry.items():
            try:
                cache.clear_all()
            except Exception as e:
                handle_error(
                    e,
                    f"clearing cache '{cache.name}'",
                    severity=ErrorSeverity.ERROR,
                    reraise=False,
                    logger=logger,
                )
                if cache.name not in report.failed_caches:
                    report.failed_caches.append(cache.name)
                continue
            report.caches_cleared.append(cache.name)

        for store in self.session_stores:
            store.clear()
            report.session_stores_cleared += 1

        if self.gc_hint is not None:
            self.gc_hint()
            report.gc_hint_issued = True

    def _schedule_recheck(self) -> None:
        if self.recheck_pending:
            return
        self._recheck_handle = self.scheduler.call_later(self.recheck_seconds, self._verify_relief)

    def _verify_relief(self) -> None:
        self._recheck_handle = None
        usage_mb = self.probe.read_usage_mb()
        if usage_mb is None:
            logger.info("Memory usage unavailable after emergency cleanup, skipping re-check")
            return

        if self.budget.classify(usage_mb) is BudgetState.EMERGENCY:
            logger.error(
                f"Memory usage {usage_mb:.1f}MB still at or above emergency threshold "
                f"{self.budget.emergency_mb}MB after cleanup"
            )
            self.diagnostics.record("restart_requested", usage_mb=usage_mb)
            self.restart_handler()
            return

        logger.info(f"Emergency cleanup relieved pressure: usage now {usage_mb:.1f}MB")

    def cancel_pending(self) -> None:
        """Cancel a scheduled emergency re-check, if any."""
        if self._recheck_handle is not None:
            self._recheck_handle.cancel()
            self._recheck_handle = None
