"""
Memory budget enforcement.

This package keeps the process within its memory budget:
- scheduler: injectable timers (asyncio or a virtual clock)
- probes: resident memory readings via psutil
- caches: named caches exposing truncate / evict_lru / clear_all
- cleanup: severity-graded cleanup and the restart circuit breaker
- monitor: periodic classification and the hygiene sweep
"""

from .caches import ArrayCache, CacheEntry, CacheRegistry, NamedCache, SessionStore, ValueCache
from .cleanup import EXIT_RESTART_REQUESTED, CleanupCoordinator, request_process_restart
from .diagnostics import DiagnosticsSink, LoggingDiagnostics, NullDiagnostics
from .monitor import MemoryBudgetMonitor
from .probes import MemoryProbe, NullMemoryProbe, PsutilMemoryProbe
from .scheduler import AsyncioScheduler, ManualScheduler, RepeatingHandle, Scheduler, TimerHandle

__all__ = [
    "ArrayCache",
    "CacheEntry",
    "CacheRegistry",
    "NamedCache",
    "SessionStore",
    "ValueCache",
    "EXIT_RESTART_REQUESTED",
    "CleanupCoordinator",
    "request_process_restart",
    "DiagnosticsSink",
    "LoggingDiagnostics",
    "NullDiagnostics",
    "MemoryBudgetMonitor",
    "MemoryProbe",
    "NullMemoryProbe",
    "PsutilMemoryProbe",
    "AsyncioScheduler",
    "ManualScheduler",
    "RepeatingHandle",
    "Scheduler",
    "TimerHandle",
]
