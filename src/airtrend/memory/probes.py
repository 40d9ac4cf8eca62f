"""
Resident memory introspection.

This module provides the probes the budget monitor reads on every tick.
A probe returns the current usage in megabytes, or None when the runtime
cannot report it; callers treat None as "nothing to act on".
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import psutil

logger = logging.getLogger(__name__)

MB = 1024 * 1024


class MemoryProbe(ABC):
    """
    Abstract base class for memory usage probes.
    """

    @abstractmethod
    def read_usage_mb(self) -> Optional[float]:
        """
        Returns the current resident usage in MB, or None if unavailable.
        """
        pass


class NullMemoryProbe(MemoryProbe):
    """Probe for runtimes without usage introspection."""

    def read_usage_mb(self) -> Optional[float]:
        return None


class PsutilMemoryProbe(MemoryProbe):
    """
    Reads the resident set size of a process using psutil.

    Attributes:
        pid: The monitored process ID (defaults to the current process).
    """

    def __init__(self, pid: Optional[int] = None):
        self.pid = pid if pid is not None else os.getpid()
        self._process: Optional[psutil.Process] = None
        self._unavailable_logged = False

    def _get_process(self) -> psutil.Process:
        if self._process is None:
            self._process = psutil.Process(self.pid)
        return self._process

    def read_usage_mb(self) -> Optional[float]:
        try:
            rss = self._get_process().memory_info().rss
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as e:
            # Report once; the monitor keeps classifying as OK meanwhile.
            if not self._unavailable_logged:
                logger.warning(f"Memory usage for PID {self.pid} unavailable: {e}")
                self._unavailable_logged = True
            self._process = None
            return None

        self._unavailable_logged = False
        return rss / MB
