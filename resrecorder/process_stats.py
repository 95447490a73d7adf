"""Resource figures for one watched process."""

from __future__ import annotations

from typing import Optional

import psutil

from resrecorder.cpu_usage import ProcessCpuRate

_MB = 1024.0 * 1024.0


class ProcessResourceStatistics:
    """Reads CPU, memory, handle and thread figures of a process.

    Every figure is 0 once the process is gone or could not be opened.
    """

    def __init__(self, pid):
        self.pid = pid
        self._process: Optional[psutil.Process]
        try:
            self._process = psutil.Process(pid)
        except (psutil.Error, OSError, ValueError):
            self._process = None
        self._cpu = ProcessCpuRate(self._process) if self._process is not None else None

    def is_running(self) -> bool:
        """True while the process lives; releases it once it has exited."""
        if self._process is None:
            return False
        try:
            running = self._process.is_running() and (
                self._process.status() != psutil.STATUS_ZOMBIE
            )
        except (psutil.Error, OSError):
            running = False
        if not running:
            self.close()
        return running

    def cpu(self) -> float:
        """CPU usage in percent since the previous call.

        Raises :class:`~resrecorder.cpu_usage.CpuRateUnavailable` when the
        rate cannot be measured.
        """
        if self._process is None or self._cpu is None or not self._cpu.is_normal():
            return 0.0
        rate = self._cpu.rate()
        return 0.0 if rate is None else rate

    def memory_mb(self) -> float:
        """Working set size in megabytes."""
        if self._process is None:
            return 0.0
        try:
            return self._process.memory_info().rss / _MB
        except (psutil.Error, OSError):
            return 0.0

    def handle_count(self) -> int:
        """Open handles, or open file descriptors where there are no handles."""
        if self._process is None:
            return 0
        try:
            if hasattr(self._process, "num_handles"):
                return self._process.num_handles()
            return self._process.num_fds()
        except (psutil.Error, OSError):
            return 0

    def thread_count(self) -> int:
        if self._process is None:
            return 0
        try:
            return self._process.num_threads()
        except (psutil.Error, OSError):
            return 0

    def close(self) -> None:
        """Stop watching the process."""
        self._process = None
        self._cpu = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()