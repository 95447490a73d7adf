"""CPU usage measurement for a single process."""

from __future__ import annotations

import os
import threading
import time
from typing import Callable, Optional, Tuple

import psutil

TimesSource = Callable[[], Tuple[float, float]]


class CpuRateUnavailable(Exception):
    """The CPU rate of a process could not be measured."""


def _tick_ms() -> float:
    return time.monotonic() * 1000.0


def _psutil_system_times() -> Tuple[float, float]:
    times = psutil.cpu_times()
    return times.system, times.user


def _psutil_process_times(pid: int) -> Optional[TimesSource]:
    try:
        process = psutil.Process(pid)
    except (psutil.Error, OSError):
        return None

    def read() -> Tuple[float, float]:
        times = process.cpu_times()
        return times.system, times.user

    return read


class CpuUsage:
    """Share of system busy time spent by one process, in whole percent.

    ``clock`` returns milliseconds; ``system_times`` and ``process_times``
    return ``(kernel, user)`` times in any common unit.
    """

    MIN_ELAPSED_MS = 250

    def __init__(self, pid, clock=None, system_times=None, process_times=None):
        self.pid = pid
        self._clock = clock or _tick_ms
        self._system_times = system_times or _psutil_system_times
        self._process_times = (
            process_times if process_times is not None else _psutil_process_times(pid)
        )
        self._lock = threading.Lock()
        self._usage = 0
        self._last_run = 0
        self._prev_system = 0
        self._prev_process = 0

    def _is_first_run(self) -> bool:
        return self._last_run == 0

    def _enough_time_passed(self) -> bool:
        return self._clock() - self._last_run > self.MIN_ELAPSED_MS

    def system_non_idle_time(self):
        """Kernel plus user time of the whole system, or 0 if unreadable."""
        try:
            kernel, user = self._system_times()
        except (psutil.Error, OSError):
            return 0
        return kernel + user

    def process_non_idle_time(self):
        """Kernel plus user time of the process, or 0 if unreadable."""
        if self._process_times is None:
            return 0
        try:
            kernel, user = self._process_times()
        except (psutil.Error, OSError):
            return 0
        return kernel + user

    def usage(self) -> int:
        """Return the latest usage, refreshing it if enough time has passed."""
        current = self._usage
        if not self._lock.acquire(blocking=False):
            return current
        try:
            if not self._enough_time_passed():
                return current
            system_time = self.system_non_idle_time()
            process_time = self.process_non_idle_time()
            if not self._is_first_run():
                total = system_time - self._prev_system
                if total == 0:
                    return current
                self._usage = int((process_time - self._prev_process) * 100.0 / total)
                self._prev_system = system_time
                self._prev_process = process_time
            self._last_run = self._clock()
            return self._usage
        finally:
            self._lock.release()


class ProcessCpuRate:
    """CPU rate of a process relative to wall time, averaged over processors.

    ``process`` offers ``is_running()`` and ``cpu_times()`` with ``user`` and
    ``system`` fields, as :class:`psutil.Process` does.
    """

    def __init__(self, process, clock=None, processor_count=None):
        self._process = process
        self._clock = clock or time.time
        self._processors = processor_count or os.cpu_count() or 1
        self._last_system_time = 0.0
        self._last_time = 0.0
        self._normal = False
        try:
            first = self.rate()
        except CpuRateUnavailable:
            return
        self._normal = first is None

    def is_normal(self) -> bool:
        return self._normal

    def _fail(self, reason: str) -> CpuRateUnavailable:
        self._normal = False
        return CpuRateUnavailable(reason)

    def rate(self) -> Optional[float]:
        """Percent of CPU used since the last call; None on the first sample."""
        if self._process is None:
            raise self._fail("no process")
        now = self._clock()
        try:
            if not self._process.is_running():
                raise self._fail("process has exited")
            times = self._process.cpu_times()
        except (psutil.Error, OSError) as exc:
            raise self._fail(str(exc)) from exc

        system_time = (times.user + times.system) / self._processors
        if self._last_system_time == 0 or self._last_time == 0:
            self._last_system_time = system_time
            self._last_time = now
            return None

        time_delta = now - self._last_time
        if time_delta == 0:
            raise self._fail("no time elapsed")
        cpu = (system_time - self._last_system_time) * 100.0 / time_delta
        self._last_system_time = system_time
        self._last_time = now
        return cpu