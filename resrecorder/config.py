"""Recorder settings and the table of processes to choose from."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List, Optional

import psutil

NAME_COLUMN = 0
PID_COLUMN = 1
PATH_COLUMN = 2

_SORT_ICONS = {
    (NAME_COLUMN, True): "AZ",
    (NAME_COLUMN, False): "ZA",
    (PID_COLUMN, True): "19",
    (PID_COLUMN, False): "91",
}


class ResourceType(enum.IntFlag):
    """Resources that can be watched; combine them with ``|``."""

    MEM = 0x1
    CPU = 0x2
    HANDLE = 0x4
    THREAD = 0x8
    IO = 0x10
    NONPAGED = 0x20


class SampleUnit(enum.Enum):
    """Unit of the sampling interval."""

    SECOND = 0
    MINUTE = 1

    @property
    def seconds(self) -> int:
        return 1 if self is SampleUnit.SECOND else 60


@dataclass
class RecorderConfig:
    """What to watch, and how often to sample it."""

    pid: int = -1
    name: str = ""
    resources: ResourceType = ResourceType(0)
    sample_rate: int = 10
    sample_unit: SampleUnit = SampleUnit.MINUTE
    save: bool = False

    def interval_ms(self) -> int:
        """Milliseconds between two samples."""
        return 1000 * self.sample_rate * self.sample_unit.seconds


@dataclass(frozen=True)
class ProcessEntry:
    """One row of the process table."""

    name: str
    pid: int
    path: str = ""


def sort_processes(
    entries: Iterable[ProcessEntry], column: int, ascending: bool = True
) -> List[ProcessEntry]:
    """Sort rows by a column.

    Names compare case-insensitively, PIDs numerically; the path column
    has no ordering and leaves the rows as they are.
    """
    rows = list(entries)
    if column == NAME_COLUMN:
        return sorted(rows, key=lambda entry: entry.name.upper(), reverse=not ascending)
    if column == PID_COLUMN:
        return sorted(rows, key=lambda entry: entry.pid, reverse=not ascending)
    if column == PATH_COLUMN:
        return rows
    raise ValueError(f"no such column: {column}")


def list_processes() -> List[ProcessEntry]:
    """Running processes whose name and executable path can be read, by name."""
    entries = []
    for process in psutil.process_iter(["pid", "name", "exe"]):
        info = process.info
        name = info.get("name")
        path = info.get("exe")
        if not name or not path:
            continue
        entries.append(ProcessEntry(name=name, pid=info["pid"], path=path))
    return sort_processes(entries, NAME_COLUMN, ascending=True)


class ProcessTable:
    """Process rows kept sorted by the column last clicked."""

    def __init__(self, entries: Optional[Iterable[ProcessEntry]] = None):
        self._rows = list(entries) if entries is not None else list_processes()
        self.column = NAME_COLUMN
        self.ascending = True
        self._rows = sort_processes(self._rows, self.column, self.ascending)

    @property
    def sort_icon(self) -> str:
        """Name of the icon shown on the sorted column's header."""
        return _SORT_ICONS[(self.column, self.ascending)]

    def click_column(self, column: int) -> None:
        """Sort by a column; a second click on the same column reverses it."""
        if column == PATH_COLUMN:
            return
        if column not in (NAME_COLUMN, PID_COLUMN):
            raise ValueError(f"no such column: {column}")
        if column != self.column:
            self.column = column
            self.ascending = True
        else:
            self.ascending = not self.ascending
        self._rows = sort_processes(self._rows, self.column, self.ascending)

    def rows(self) -> List[ProcessEntry]:
        return list(self._rows)