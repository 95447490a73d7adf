"""Periodic sampling of a watched process into one chart per resource."""

from __future__ import annotations

import argparse
import sys
import time
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from resrecorder.chart import ChartSeries, ChartType, TimeUnit
from resrecorder.config import (
    ProcessTable,
    RecorderConfig,
    ResourceType,
    SampleUnit,
)
from resrecorder.cpu_usage import CpuRateUnavailable
from resrecorder.process_stats import ProcessResourceStatistics
from resrecorder.tips import ButtonType, Tip

FIRST_SAMPLE_DELAY_MS = 1000
_TITLE_LIMIT = 63

SELECT_PROCESS = "请先选择一个要监视的进程"
SELECT_RESOURCE = "请至少选择一个要监视的资源"
PROCESS_ENDED = "进程已终止"

# Order in which the charts are created and laid out.
_CHARTS = (
    (ResourceType.CPU, "cpu", "Cpu usage percentage"),
    (ResourceType.MEM, "memory", "Unit:MB"),
    (ResourceType.HANDLE, "handle", "Number of handles"),
    (ResourceType.THREAD, "thread", "Number of thread"),
    (ResourceType.IO, "I/O", "Unit:MB"),
    (ResourceType.NONPAGED, "Nonpaged", "Unit:MB"),
)

_RESOURCE_NAMES = {
    "mem": ResourceType.MEM,
    "cpu": ResourceType.CPU,
    "handle": ResourceType.HANDLE,
    "thread": ResourceType.THREAD,
    "io": ResourceType.IO,
    "nonpaged": ResourceType.NONPAGED,
}


class RecorderError(Exception):
    """Recording cannot start or go on; ``tip`` is what the user is shown."""

    def __init__(self, message: str):
        super().__init__(message)
        self.tip = Tip(message, ButtonType.ONLY_OK)


def layout_grid(
    count: int, width: int, height: int
) -> Tuple[List[Tuple[int, int]], Tuple[int, int]]:
    """Place ``count`` charts two to a row.

    Returns the top-left corner of each chart and the size of the whole grid.
    """
    positions = [(width * (i % 2), height * (i // 2)) for i in range(count)]
    total_width = width * 2 if count > 1 else width
    rows = count // 2 + 1 if count % 2 else count // 2
    return positions, (total_width, rows * height)


def synthetic_values() -> Iterator[float]:
    """Stand-in figures for resources that have no real measurement."""
    count = 0
    while True:
        yield count * 1.6 if count % 5 == 0 else count * 1.15
        count += 1


class Recorder:
    """Samples the resources chosen in a config into chart series."""

    def __init__(self, config: RecorderConfig, stats=None):
        self.config = config
        self.stats = stats
        self.charts: Dict[ResourceType, ChartSeries] = {}
        self.cells: List[Tuple[int, int]] = []
        self.grid_size: Tuple[int, int] = (0, 0)
        self.interval_ms = 0
        self.first_delay_ms = FIRST_SAMPLE_DELAY_MS
        self.running = False
        self._synthetic = synthetic_values()

    def start(self) -> None:
        """Check the config, open the process and create the charts."""
        if self.running:
            raise RecorderError("recorder is already running")
        config = self.config
        if config.pid <= 0:
            raise RecorderError(SELECT_PROCESS)
        if not config.resources:
            raise RecorderError(SELECT_RESOURCE)
        if self.stats is None:
            self.stats = ProcessResourceStatistics(config.pid)

        unit = TimeUnit.SECOND if config.sample_unit is SampleUnit.SECOND else TimeUnit.MINUTE
        self.charts = {}
        for resource, what, label in _CHARTS:
            if resource in ResourceType(config.resources):
                title = f"{config.name}-{config.pid} {what} usage recoder"[:_TITLE_LIMIT]
                self.charts[resource] = ChartSeries(
                    title, label, unit, config.sample_rate, ChartType.LINE
                )
        self.cells, self.grid_size = layout_grid(len(self.charts), 1, 1)
        self.interval_ms = config.interval_ms()
        self.running = True

    def _read(self, resource: ResourceType, synthetic: float) -> float:
        if resource is ResourceType.CPU:
            try:
                return float(self.stats.cpu())
            except CpuRateUnavailable:
                return -1.0
        if resource is ResourceType.MEM:
            return float(self.stats.memory_mb())
        if resource is ResourceType.HANDLE:
            return float(self.stats.handle_count())
        return synthetic

    def sample(self) -> Dict[ResourceType, float]:
        """Take one sample of every chart and return the values added."""
        if not self.running:
            raise RecorderError("recorder is not running")
        synthetic = next(self._synthetic)
        if not self.stats.is_running():
            self.stop()
            raise RecorderError(PROCESS_ENDED)
        now = datetime.now()
        values: Dict[ResourceType, float] = {}
        for resource, chart in self.charts.items():
            value = self._read(resource, synthetic)
            chart.add(value, now)
            values[resource] = value
        return values

    def stop(self) -> None:
        """Stop sampling; the charts keep what they have recorded."""
        self.running = False


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="resrecorder", description="Record the resource usage of a process."
    )
    parser.add_argument("--pid", type=int, help="process to watch; list processes if omitted")
    parser.add_argument("--name", default="", help="name shown in chart titles")
    parser.add_argument(
        "--resource",
        action="append",
        choices=sorted(_RESOURCE_NAMES),
        default=[],
        help="resource to watch, may be repeated",
    )
    parser.add_argument("--rate", type=int, default=10, help="sampling interval")
    parser.add_argument("--unit", choices=("second", "minute"), default="minute")
    parser.add_argument("--samples", type=int, default=None, help="stop after this many")
    return parser.parse_args(argv)


def _format(values: Dict[ResourceType, float]) -> str:
    stamp = datetime.now().strftime("%H:%M:%S")
    fields = " ".join(f"{resource.name.lower()}={value:.2f}" for resource, value in values.items())
    return f"{stamp} {fields}"


def main(argv=None) -> int:
    args = _parse_args(argv)
    if args.pid is None:
        for entry in ProcessTable().rows():
            print(f"{entry.pid}\t{entry.name}\t{entry.path}")
        return 0

    resources = ResourceType(0)
    for name in args.resource:
        resources |= _RESOURCE_NAMES[name]
    config = RecorderConfig(
        pid=args.pid,
        name=args.name,
        resources=resources,
        sample_rate=args.rate,
        sample_unit=SampleUnit.SECOND if args.unit == "second" else SampleUnit.MINUTE,
    )
    recorder = Recorder(config)
    try:
        recorder.start()
    except RecorderError as exc:
        print(exc, file=sys.stderr)
        return 1

    taken = 0
    delay = recorder.first_delay_ms
    try:
        while args.samples is None or taken < args.samples:
            time.sleep(delay / 1000.0)
            try:
                values = recorder.sample()
            except RecorderError as exc:
                print(exc, file=sys.stderr)
                return 1
            print(_format(values))
            taken += 1
            delay = recorder.interval_ms
    except KeyboardInterrupt:
        pass
    finally:
        recorder.stop()
        if recorder.stats is not None:
            recorder.stats.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())