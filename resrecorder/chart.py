"""Time series of one resource with a growing time axis."""

from __future__ import annotations

import enum
from datetime import datetime, timedelta
from typing import List, Optional, Tuple


class TimeUnit(enum.Enum):
    MINUTE = 0
    SECOND = 1


class ChartType(enum.Enum):
    POINT = 0
    LINE = 1
    SURFACE = 2
    BAR = 3
    CANDLESTICK = 4
    GANTT = 5


_GROW_THRESHOLD = 0.9
_GROW_FACTOR = 1.2
_TICKS_PER_SPAN = 10


class ChartSeries:
    """Points over time, with axis limits that widen as data arrives."""

    def __init__(
        self,
        title,
        axis_label,
        unit=TimeUnit.MINUTE,
        interval_count=1,
        chart_type=ChartType.LINE,
        start=None,
    ):
        self.title = title
        self.axis_label = axis_label
        self.unit = unit
        self.interval_count = interval_count
        self.chart_type = chart_type
        self.x_min: datetime = start if start is not None else datetime.now()
        self.y_min = 0.0
        self.y_max = 0.0
        self._points: List[Tuple[datetime, float]] = []

        if unit is TimeUnit.SECOND:
            self.span = timedelta(seconds=interval_count * _TICKS_PER_SPAN)
            self.tick_label_format = "%H:%M"
        else:
            self.span = timedelta(minutes=interval_count * _TICKS_PER_SPAN)
            self.tick_label_format = "%D-%H"
        self._tick: Tuple[TimeUnit, float] = (unit, interval_count)
        self.x_max = self.x_min + self.span

    def tick_increment(self) -> Tuple[TimeUnit, float]:
        """The unit and count between ticks on the time axis."""
        return self._tick

    def points(self) -> List[Tuple[datetime, float]]:
        return list(self._points)

    def add(self, value, when: Optional[datetime] = None) -> None:
        """Record a value, widening the axes if it lies near their edge."""
        when = when if when is not None else datetime.now()
        elapsed = (when - self.x_min).total_seconds()
        span_seconds = self.span.total_seconds()
        if elapsed > span_seconds * _GROW_THRESHOLD:
            self.span = timedelta(seconds=int(span_seconds * _GROW_FACTOR))
            self.x_max = self.x_min + self.span
            self._tick = (self.unit, self.span.total_seconds() / _TICKS_PER_SPAN)

        if value >= self.y_max:
            self.y_max = value * _GROW_FACTOR

        self._points.append((when, value))