# src/currencies/application/timeline.py
"""
Timeline - Rate History Statistics

This module derives the figures shown next to a rate history chart: the
current rate, the rate it is compared with (the first day of the period,
or a day picked by scrubbing the chart), the average, the minimum and
maximum with their dates, and the change in percent.

The history itself is fetched elsewhere; this module only consumes a
date-keyed, ordered series.

Files that USE this module:
- currencies.application (exported to the timeline screen)

Files that this module USES:
- currencies.domain.models (TimelinePoint, TimelineStats)
"""
from __future__ import annotations

import calendar
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from currencies.domain.models import TimelinePoint, TimelineStats


class Period(Enum):
    """Length of history shown on the timeline."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    def start_date(self, end: date) -> date:
        """First day of the period ending at end."""
        if self is Period.WEEK:
            return end - timedelta(weeks=1)
        if self is Period.MONTH:
            return _months_back(end, 1)
        return _months_back(end, 12)


def _months_back(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class TimelineSeries:
    """Read-only, date-ordered series of rate values."""

    def __init__(self, points: Union[Mapping[date, float], Iterable[Tuple[date, float]]] = ()):
        """
        Args:
            points: Mapping or pairs of (date, value); for repeated dates
                    the later pair wins
        """
        items = points.items() if isinstance(points, Mapping) else points
        by_day: Dict[date, float] = {}
        for day, value in items:
            by_day[day] = float(value)
        self._points: Tuple[TimelinePoint, ...] = tuple(
            TimelinePoint(day=day, value=by_day[day]) for day in sorted(by_day)
        )
        self._index = {point.day: point for point in self._points}

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[TimelinePoint]:
        return iter(self._points)

    def __bool__(self) -> bool:
        return bool(self._points)

    def get(self, day: date) -> Optional[TimelinePoint]:
        return self._index.get(day)

    @property
    def first(self) -> Optional[TimelinePoint]:
        return self._points[0] if self._points else None

    @property
    def last(self) -> Optional[TimelinePoint]:
        return self._points[-1] if self._points else None

    def within(self, start: date, end: date) -> "TimelineSeries":
        """Points from start to end, both inclusive."""
        return TimelineSeries((p.day, p.value) for p in self._points if start <= p.day <= end)

    def for_period(self, period: Period, end: Optional[date] = None) -> "TimelineSeries":
        """Points of the period ending at end (default: the last point)."""
        if end is None:
            if not self._points:
                return self
            end = self._points[-1].day
        return self.within(period.start_date(end), end)


def difference_percent(past: Optional[float], current: Optional[float]) -> Optional[float]:
    """Change from past to current in percent; None if past is missing or zero."""
    if past is None or current is None or past == 0:
        return None
    return (current - past) / past * 100


def summarize(series: TimelineSeries, past_date: Optional[date] = None) -> TimelineStats:
    """
    Compute the statistics for a rate history.

    Args:
        series: Rate history ordered by date
        past_date: Day to compare the current rate with; defaults to the
                   first day of the series. A day missing from the series
                   also falls back to the first day.

    Returns:
        TimelineStats; every field is None for an empty series
    """
    if not series:
        return TimelineStats()

    current = series.last
    past = series.get(past_date) if past_date is not None else None
    if past is None:
        past = series.first

    minimum = maximum = None
    total = 0.0
    for point in series:
        total += point.value
        if minimum is None or point.value < minimum.value:
            minimum = point
        if maximum is None or point.value > maximum.value:
            maximum = point

    return TimelineStats(
        past=past,
        current=current,
        average=total / len(series),
        minimum=minimum,
        maximum=maximum,
        difference_percent=difference_percent(past.value, current.value),
    )
