"""Contribution heatmap grid for devtracker.

Pure functions that lay a year of day-records out as GitHub-style week
columns. No side effects, no DB access.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from devtracker.streaks import DayRecord

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
DAY_LABELS = ("Mon", "", "Wed", "", "Fri", "", "")


@dataclass(frozen=True)
class HeatmapCell:
    date: str
    count: int
    level: int  # 0-4


@dataclass
class Heatmap:
    year: int
    weeks: list[list[HeatmapCell | None]]  # columns of 7 rows, Monday first
    month_labels: dict[int, str]  # week index -> month abbreviation

    @property
    def total(self) -> int:
        return sum(cell.count for week in self.weeks for cell in week if cell)

    @property
    def active_days(self) -> int:
        return sum(1 for week in self.weeks for cell in week if cell and cell.count > 0)


def intensity_level(count: int) -> int:
    """Map a day's log count to a color level: 0, 1, 2-3, 4-5, 6+."""
    if count <= 0:
        return 0
    if count == 1:
        return 1
    if count <= 3:
        return 2
    if count <= 5:
        return 3
    return 4


def build_heatmap(day_records: Iterable[DayRecord], year: int) -> Heatmap:
    """Build the week grid for a calendar year.

    The grid starts on the Monday on or before January 1st; days that fall
    outside the year are None placeholders.
    """
    counts = {r.date: r.log_count for r in day_records}
    start = date(year, 1, 1)
    end = date(year, 12, 31)
    grid_start = start - timedelta(days=start.weekday())

    weeks: list[list[HeatmapCell | None]] = []
    month_labels: dict[int, str] = {}
    day = grid_start
    index = 0
    while day <= end:
        week_index = index // 7
        if week_index == len(weeks):
            weeks.append([])
        if day.year == year:
            iso = day.isoformat()
            count = counts.get(iso, 0)
            weeks[week_index].append(HeatmapCell(date=iso, count=count, level=intensity_level(count)))
            if day.day == 1:
                month_labels[week_index] = MONTH_ABBR[day.month - 1]
        else:
            weeks[week_index].append(None)
        day += timedelta(days=1)
        index += 1

    # Pad the final week so every column has seven rows.
    while len(weeks[-1]) < 7:
        weeks[-1].append(None)

    return Heatmap(year=year, weeks=weeks, month_labels=month_labels)
