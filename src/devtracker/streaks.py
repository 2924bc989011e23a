"""Streak and freeze computation for devtracker.

Pure functions only: the engine reads a snapshot of day-records and freeze
state and returns derived statistics. It never touches the database.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from devtracker.dates import days_between, days_in_month, month_name, parse_date, shift

MAX_WALK_DAYS = 730  # hard bound on the backward walk (two years)
FREEZE_BRIDGE_MAX_GAP = 7


@dataclass(frozen=True)
class DayRecord:
    date: str  # YYYY-MM-DD
    log_count: int


@dataclass(frozen=True)
class FreezeState:
    credits: int = 0
    used_dates: frozenset[str] = field(default_factory=frozenset)
    total_earned: int = 0
    total_used: int = 0
    manual_activations: int = 0
    last_earned_milestone: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.used_dates, frozenset):
            object.__setattr__(self, "used_dates", frozenset(self.used_dates))

    @classmethod
    def empty(cls) -> FreezeState:
        """Freeze state of a brand-new user."""
        return cls()

    def to_dict(self) -> dict:
        return {
            "credits": self.credits,
            "usedDates": sorted(self.used_dates),
            "totalEarned": self.total_earned,
            "totalUsed": self.total_used,
            "manualActivations": self.manual_activations,
        }


@dataclass(frozen=True)
class MonthlySummary:
    total_logs: int
    active_days: int
    progress: int  # 0-100
    name: str


@dataclass(frozen=True)
class StreakSnapshot:
    total_logs: int
    total_active_days: int
    current_streak: int
    max_streak: int
    freezes_used_in_current_streak: int
    monthly: MonthlySummary
    current_streak_start: str | None = None  # YYYY-MM-DD, None when no streak

    def to_dict(self) -> dict:
        """camelCase shape consumed by the delivery surfaces."""
        return {
            "totalLogs": self.total_logs,
            "totalActiveDays": self.total_active_days,
            "currentStreak": self.current_streak,
            "maxStreak": self.max_streak,
            "freezesUsedInCurrentStreak": self.freezes_used_in_current_streak,
            "monthly": {
                "totalLogs": self.monthly.total_logs,
                "activeDays": self.monthly.active_days,
                "progress": self.monthly.progress,
                "name": self.monthly.name,
            },
        }


def _is_covered(day: str, active: set[str], frozen: frozenset[str]) -> bool:
    return day in active or day in frozen


def is_streak_alive(active: set[str], frozen: frozenset[str], today: str) -> bool:
    """Decide whether the current streak survives up to today.

    Alive when the last logged day is today or yesterday, or when the gap since
    the last log is 2-7 days and every day in between is logged or frozen.
    """
    if not active:
        return False
    last_active = max(active)
    if last_active in (today, shift(today, -1)):
        return True
    gap = days_between(today, last_active)
    if not 2 <= gap <= FREEZE_BRIDGE_MAX_GAP:
        return False
    return all(_is_covered(shift(last_active, i), active, frozen) for i in range(1, gap))


def _walk_back(
    active: set[str], frozen: frozenset[str], today: str
) -> tuple[int, int, str | None]:
    if not is_streak_alive(active, frozen, today):
        return 0, 0, None

    streak = 0
    freezes_used = 0
    misses = 0
    start: str | None = None
    cursor = today
    for _ in range(MAX_WALK_DAYS):
        if cursor in active:
            streak += 1
            misses = 0
            start = cursor
        elif cursor in frozen:
            streak += 1
            freezes_used += 1
            misses = 0
            start = cursor
        else:
            misses += 1
            if misses > 1:
                break
        cursor = shift(cursor, -1)
    return streak, freezes_used, start


def current_streak_from(
    active: set[str], frozen: frozenset[str], today: str
) -> tuple[int, int]:
    """Walk backwards from today and return (streak, freezes_used).

    A single uncovered day is tolerated (today may not be logged yet); two
    uncovered days in a row end the walk.
    """
    streak, freezes_used, _ = _walk_back(active, frozen, today)
    return streak, freezes_used


def current_streak_start(active: set[str], frozen: frozenset[str], today: str) -> str | None:
    """Earliest logged or frozen day of the current streak, None when it is dead."""
    return _walk_back(active, frozen, today)[2]


def longest_streak_from(sorted_dates: list[str], frozen: frozenset[str]) -> int:
    """Longest run over consecutive logged days.

    A gap between two logged days is bridged (adding one to the run) only when
    every day inside it is frozen.
    """
    longest = 0
    run = 0
    prev: str | None = None
    for day in sorted_dates:
        if prev is None:
            run = 1
        else:
            diff = days_between(day, prev)
            if diff == 1:
                run += 1
            elif all(shift(prev, i) in frozen for i in range(1, diff)):
                run += 1
            else:
                run = 1
        longest = max(longest, run)
        prev = day
    return longest


def _reporting_month(records: list[DayRecord], reporting_year: int, today: date) -> tuple[int, int]:
    if reporting_year == today.year:
        return today.year, today.month
    prefix = f"{reporting_year:04d}-"
    in_year = [r.date for r in records if r.date.startswith(prefix)]
    if in_year:
        latest = parse_date(max(in_year))
        return latest.year, latest.month
    return reporting_year, 1


def monthly_summary(records: list[DayRecord], reporting_year: int, today: date) -> MonthlySummary:
    """Totals for the reporting month of reporting_year."""
    year, month = _reporting_month(records, reporting_year, today)
    prefix = f"{year:04d}-{month:02d}-"
    month_records = [r for r in records if r.date.startswith(prefix)]
    active_days = len(month_records)
    total_days = days_in_month(year, month)
    progress = 0
    if total_days > 0:
        progress = math.floor(active_days / total_days * 100 + 0.5)
    return MonthlySummary(
        total_logs=sum(r.log_count for r in month_records),
        active_days=active_days,
        progress=max(0, min(progress, 100)),
        name=month_name(month),
    )


def compute_snapshot(
    day_records: Iterable[DayRecord],
    reporting_year: int,
    freeze: FreezeState,
    today: str | date,
) -> StreakSnapshot:
    """Compute streak statistics from a snapshot of day-records and freeze state.

    Totals are lifetime values; reporting_year only selects the monthly view.
    Records with a zero log count are ignored. A date that is both logged and
    frozen counts as logged.
    """
    today_date = parse_date(today)
    today_str = today_date.isoformat()

    # One record per date; keep the first if the caller passed duplicates.
    by_date: dict[str, DayRecord] = {}
    for record in day_records:
        if record.log_count > 0 and record.date not in by_date:
            by_date[record.date] = record
    records = [by_date[d] for d in sorted(by_date)]
    active = set(by_date)
    frozen = freeze.used_dates

    current, freezes_used, start = _walk_back(active, frozen, today_str)
    longest = max(longest_streak_from([r.date for r in records], frozen), current)

    return StreakSnapshot(
        total_logs=sum(r.log_count for r in records),
        total_active_days=len(records),
        current_streak=current,
        max_streak=longest,
        freezes_used_in_current_streak=freezes_used,
        monthly=monthly_summary(records, reporting_year, today_date),
        current_streak_start=start,
    )
