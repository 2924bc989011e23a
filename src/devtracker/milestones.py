"""Freeze-credit milestones for devtracker.

A credit is offered at every 7-day streak milestone up to 70 days. Storing the
credit (and the 5-credit cap) is the caller's job, see devtracker.freeze.
Streak titles are cosmetic unlocks on a separate, longer ladder.
"""

from __future__ import annotations

from dataclasses import dataclass

MILESTONES: tuple[int, ...] = (7, 14, 21, 28, 35, 42, 49, 56, 63, 70)
MAX_FREEZE_CREDITS = 5


@dataclass(frozen=True)
class MilestoneDecision:
    should_earn: bool
    milestone: int | None


def should_earn_credit(current_streak: int, last_earned_milestone: int = 0) -> MilestoneDecision:
    """Return the smallest milestone reached by current_streak but not yet credited."""
    current_streak = max(current_streak, 0)
    for milestone in MILESTONES:
        if current_streak >= milestone and last_earned_milestone < milestone:
            return MilestoneDecision(should_earn=True, milestone=milestone)
    return MilestoneDecision(should_earn=False, milestone=None)


def get_current_milestone(streak: int) -> int | None:
    """Highest milestone already reached, or None below the first one."""
    reached = [m for m in MILESTONES if streak >= m]
    return reached[-1] if reached else None


def get_next_milestone(streak: int) -> int | None:
    """Next milestone to reach, or None once every milestone is behind."""
    return next((m for m in MILESTONES if streak < m), None)


def days_to_next_milestone(streak: int) -> int | None:
    nxt = get_next_milestone(streak)
    if nxt is None:
        return None
    return nxt - max(streak, 0)


# ── Streak titles ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class StreakTitle:
    days: int
    title: str


STREAK_TITLES: tuple[StreakTitle, ...] = (
    StreakTitle(1, "First Step"),
    StreakTitle(3, "Getting Started"),
    StreakTitle(5, "Warming Up"),
    StreakTitle(7, "One Week Wonder"),
    StreakTitle(10, "Double Digits"),
    StreakTitle(14, "Fortnight Focus"),
    StreakTitle(21, "Habit Former"),
    StreakTitle(30, "Monthly Master"),
    StreakTitle(45, "Steady Climber"),
    StreakTitle(60, "Two Month Titan"),
    StreakTitle(75, "Relentless"),
    StreakTitle(90, "Quarter Champion"),
    StreakTitle(100, "Centurion"),
    StreakTitle(120, "Unstoppable"),
    StreakTitle(150, "Iron Will"),
    StreakTitle(180, "Half-Year Hero"),
    StreakTitle(200, "Bicentennial"),
    StreakTitle(250, "Elite Grinder"),
    StreakTitle(300, "Legend in Making"),
    StreakTitle(365, "Year-Long Legend"),
    StreakTitle(500, "Mythic"),
    StreakTitle(1000, "Immortal"),
)


def earned_titles(streak: int) -> list[StreakTitle]:
    """Titles unlocked by a streak of this length, lowest first."""
    return [t for t in STREAK_TITLES if streak >= t.days]


def current_title(streak: int) -> StreakTitle | None:
    earned = earned_titles(streak)
    return earned[-1] if earned else None


def next_title(streak: int) -> StreakTitle | None:
    return next((t for t in STREAK_TITLES if streak < t.days), None)
