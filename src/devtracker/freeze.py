"""Freeze credit operations for devtracker.

Earning and spending credits mutate persisted state, so they live here rather
than in the streak engine. Every user-facing rejection is a TrackerError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from devtracker.dates import check_date_format, parse_date
from devtracker.db import Database
from devtracker.errors import FutureDateError, TrackerError
from devtracker.milestones import MAX_FREEZE_CREDITS, should_earn_credit
from devtracker.streaks import FreezeState, StreakSnapshot, compute_snapshot

logger = logging.getLogger(__name__)


class FreezeError(TrackerError):
    message = "Freeze request rejected"


class NoCreditsError(FreezeError):
    message = "No freeze credits available"


class AlreadyFrozenError(FreezeError):
    message = "Freeze already active on this date"


class AlreadyLoggedError(FreezeError):
    message = "You already logged activity on this date"


@dataclass(frozen=True)
class EarnResult:
    granted: bool
    milestone: int | None
    credits: int


def activate_freeze(db: Database, user_id: str, day: str, today: str | date) -> FreezeState:
    """Spend one credit to protect a missed past day."""
    check_date_format(day)
    state = db.get_freeze_state(user_id)
    if state.credits <= 0:
        raise NoCreditsError()
    if day in state.used_dates:
        raise AlreadyFrozenError()
    if parse_date(day) > parse_date(today):
        raise FutureDateError()
    if db.has_logs_on(user_id, day):
        raise AlreadyLoggedError()

    if not db.consume_credit(user_id, day, manual=True):
        # Another writer got there first; report what the state says now.
        latest = db.get_freeze_state(user_id)
        if day in latest.used_dates:
            raise AlreadyFrozenError()
        raise NoCreditsError()

    logger.info("Freeze activated for user=%s on %s", user_id, day)
    return db.get_freeze_state(user_id)


def earn_freeze(
    db: Database, user_id: str, current_streak: int, streak_start: str | None
) -> EarnResult:
    """Grant at most one credit for the next milestone this streak has not been paid for.

    Awards are keyed by the day the streak started. A streak that only looks
    broken keeps them, so freezing the missed day later does not pay its
    milestones twice; a streak that really restarted has a later start date
    and begins again from the first milestone.
    """
    state = db.get_freeze_state(user_id)
    if current_streak <= 0 or streak_start is None:
        return EarnResult(granted=False, milestone=None, credits=state.credits)

    credited = db.get_credited_milestone(user_id, streak_start)
    decision = should_earn_credit(current_streak, credited)
    if not decision.should_earn:
        return EarnResult(granted=False, milestone=None, credits=state.credits)

    if state.credits >= MAX_FREEZE_CREDITS:
        logger.info("Milestone %s reached by user=%s but credits are capped", decision.milestone, user_id)
        return EarnResult(granted=False, milestone=decision.milestone, credits=state.credits)

    if not db.claim_milestone(user_id, streak_start, decision.milestone, MAX_FREEZE_CREDITS):
        credits = db.get_freeze_state(user_id).credits
        logger.info("Milestone %s for user=%s was claimed concurrently", decision.milestone, user_id)
        return EarnResult(granted=False, milestone=decision.milestone, credits=credits)

    credits = db.get_freeze_state(user_id).credits
    logger.info("Freeze credit earned by user=%s at %s-day milestone", user_id, decision.milestone)
    return EarnResult(granted=True, milestone=decision.milestone, credits=credits)


def sync_freeze(
    db: Database, user_id: str, today: str | date, reporting_year: int
) -> tuple[StreakSnapshot, FreezeState, EarnResult]:
    """Compute the snapshot, award a due credit, and recompute if state changed."""
    records = db.get_day_records(user_id)
    state = db.get_freeze_state(user_id)
    snapshot = compute_snapshot(records, reporting_year, state, today)
    result = earn_freeze(db, user_id, snapshot.current_streak, snapshot.current_streak_start)
    state = db.get_freeze_state(user_id)
    if result.granted:
        snapshot = compute_snapshot(records, reporting_year, state, today)
    return snapshot, state, result
