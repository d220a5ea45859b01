"""
Abandonment scoring for imported repositories.

The maintenance score is a heuristic, not a validated model: the formula and
clamp bounds are kept exactly as published so scores stay reproducible.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

NO_COMMIT_SENTINEL_DAYS = 999
ABANDONED_AFTER_DAYS = 365
AT_RISK_AFTER_DAYS = 180
SECONDS_PER_DAY = 24 * 60 * 60


class AbandonmentStatus(str, Enum):
    ACTIVE = "active"
    AT_RISK = "at-risk"
    ABANDONED = "abandoned"
    REVIVING = "reviving"  # Stored value only, never produced by scoring


@dataclass(frozen=True)
class ScoreResult:
    days_since_last_commit: int
    abandonment_status: AbandonmentStatus
    maintenance_score: int


def days_since(last_commit: Optional[datetime], now: Optional[datetime] = None) -> int:
    """Whole days elapsed since ``last_commit``, or the sentinel when unknown."""
    if last_commit is None:
        return NO_COMMIT_SENTINEL_DAYS
    now = now or datetime.now(timezone.utc)
    if last_commit.tzinfo is None:
        last_commit = last_commit.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.floor((now - last_commit).total_seconds() / SECONDS_PER_DAY)


def abandonment_status(days_since_last_commit: int) -> AbandonmentStatus:
    if days_since_last_commit > ABANDONED_AFTER_DAYS:
        return AbandonmentStatus.ABANDONED
    if days_since_last_commit > AT_RISK_AFTER_DAYS:
        return AbandonmentStatus.AT_RISK
    return AbandonmentStatus.ACTIVE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def maintenance_score(days_since_last_commit: float, open_issues: float) -> int:
    """
    0-100 score, higher means easier to resume maintenance.

    score = clamp(0, 100, 100 - days/10 - issues/10), rounded half up.
    """
    raw = 100 - days_since_last_commit / 10 - open_issues / 10
    return _round_half_up(max(0.0, min(100.0, raw)))


def score_repository(
    last_commit: Optional[datetime],
    open_issues: int,
    now: Optional[datetime] = None,
) -> ScoreResult:
    days = days_since(last_commit, now)
    return ScoreResult(
        days_since_last_commit=days,
        abandonment_status=abandonment_status(days),
        maintenance_score=maintenance_score(days, open_issues or 0),
    )
