from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .clock import DayRelation, classify_day

STREAK_BONUS = 20


class StreakOutcome(BaseModel):
	model_config = ConfigDict(frozen=True)

	streak: int
	last_practiced: Optional[datetime]
	bonus: int = 0


def evaluate(streak: int, last_practiced: Optional[datetime], now: datetime) -> StreakOutcome:
	"""Apply one activity at ``now`` to the streak state.

	- first activity ever: streak 1, no bonus
	- already practiced today: nothing changes, ``last_practiced`` included
	- practiced yesterday: streak + 1 and the flat bonus
	- anything else (a gap, or a timestamp in the future): streak restarts at 1
	"""
	if last_practiced is None:
		return StreakOutcome(streak=1, last_practiced=now)
	relation = classify_day(last_practiced, now)
	if relation is DayRelation.SAME_DAY:
		return StreakOutcome(streak=streak, last_practiced=last_practiced)
	if relation is DayRelation.PREVIOUS_DAY:
		return StreakOutcome(streak=streak + 1, last_practiced=now, bonus=STREAK_BONUS)
	return StreakOutcome(streak=1, last_practiced=now)


def displayed_streak(streak: int, last_practiced: Optional[datetime], now: datetime) -> int:
	"""Streak as shown on load: zero once the last practice is older than yesterday."""
	if last_practiced is None:
		return streak
	if classify_day(last_practiced, now) is DayRelation.OTHER:
		return 0
	return streak
