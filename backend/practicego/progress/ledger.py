from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Literal

from pydantic import BaseModel

from .clock import local_date
from .record import ActivityDay, ProgressRecord

MILESTONE_STREAKS = (7, 14, 30)

DayStatus = Literal["practiced", "missed", "milestone"]


def record_activity(activities: Dict[str, ActivityDay], day: str, points_earned: int) -> ActivityDay:
	entry = activities.get(day)
	if entry is None:
		entry = activities[day] = ActivityDay()
	entry.count += 1
	entry.points += points_earned
	return entry


def total_points(activities: Dict[str, ActivityDay]) -> int:
	return sum(entry.points for entry in activities.values())


class CalendarDay(BaseModel):
	date: str
	status: DayStatus
	points: int = 0
	is_today: bool = False


def calendar_view(record: ProgressRecord, now: datetime, *, days: int = 30) -> List[CalendarDay]:
	"""Last ``days`` local days, oldest first, as shown on the streak calendar.

	A practiced day is a milestone when the current streak, counted forward
	from its first day, reaches 7, 14 or 30 on that day.
	"""
	today = now.date()
	streak_days = set()
	if record.last_practiced is not None and record.streak > 0:
		last_day = local_date(record.last_practiced, now)
		streak_days = {last_day - timedelta(days=i) for i in range(record.streak)}

	out: List[CalendarDay] = []
	for offset in range(days - 1, -1, -1):
		day = today - timedelta(days=offset)
		key = day.isoformat()
		entry = record.activities.get(key)
		if entry is None:
			out.append(CalendarDay(date=key, status="missed", is_today=offset == 0))
			continue
		status: DayStatus = "practiced"
		if day in streak_days:
			running = sum(1 for d in streak_days if d <= day)
			if running in MILESTONE_STREAKS:
				status = "milestone"
		out.append(CalendarDay(date=key, status=status, points=entry.points, is_today=offset == 0))
	return out
