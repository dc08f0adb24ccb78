from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable

Clock = Callable[[], datetime]


class DayRelation(str, Enum):
	SAME_DAY = "same_day"
	PREVIOUS_DAY = "previous_day"
	OTHER = "other"


def local_now() -> datetime:
	"""Current instant, timezone-aware in the machine's local zone."""
	return datetime.now().astimezone()


def local_date(moment: datetime, reference: datetime) -> date:
	"""Calendar date of ``moment`` as seen from ``reference``'s timezone.

	Naive datetimes are taken to already be in the reference's local time.
	"""
	if moment.tzinfo is None or reference.tzinfo is None:
		if moment.tzinfo is not None:
			moment = moment.astimezone().replace(tzinfo=None)
		return moment.date()
	return moment.astimezone(reference.tzinfo).date()


def classify_day(moment: datetime, now: datetime) -> DayRelation:
	# Compare calendar components, never elapsed hours
	day = local_date(moment, now)
	today = now.date()
	if day == today:
		return DayRelation.SAME_DAY
	if day == today - timedelta(days=1):
		return DayRelation.PREVIOUS_DAY
	return DayRelation.OTHER


def is_same_day(moment: datetime, now: datetime) -> bool:
	return classify_day(moment, now) is DayRelation.SAME_DAY


def is_previous_day(moment: datetime, now: datetime) -> bool:
	return classify_day(moment, now) is DayRelation.PREVIOUS_DAY


def date_key(moment: datetime) -> str:
	"""Ledger key (YYYY-MM-DD) for the local calendar date of ``moment``."""
	return moment.date().isoformat()
