from __future__ import annotations

import logging
from typing import List, Union

from pydantic import BaseModel, Field

from ..storage import KeyValueStore
from . import achievements, ledger, streak
from .achievements import AchievementId
from .clock import Clock, date_key, local_now
from .errors import InvalidActivityError
from .record import ProgressRecord, ProgressStore

logger = logging.getLogger(__name__)


class ActivityResult(BaseModel):
	record: ProgressRecord
	bonus: int = 0
	unlocked: List[AchievementId] = Field(default_factory=list)


class ProgressService:
	"""Single entry point for reporting completed activities.

	Every call runs load -> streak -> points -> ledger -> achievements -> save
	against the injected store, using ``clock`` for "now".
	"""

	def __init__(self, kv: KeyValueStore, key: str, *, clock: Clock = local_now) -> None:
		self.store = ProgressStore(kv, key)
		self.clock = clock

	def get_progress(self) -> ProgressRecord:
		return self.store.load(self.clock())

	def add_points(
		self,
		base_points: int,
		activity: str,
		achievement: Union[AchievementId, str, None] = None,
	) -> ActivityResult:
		if base_points < 0:
			raise InvalidActivityError(f"points must be >= 0, got {base_points}")
		token = achievements.parse_token(achievement)

		now = self.clock()
		record = self.store.load(now)
		before = set(record.achievements)

		outcome = streak.evaluate(record.streak, record.last_practiced, now)
		record.streak = outcome.streak
		record.last_practiced = outcome.last_practiced

		total = base_points + outcome.bonus
		record.points += total
		ledger.record_activity(record.activities, date_key(now), total)

		record.achievements = achievements.unlock(record, token)
		unlocked = [a for a in record.achievements if a not in before]

		self.store.save(record)
		logger.debug(
			"Recorded %r: +%d pts (bonus %d), streak %d, unlocked %s",
			activity, base_points, outcome.bonus, record.streak, [a.value for a in unlocked],
		)
		return ActivityResult(record=record, bonus=outcome.bonus, unlocked=unlocked)

