from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..storage import KeyValueStore
from .achievements import AchievementId
from .streak import displayed_streak

logger = logging.getLogger(__name__)


class ActivityDay(BaseModel):
	count: int = Field(default=0, ge=0)
	points: int = Field(default=0, ge=0)


class ProgressRecord(BaseModel):
	"""The persisted progress document of one learner.

	Serialized with the same camelCase keys the web client reads
	(``points``, ``streak``, ``lastPracticed``, ``achievements``, ``activities``).
	"""
	model_config = ConfigDict(populate_by_name=True)

	points: int = Field(default=0, ge=0)
	streak: int = Field(default=0, ge=0)
	last_practiced: Optional[datetime] = Field(default=None, alias="lastPracticed")
	achievements: List[AchievementId] = Field(default_factory=list)
	activities: Dict[str, ActivityDay] = Field(default_factory=dict)

	@field_validator("achievements", mode="before")
	@classmethod
	def _known_unique_achievements(cls, value: Any) -> Any:
		if not isinstance(value, list):
			return value
		known = {a.value for a in AchievementId}
		kept: List[str] = []
		for item in value:
			raw = item.value if isinstance(item, AchievementId) else item
			if not isinstance(raw, str) or raw not in known:
				logger.warning("Dropping unknown stored achievement %r", raw)
				continue
			if raw not in kept:
				kept.append(raw)
		return kept

	def to_json(self) -> str:
		return self.model_dump_json(by_alias=True)


class ProgressStore:
	"""Loads and saves a ProgressRecord under one fixed key of a key-value store."""

	def __init__(self, kv: KeyValueStore, key: str) -> None:
		self.kv = kv
		self.key = key

	def load(self, now: datetime) -> ProgressRecord:
		try:
			raw = self.kv.get(self.key)
		except Exception:
			logger.exception("Failed to read progress from storage")
			return ProgressRecord()
		if not raw:
			return ProgressRecord()
		try:
			record = ProgressRecord.model_validate_json(raw)
		except ValidationError as e:
			logger.warning("Stored progress is malformed, starting from defaults: %s", e)
			return ProgressRecord()
		record.streak = displayed_streak(record.streak, record.last_practiced, now)
		return record

	def save(self, record: ProgressRecord) -> None:
		try:
			self.kv.set(self.key, record.to_json())
		except Exception:
			# The in-memory record stays authoritative for this request
			logger.exception("Failed to save progress")
