from __future__ import annotations

import json
import logging
import uuid
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from .schemas import Lesson
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


DEFAULT_LESSONS: List[Lesson] = [
	Lesson(
		id="default-1",
		title="Unidad 1: Saludos e Introducciones",
		vocabulary=["hello", "goodbye", "name", "is", "are", "my", "your", "what"],
		theme="Conocer a alguien por primera vez y presentarse.",
	),
	Lesson(
		id="default-2",
		title="Unidad 2: Mi Familia",
		vocabulary=["family", "mother", "father", "sister", "brother", "have", "has", "this is"],
		theme="Hablar sobre los miembros de tu familia inmediata.",
	),
	Lesson(
		id="default-3",
		title="Unidad 3: Comida que me Gusta",
		vocabulary=["food", "like", "eat", "drink", "apple", "banana", "pizza", "water", "I like"],
		theme="Expresar preferencias sobre diferentes tipos de comida y bebida.",
	),
]

_lessons_adapter = TypeAdapter(List[Lesson])


class LessonStore:
	"""Custom lessons kept as one JSON list under a fixed storage key."""

	def __init__(self, kv: KeyValueStore, key: str) -> None:
		self.kv = kv
		self.key = key

	def list_custom(self) -> List[Lesson]:
		try:
			raw = self.kv.get(self.key)
		except Exception:
			logger.exception("Failed to read custom lessons")
			return []
		if not raw:
			return []
		try:
			return _lessons_adapter.validate_json(raw)
		except ValidationError as e:
			logger.warning("Failed to parse custom lessons, ignoring them: %s", e)
			return []

	def save_custom(self, lessons: List[Lesson]) -> None:
		try:
			self.kv.set(self.key, json.dumps([lesson.model_dump() for lesson in lessons]))
		except Exception:
			logger.exception("Failed to save custom lessons")

	def add_custom(self, title: str, theme: str, vocabulary: List[str]) -> Lesson:
		lesson = Lesson(
			id=f"custom-{uuid.uuid4().hex[:12]}",
			title=title.strip(),
			theme=theme.strip(),
			vocabulary=[v.strip() for v in vocabulary if v and v.strip()],
			is_custom=True,
		)
		lessons = self.list_custom()
		lessons.append(lesson)
		self.save_custom(lessons)
		return lesson

	def all_lessons(self) -> List[Lesson]:
		return [*DEFAULT_LESSONS, *self.list_custom()]

	def get(self, lesson_id: str) -> Optional[Lesson]:
		for lesson in self.all_lessons():
			if lesson.id == lesson_id:
				return lesson
		return None
