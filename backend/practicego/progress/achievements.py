from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from .errors import InvalidActivityError

if TYPE_CHECKING:
	from .record import ProgressRecord


class AchievementId(str, Enum):
	STREAK_3 = "streak3"
	STREAK_7 = "streak7"
	STREAK_30 = "streak30"
	POINTS_100 = "points100"
	POINTS_500 = "points500"
	POINTS_1000 = "points1000"
	FIRST_CHAT = "firstChat"
	FIRST_EXERCISE = "firstExercise"
	FIRST_DICTATION = "firstDictation"
	FIRST_LISTENING = "firstListening"
	VERBS_MASTER = "verbsMaster"
	ALL_LESSONS = "allLessons"
	PRONUNCIATION_PRO = "pronunciationPro"
	WORD_WATCHER = "wordWatcher"
	SPEAKING_SCENARIO = "speakingScenario"


class Achievement(BaseModel):
	id: AchievementId
	name: str
	description: str
	icon: str


def _entry(achievement_id: AchievementId, name: str, description: str, icon: str) -> Tuple[AchievementId, Achievement]:
	return achievement_id, Achievement(id=achievement_id, name=name, description=description, icon=icon)


CATALOG: Dict[AchievementId, Achievement] = dict([
	_entry(AchievementId.STREAK_3, "¡En Racha!", "Practica por 3 días seguidos.", "🔥"),
	_entry(AchievementId.STREAK_7, "Semana Perfecta", "Practica por 7 días seguidos.", "🗓️"),
	_entry(AchievementId.STREAK_30, "Hábito Creado", "Practica por 30 días seguidos.", "🎯"),
	_entry(AchievementId.POINTS_100, "Principiante", "Gana 100 puntos.", "⭐"),
	_entry(AchievementId.POINTS_500, "Estudiante", "Gana 500 puntos.", "✨"),
	_entry(AchievementId.POINTS_1000, "Erudito", "Gana 1000 puntos.", "🏆"),
	_entry(AchievementId.FIRST_CHAT, "¡Hola, Mundo!", "Ten tu primera conversación con Kandy.", "👋"),
	_entry(AchievementId.FIRST_EXERCISE, "Rompiendo el Hielo", "Completa tu primer ejercicio.", "✍️"),
	_entry(AchievementId.FIRST_DICTATION, "Buen Oído", "Completa tu primer dictado.", "👂"),
	_entry(AchievementId.FIRST_LISTENING, "Amante de los Clásicos", "Completa tu primer quiz de listening.", "📚"),
	_entry(AchievementId.VERBS_MASTER, "Maestro de Verbos", "Completa la sección de Verbos Esenciales.", "💪"),
	_entry(AchievementId.ALL_LESSONS, "Explorador Curioso", "Completa todas las lecciones por defecto.", "🗺️"),
	_entry(AchievementId.PRONUNCIATION_PRO, "Pro de la Pronunciación", "Obtén un 80% o más en una práctica de pronunciación.", "🎤"),
	_entry(AchievementId.WORD_WATCHER, "Ojo de Águila", "Corrige 10 palabras en el chat.", "👀"),
	_entry(AchievementId.SPEAKING_SCENARIO, "Trotamundos", "Completa un escenario con el AI Speaking Buddy.", "💬"),
])

STREAK_THRESHOLDS: Tuple[Tuple[int, AchievementId], ...] = (
	(3, AchievementId.STREAK_3),
	(7, AchievementId.STREAK_7),
	(30, AchievementId.STREAK_30),
)

POINT_THRESHOLDS: Tuple[Tuple[int, AchievementId], ...] = (
	(100, AchievementId.POINTS_100),
	(500, AchievementId.POINTS_500),
	(1000, AchievementId.POINTS_1000),
)


def parse_token(token: Union[AchievementId, str, None]) -> Optional[AchievementId]:
	"""Resolve a caller-supplied token to a catalog id; unknown tokens are rejected."""
	if token is None or isinstance(token, AchievementId):
		return token
	try:
		return AchievementId(token)
	except ValueError:
		raise InvalidActivityError(f"unknown achievement: {token!r}") from None


def unlock(record: "ProgressRecord", token: Optional[AchievementId] = None) -> List[AchievementId]:
	"""Return the record's achievements plus everything it now qualifies for.

	Each rule is checked on its own, so crossing several thresholds at once
	unlocks all of them. Existing entries are kept as they are.
	"""
	unlocked = list(record.achievements)
	earned: List[AchievementId] = []
	if token is not None:
		earned.append(token)
	earned.extend(a for threshold, a in STREAK_THRESHOLDS if record.streak >= threshold)
	earned.extend(a for threshold, a in POINT_THRESHOLDS if record.points >= threshold)
	for achievement_id in earned:
		if achievement_id not in unlocked:
			unlocked.append(achievement_id)
	return unlocked
