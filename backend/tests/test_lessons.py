import json
import logging

from practicego.lessons import DEFAULT_LESSONS, LessonStore
from practicego.storage import InMemoryKeyValueStore

LESSONS_KEY = "practicego_custom_lessons"


def test_defaults_come_first_and_custom_lessons_persist():
	kv = InMemoryKeyValueStore()
	store = LessonStore(kv, LESSONS_KEY)
	assert store.all_lessons() == DEFAULT_LESSONS

	lesson = store.add_custom("  Viajes ", "En el aeropuerto", ["ticket", " ", "gate "])
	assert lesson.id.startswith("custom-")
	assert lesson.is_custom
	assert lesson.title == "Viajes"
	assert lesson.vocabulary == ["ticket", "gate"]

	reopened = LessonStore(kv, LESSONS_KEY)
	assert [l.id for l in reopened.all_lessons()] == ["default-1", "default-2", "default-3", lesson.id]
	assert reopened.get(lesson.id) == lesson
	assert reopened.get("default-2").title == "Unidad 2: Mi Familia"
	assert reopened.get("missing") is None


def test_corrupt_custom_lessons_are_ignored(caplog):
	kv = InMemoryKeyValueStore({LESSONS_KEY: json.dumps([{"title": "no id"}])})
	with caplog.at_level(logging.WARNING):
		assert LessonStore(kv, LESSONS_KEY).list_custom() == []
	assert "custom lessons" in caplog.text
