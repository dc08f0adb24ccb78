import pytest

from practicego.progress.achievements import CATALOG, AchievementId, parse_token, unlock
from practicego.progress.errors import InvalidActivityError
from practicego.progress.record import ProgressRecord


def test_catalog_covers_every_id():
	assert set(CATALOG) == set(AchievementId)
	for achievement_id, achievement in CATALOG.items():
		assert achievement.id is achievement_id
		assert achievement.name and achievement.description and achievement.icon


def test_explicit_token_is_added_once():
	record = ProgressRecord(achievements=[AchievementId.FIRST_CHAT])
	assert unlock(record, AchievementId.FIRST_CHAT) == [AchievementId.FIRST_CHAT]
	assert unlock(record, AchievementId.FIRST_DICTATION) == [AchievementId.FIRST_CHAT, AchievementId.FIRST_DICTATION]


def test_thresholds_unlock_cumulatively():
	record = ProgressRecord(streak=30, points=1000)
	unlocked = set(unlock(record))
	assert unlocked == {
		AchievementId.STREAK_3,
		AchievementId.STREAK_7,
		AchievementId.STREAK_30,
		AchievementId.POINTS_100,
		AchievementId.POINTS_500,
		AchievementId.POINTS_1000,
	}


def test_below_thresholds_unlocks_nothing():
	assert unlock(ProgressRecord(streak=2, points=99)) == []


def test_never_removes_existing_achievements():
	record = ProgressRecord(streak=0, points=0, achievements=[AchievementId.STREAK_30, AchievementId.POINTS_1000])
	assert unlock(record) == [AchievementId.STREAK_30, AchievementId.POINTS_1000]


def test_unlock_does_not_mutate_record():
	record = ProgressRecord(points=150)
	unlock(record, AchievementId.FIRST_CHAT)
	assert record.achievements == []


def test_parse_token():
	assert parse_token(None) is None
	assert parse_token("wordWatcher") is AchievementId.WORD_WATCHER
	assert parse_token(AchievementId.STREAK_3) is AchievementId.STREAK_3
	with pytest.raises(InvalidActivityError):
		parse_token("firstMillion")
