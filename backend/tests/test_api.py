import json

from fastapi.testclient import TestClient

from practicego.corrections import WORD_WATCHER_THRESHOLD
from practicego.routers.chat import FALLBACK_REPLY


def _reply(text, corrections=()):
	if not corrections:
		return text
	payload = json.dumps([{"original": o, "corrected": c} for o, c in corrections])
	return f"{text}\n<!-- CORRECTIONS: {payload} -->"


def _start_chat(api, **body):
	resp = api.post("/chat/start", json=body)
	assert resp.status_code == 200
	return resp.json()["session_id"]


def test_requests_without_token_are_rejected(api):
	from practicego.main import app

	anonymous = TestClient(app)
	assert anonymous.get("/progress").status_code == 401
	assert anonymous.get("/practice/reading-text").status_code == 401
	assert anonymous.post("/auth/token", data={"username": "student", "password": "wrong"}).status_code == 401


def test_logout_revokes_the_session(api):
	assert api.get("/auth/me").status_code == 200
	assert api.post("/auth/logout").status_code == 204
	assert api.get("/auth/me").status_code == 401


def test_health(api):
	assert api.get("/health").json() == {"status": "ok", "database": "ok"}


def test_fresh_progress(api):
	body = api.get("/progress").json()
	assert body == {"points": 0, "streak": 0, "lastPracticed": None, "achievements": [], "activities": {}}


def test_activity_scenario_over_two_days(api, clock):
	first = api.post("/progress/activity", json={"points": 15, "activity": "Daily Lesson", "achievement": "firstListening"})
	assert first.status_code == 200
	assert first.json()["record"]["points"] == 15
	assert first.json()["unlocked"] == ["firstListening"]

	clock.advance(days=1)
	second = api.post("/progress/activity", json={"points": 10, "activity": "Exercise"}).json()
	assert second["bonus"] == 20
	assert second["record"]["points"] == 45
	assert second["record"]["streak"] == 2
	assert second["record"]["activities"]["2024-03-11"] == {"count": 1, "points": 30}

	assert api.get("/progress").json()["points"] == 45


def test_invalid_activity_is_rejected(api):
	assert api.post("/progress/activity", json={"points": -1, "activity": "Cheat"}).status_code == 422
	assert api.post("/progress/activity", json={"points": 5, "activity": "Chat", "achievement": "nope"}).status_code == 422
	assert api.get("/progress").json()["points"] == 0


def test_achievement_listing(api):
	api.post("/progress/activity", json={"points": 120, "activity": "Lesson"})
	items = {a["id"]: a for a in api.get("/progress/achievements").json()}
	assert len(items) == 15
	assert items["points100"]["unlocked"]
	assert not items["streak3"]["unlocked"]

	assert api.get("/progress/achievements/wordWatcher").json()["id"] == "wordWatcher"
	assert api.get("/progress/achievements/unknown").status_code == 422


def test_calendar(api):
	api.post("/progress/activity", json={"points": 10, "activity": "Reading"})
	days = api.get("/progress/calendar", params={"days": 3}).json()
	assert [d["date"] for d in days] == ["2024-03-08", "2024-03-09", "2024-03-10"]
	assert days[-1]["status"] == "practiced"
	assert days[-1]["is_today"]
	assert days[0]["status"] == "missed"


def test_custom_lessons(api):
	assert [l["id"] for l in api.get("/lessons").json()] == ["default-1", "default-2", "default-3"]
	created = api.post("/lessons", json={"title": "Viajes", "theme": "Travel", "vocabulary": ["ticket"]})
	assert created.status_code == 201
	assert created.json()["is_custom"]
	assert len(api.get("/lessons").json()) == 4


def test_lesson_materials_award_daily_lesson(api):
	resp = api.post("/lessons/default-1/materials")
	assert resp.status_code == 200
	body = resp.json()
	assert body["lesson"]["id"] == "default-1"
	assert "readingText" in body["materials"]
	assert body["progress"]["record"]["points"] == 15

	assert api.post("/lessons/missing/materials").status_code == 404
	assert api.get("/progress").json()["points"] == 15


def test_dictation_for_lesson_uses_fallback(api):
	body = api.post("/lessons/default-2/dictation").json()
	assert body["transcript"] == "Let's practice some English words today."


def test_pdf_upload_validation(api):
	resp = api.post("/lessons/from-pdf", files={"file": ("empty.pdf", b"", "application/pdf")})
	assert resp.status_code == 400


def test_chat_turns_award_points_and_corrections(api, gemini):
	session_id = _start_chat(api, lesson_id="default-3")
	gemini.chat_answers.append(_reply("Great! What food do you like?", [("likes", "like")]))
	gemini.chat_answers.append("Pizza is delicious!")

	first = api.post("/chat/message", json={"session_id": session_id, "message": "I likes pizza"}).json()
	assert first["reply"] == "Great! What food do you like?"
	assert first["corrections"] == [{"original": "likes", "corrected": "like"}]
	assert first["distinct_corrections"] == 1
	assert first["progress"]["record"]["points"] == 5
	assert first["progress"]["unlocked"] == ["firstChat"]

	second = api.post("/chat/message", json={"session_id": session_id, "message": "Yes"}).json()
	assert second["progress"]["record"]["points"] == 10
	assert second["progress"]["unlocked"] == []

	history = gemini.calls[-1][1]
	assert [turn["role"] for turn in history] == ["user", "model", "user"]


def test_chat_failure_returns_fallback_without_points(api, gemini):
	session_id = _start_chat(api)
	body = api.post("/chat/message", json={"session_id": session_id, "message": "Hello"}).json()
	assert body["reply"] == FALLBACK_REPLY
	assert body["progress"] is None
	assert api.get("/progress").json()["points"] == 0

	gemini.chat_answers.append("Hi there!")
	api.post("/chat/message", json={"session_id": session_id, "message": "Hello again"})
	assert [turn["text"] for turn in gemini.calls[-1][1]] == ["Hello again"]


def test_word_watcher_is_awarded_once(api, gemini):
	session_id = _start_chat(api)
	many = [(f"wrd{i}", f"word{i}") for i in range(WORD_WATCHER_THRESHOLD)]
	gemini.chat_answers.append(_reply("Let's fix a few words.", many))
	gemini.chat_answers.append(_reply("One more.", [("extra", "extra!")]))

	first = api.post("/chat/message", json={"session_id": session_id, "message": "..."}).json()
	assert first["distinct_corrections"] == WORD_WATCHER_THRESHOLD
	assert first["word_watcher"]["unlocked"] == ["wordWatcher"]
	assert first["word_watcher"]["record"]["points"] == 5

	second = api.post("/chat/message", json={"session_id": session_id, "message": "..."}).json()
	assert second["word_watcher"] is None
	assert second["distinct_corrections"] == WORD_WATCHER_THRESHOLD + 1


def test_speaking_scenario_rewarded_on_completion(api, gemini):
	assert len(api.get("/chat/scenarios").json()) == 7
	assert api.post("/chat/start", json={"scenario_id": "moon"}).status_code == 404

	session_id = _start_chat(api, scenario_id="taxi")
	gemini.chat_answers.append("Where to?")
	turn = api.post("/chat/message", json={"session_id": session_id, "message": "Airport please"}).json()
	assert turn["progress"] is None
	assert gemini.calls[-1][2].startswith("You are Kandy, a friendly taxi driver.")

	done = api.post("/chat/scenario/complete", json={"session_id": session_id})
	assert done.status_code == 200
	assert done.json()["record"]["points"] == 25
	assert done.json()["unlocked"] == ["speakingScenario"]
	assert api.post("/chat/scenario/complete", json={"session_id": session_id}).status_code == 409

	plain = _start_chat(api)
	assert api.post("/chat/scenario/complete", json={"session_id": plain}).status_code == 400


def test_ended_chat_session_is_gone(api):
	session_id = _start_chat(api)
	assert api.delete(f"/chat/{session_id}").status_code == 204
	assert api.post("/chat/message", json={"session_id": session_id, "message": "hi"}).status_code == 404


def test_pronunciation_points_only_for_passing_attempts(api):
	low = api.post("/practice/pronunciation/score", json={"original": "I have a red car", "transcript": "I have"}).json()
	assert low["result"]["score"] == 40
	assert low["progress"] is None

	high = api.post("/practice/pronunciation/score", json={"original": "I have a red car", "transcript": "i have a red car"}).json()
	assert high["result"]["score"] == 100
	assert high["progress"]["record"]["points"] == 20
	assert high["progress"]["unlocked"] == ["pronunciationPro"]


def test_dictation_check_awards_points(api):
	body = api.post("/practice/dictation/check", json={"transcript": "My cat is white.", "answer": "my cat is wite"}).json()
	assert body["result"]["accuracy"] == 75
	assert body["result"]["misspelled"] == [{"incorrect": "wite", "correct": "white"}]
	assert body["progress"]["record"]["points"] == 15
	assert body["progress"]["unlocked"] == ["firstDictation"]


def test_exercise_check_awards_lesson_finished(api):
	body = api.post("/practice/exercises/check", json={
		"exercises": [{"question": "I ___ pizza.", "answer": "like"}, {"question": "My ___ is Ana.", "answer": "name"}],
		"answers": ["Like", "game"],
	}).json()
	assert body["correct"] == 1
	assert body["progress"]["record"]["points"] == 20
	assert body["progress"]["unlocked"] == ["firstExercise"]


def test_reading_text_and_definitions(api, gemini):
	gemini.text_answers.append("Sam has a dog. The dog is brown.")
	assert api.get("/practice/reading-text").json() == {"text": "Sam has a dog. The dog is brown."}
	assert api.get("/practice/define/%3F").json()["translation"] == "-"
	assert api.get("/practice/define/" + "a" * 65).status_code == 400


def test_client_graded_practice_completions(api):
	expected = {
		"reading": (15, []),
		"vocabulary-review": (10, []),
		"exercises": (10, ["firstExercise"]),
		"listening-quiz": (10, ["firstListening"]),
		"essential-verbs": (10, ["verbsMaster"]),
	}
	total = 0
	for kind, (points, unlocked) in expected.items():
		body = api.post(f"/practice/complete/{kind}").json()
		total += points
		assert body["record"]["points"] == total
		assert body["unlocked"] == unlocked
	assert api.post("/practice/complete/karaoke").status_code == 422


def test_idle_chat_sessions_are_purged(api, monkeypatch):
	from datetime import datetime, timedelta

	from practicego.routers import chat
	from practicego.settings import settings

	monkeypatch.setattr(settings, "chat_idle_hours", 24)
	idle = _start_chat(api)
	active = _start_chat(api)
	chat._sessions[idle].last_activity_at = datetime.utcnow() - timedelta(hours=30)

	assert chat.purge_idle_sessions() == 1
	assert idle not in chat._sessions and active in chat._sessions
	assert api.delete(f"/chat/{idle}").status_code == 404

	monkeypatch.setattr(settings, "chat_idle_hours", 0)
	chat._sessions[active].last_activity_at = datetime(2000, 1, 1)
	assert chat.purge_idle_sessions() == 0
