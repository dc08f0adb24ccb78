import logging

from practicego.corrections import WORD_WATCHER_THRESHOLD, CorrectionTracker, parse_reply
from practicego.progress.achievements import AchievementId
from practicego.schemas import WordCorrection


def test_reply_without_trailer_is_returned_as_is():
	visible, corrections = parse_reply("  Great job! How was your day?  ")
	assert visible == "Great job! How was your day?"
	assert corrections == []


def test_trailer_is_stripped_and_parsed():
	text = (
		"Nice! You said 'I goed', the past is 'I went'.\n"
		'<!-- CORRECTIONS: [{"original": "goed", "corrected": "went"}] -->'
	)
	visible, corrections = parse_reply(text)
	assert visible == "Nice! You said 'I goed', the past is 'I went'."
	assert corrections == [WordCorrection(original="goed", corrected="went")]


def test_bad_trailer_is_hidden_and_ignored(caplog):
	with caplog.at_level(logging.WARNING):
		visible, corrections = parse_reply("Hello!\n<!-- CORRECTIONS: [oops] -->")
	assert visible == "Hello!"
	assert corrections == []
	assert "corrections trailer" in caplog.text


def test_tracker_counts_distinct_originals():
	tracker = CorrectionTracker()
	first = WordCorrection(original="goed", corrected="went")
	assert tracker.add([first, first]) == 1
	assert tracker.add([WordCorrection(original="goed", corrected="gone")]) == 1
	assert tracker.words["goed"].corrected == "went"
	assert tracker.earned is None


def test_tracker_earns_word_watcher_at_threshold():
	tracker = CorrectionTracker()
	for i in range(WORD_WATCHER_THRESHOLD - 1):
		tracker.add([WordCorrection(original=f"word{i}", corrected="w")])
	assert tracker.earned is None
	tracker.add([WordCorrection(original="last", corrected="w")])
	assert tracker.earned is AchievementId.WORD_WATCHER
