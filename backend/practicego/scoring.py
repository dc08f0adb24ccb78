from __future__ import annotations

import re
from typing import List

from pydantic import BaseModel

from .schemas import FillInTheBlankExercise


class ScoredWord(BaseModel):
	word: str
	is_correct: bool


class PronunciationScore(BaseModel):
	score: int
	words: List[ScoredWord]


class Misspelling(BaseModel):
	incorrect: str
	correct: str = ""


class DictationResult(BaseModel):
	correct_words: int
	total_words: int
	accuracy: int
	misspelled: List[Misspelling]


def _normalize(text: str) -> str:
	return re.sub(r"[.,!?]", "", text.lower())


def _percent(part: int, whole: int) -> int:
	# Half-up rounding
	return int(part * 100 / whole + 0.5)


def _dictation_words(text: str) -> List[str]:
	return [w for w in re.split(r"\s+", re.sub(r"[^\w\s']", "", text.lower())) if w]


def pronunciation_score(original: str, transcript: str) -> PronunciationScore:
	"""Share of the phrase's words that the speech recognizer heard, in percent.

	Word order is ignored; a word counts as pronounced if it appears anywhere
	in the transcript.
	"""
	original_words = [w for w in _normalize(original).split(" ") if w]
	heard = set(_normalize(transcript).split())
	words = [ScoredWord(word=w, is_correct=w in heard) for w in original_words]
	if not words:
		return PronunciationScore(score=0, words=[])
	correct = sum(1 for w in words if w.is_correct)
	return PronunciationScore(score=_percent(correct, len(words)), words=words)


def check_dictation(transcript: str, answer: str) -> DictationResult:
	# Positional comparison: the n-th typed word is checked against the n-th dictated word
	expected = _dictation_words(transcript)
	typed = [w for w in answer.split() if w]
	misspelled: List[Misspelling] = []
	correct = 0
	for i, segment in enumerate(typed):
		clean = re.sub(r"[^\w\s']", "", segment.lower())
		if i >= len(expected):
			misspelled.append(Misspelling(incorrect=segment))
		elif clean == expected[i]:
			correct += 1
		else:
			misspelled.append(Misspelling(incorrect=segment, correct=expected[i]))
	accuracy = _percent(correct, len(expected)) if expected else 0
	return DictationResult(correct_words=correct, total_words=len(expected), accuracy=accuracy, misspelled=misspelled)


class ExerciseResult(BaseModel):
	question: str
	expected: str
	given: str
	is_correct: bool


def check_exercises(exercises: List[FillInTheBlankExercise], answers: List[str]) -> List[ExerciseResult]:
	"""Grade fill-in-the-blank answers; unanswered questions count as wrong."""
	results: List[ExerciseResult] = []
	for i, exercise in enumerate(exercises):
		given = answers[i] if i < len(answers) else ""
		results.append(ExerciseResult(
			question=exercise.question,
			expected=exercise.answer,
			given=given,
			is_correct=given.strip().lower() == exercise.answer.strip().lower(),
		))
	return results
