from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..content import ContentService
from ..deps import get_content_service, get_progress_service
from ..progress import rewards
from ..progress.achievements import AchievementId
from ..progress.service import ActivityResult, ProgressService
from ..schemas import FillInTheBlankExercise, PronunciationFeedback, WordDefinition
from ..scoring import (
	DictationResult,
	ExerciseResult,
	PronunciationScore,
	check_dictation,
	check_exercises,
	pronunciation_score,
)
from .auth import get_current_user
from .progress import award

router = APIRouter(prefix="/practice", tags=["practice"], dependencies=[Depends(get_current_user)])


class ReadingTextResponse(BaseModel):
	text: str


class PronunciationTextRequest(BaseModel):
	text: str = Field(min_length=1, max_length=2000)


class PronunciationAttempt(BaseModel):
	original: str = Field(min_length=1, max_length=2000)
	transcript: str = Field(default="", max_length=4000)


class PronunciationAttemptResponse(BaseModel):
	result: PronunciationScore
	progress: Optional[ActivityResult] = None


class DictationAttempt(BaseModel):
	transcript: str = Field(min_length=1, max_length=500)
	answer: str = Field(default="", max_length=1000)


class DictationAttemptResponse(BaseModel):
	result: DictationResult
	progress: ActivityResult


class ExercisesAttempt(BaseModel):
	exercises: List[FillInTheBlankExercise] = Field(min_length=1)
	answers: List[str] = Field(default_factory=list)


class ExercisesAttemptResponse(BaseModel):
	results: List[ExerciseResult]
	correct: int
	progress: ActivityResult


@router.get("/reading-text", response_model=ReadingTextResponse)
async def reading_text(content: ContentService = Depends(get_content_service)):
	return ReadingTextResponse(text=await content.generate_reading_text())


@router.post("/pronunciation/feedback", response_model=PronunciationFeedback)
async def pronunciation_feedback(req: PronunciationTextRequest, content: ContentService = Depends(get_content_service)):
	return await content.generate_pronunciation_feedback(req.text)


@router.post("/pronunciation/score", response_model=PronunciationAttemptResponse)
def score_pronunciation(req: PronunciationAttempt, progress: ProgressService = Depends(get_progress_service)):
	result = pronunciation_score(req.original, req.transcript)
	# Only passing attempts earn points
	if result.score < rewards.PRONUNCIATION_PASS_SCORE:
		return PronunciationAttemptResponse(result=result)
	awarded = award(progress, rewards.PRONUNCIATION, "Pronunciación con IA", AchievementId.PRONUNCIATION_PRO)
	return PronunciationAttemptResponse(result=result, progress=awarded)


@router.post("/dictation/check", response_model=DictationAttemptResponse)
def check_dictation_attempt(req: DictationAttempt, progress: ProgressService = Depends(get_progress_service)):
	result = check_dictation(req.transcript, req.answer)
	awarded = award(progress, rewards.DICTATION, "Dictado Completado", AchievementId.FIRST_DICTATION)
	return DictationAttemptResponse(result=result, progress=awarded)


@router.post("/exercises/check", response_model=ExercisesAttemptResponse)
def check_exercises_attempt(req: ExercisesAttempt, progress: ProgressService = Depends(get_progress_service)):
	results = check_exercises(req.exercises, req.answers)
	awarded = award(progress, rewards.LESSON_FINISHED, "Lección Terminada", AchievementId.FIRST_EXERCISE)
	return ExercisesAttemptResponse(results=results, correct=sum(1 for r in results if r.is_correct), progress=awarded)


class PracticeKind(str, Enum):
	READING = "reading"
	VOCABULARY_REVIEW = "vocabulary-review"
	EXERCISES = "exercises"
	LISTENING_QUIZ = "listening-quiz"
	ESSENTIAL_VERBS = "essential-verbs"


# Activities graded on the client; the server only records the reward
_COMPLETIONS: Dict[PracticeKind, Tuple[int, str, Optional[AchievementId]]] = {
	PracticeKind.READING: (rewards.READING, "Práctica de Lectura", None),
	PracticeKind.VOCABULARY_REVIEW: (rewards.VOCABULARY_REVIEW, "Repaso de Vocabulario", None),
	PracticeKind.EXERCISES: (rewards.EXERCISES, "Ejercicios Prácticos", AchievementId.FIRST_EXERCISE),
	PracticeKind.LISTENING_QUIZ: (rewards.LISTENING_QUIZ, "Listening Quiz", AchievementId.FIRST_LISTENING),
	PracticeKind.ESSENTIAL_VERBS: (rewards.ESSENTIAL_VERBS, "Repaso de Verbos", AchievementId.VERBS_MASTER),
}


@router.post("/complete/{kind}", response_model=ActivityResult)
def complete_practice(kind: PracticeKind, progress: ProgressService = Depends(get_progress_service)):
	points, label, token = _COMPLETIONS[kind]
	return award(progress, points, label, token)


@router.get("/define/{word}", response_model=WordDefinition)
async def define(word: str, content: ContentService = Depends(get_content_service)):
	if len(word) > 64:
		raise HTTPException(status_code=400, detail="word is too long")
	return await content.get_word_definition(word)
