from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
	# Gemini and the web client speak camelCase; Python code uses field names
	model_config = ConfigDict(populate_by_name=True)


class Lesson(BaseModel):
	id: str
	title: str
	vocabulary: List[str] = Field(default_factory=list)
	theme: str
	is_custom: bool = False


class LessonOutline(BaseModel):
	title: str
	theme: str
	vocabulary: List[str] = Field(default_factory=list)


class Flashcard(BaseModel):
	english: str
	spanish: str
	example: str
	conjugation: Optional[str] = None


class FillInTheBlankExercise(BaseModel):
	question: str
	answer: str


class LessonExercises(_CamelModel):
	fill_in_the_blank: List[FillInTheBlankExercise] = Field(default_factory=list, alias="fillInTheBlank")


class GeneratedLessonMaterials(_CamelModel):
	reading_text: str = Field(alias="readingText")
	flashcards: List[Flashcard] = Field(default_factory=list)
	chat_system_instruction: str = Field(alias="chatSystemInstruction")
	exercises: LessonExercises = Field(default_factory=LessonExercises)


class Dictation(BaseModel):
	title: str
	transcript: str


class PronunciationWord(_CamelModel):
	word: str
	is_correct: bool = Field(alias="isCorrect")


class PronunciationFeedback(_CamelModel):
	words: List[PronunciationWord] = Field(default_factory=list)
	phonemes_to_improve: List[str] = Field(default_factory=list, alias="phonemesToImprove")


class WordDefinition(BaseModel):
	translation: str
	overview: str


class WordCorrection(BaseModel):
	original: str
	corrected: str
