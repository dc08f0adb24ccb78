"""
Generated learning content
==========================

Thin layer over :class:`GeminiClient` producing lesson materials, extra
exercises, dictations, reading texts, simulated pronunciation reports, word
definitions and lesson outlines from uploaded PDFs.

Every operation degrades to canned content when the model is unavailable or
answers with something that does not parse, so a Gemini outage never blocks
a practice session. Failures are logged at WARNING level.
"""

from __future__ import annotations

import base64
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, TypeAdapter

from .gemini_client import GeminiClient, strip_code_fence
from .schemas import (
	Dictation,
	FillInTheBlankExercise,
	Flashcard,
	GeneratedLessonMaterials,
	Lesson,
	LessonExercises,
	LessonOutline,
	PronunciationFeedback,
	PronunciationWord,
	WordDefinition,
)

logger = logging.getLogger(__name__)


DEFAULT_SYSTEM_INSTRUCTION = """You are Kandy, a friendly and patient English tutor for A1 level students.
- Your name is Kandy.
- Keep your responses very short and simple.
- Use only A1 level vocabulary.
- Ask simple, short questions to keep the conversation going (e.g., "What is your name?", "How are you?", "What is your favorite color?").
- Talk about basic topics like introductions, family, food, and daily routines.
- Use emojis to be more friendly. 😊
- If the user makes a spelling or grammar mistake, gently correct them in your conversational response. For example, if they say 'I has a dog', you can say 'That's great! We say "I have a dog". What is your dog's name?'.
- IMPORTANT: After your conversational response, if you detected any mistakes, add a special JSON block on a new line at the very end of your output. The format must be exactly: <!-- CORRECTIONS: [{"original": "word", "corrected": "word"}] -->. Only include this block if there are corrections. Do not include it otherwise. For example, if the user writes "My name are Tom", you should include <!-- CORRECTIONS: [{"original": "are", "corrected": "is"}] -->."""

FALLBACK_READING_TEXT = "My name is Tom. I have a cat. My cat is white. We play every day."

# Gemini responseSchema fragments
_STRING = {"type": "STRING"}
_EXERCISE_SCHEMA = {
	"type": "OBJECT",
	"properties": {
		"question": {"type": "STRING", "description": "The sentence with '___' as a blank."},
		"answer": {"type": "STRING", "description": "The correct answer for the blank."},
	},
	"required": ["question", "answer"],
}
MATERIALS_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {
		"readingText": {"type": "STRING", "description": "The generated story."},
		"flashcards": {
			"type": "ARRAY",
			"items": {
				"type": "OBJECT",
				"properties": {"english": _STRING, "spanish": _STRING, "example": _STRING},
			},
		},
		"chatSystemInstruction": {"type": "STRING"},
		"exercises": {
			"type": "OBJECT",
			"properties": {"fillInTheBlank": {"type": "ARRAY", "items": _EXERCISE_SCHEMA}},
		},
	},
	"required": ["readingText", "flashcards", "chatSystemInstruction", "exercises"],
}
EXERCISES_SCHEMA: Dict[str, Any] = {"type": "ARRAY", "items": _EXERCISE_SCHEMA}
DICTATION_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {"title": _STRING, "transcript": _STRING},
	"required": ["title", "transcript"],
}
PRONUNCIATION_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {
		"words": {
			"type": "ARRAY",
			"items": {"type": "OBJECT", "properties": {"word": _STRING, "isCorrect": {"type": "BOOLEAN"}}},
		},
		"phonemesToImprove": {"type": "ARRAY", "items": _STRING},
	},
}
DEFINITION_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {"translation": _STRING, "overview": _STRING},
}
OUTLINE_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {
		"title": _STRING,
		"theme": _STRING,
		"vocabulary": {"type": "ARRAY", "items": _STRING},
	},
	"required": ["title", "theme", "vocabulary"],
}

_exercises_adapter = TypeAdapter(List[FillInTheBlankExercise])


def _lesson_header(lesson: Lesson) -> str:
	return (
		f'Lesson Title: "{lesson.title}"\n'
		f"Vocabulary: {', '.join(lesson.vocabulary)}\n"
		f'Theme: "{lesson.theme}"'
	)


def themed_instruction(lesson: Lesson) -> str:
	return (
		f"{DEFAULT_SYSTEM_INSTRUCTION}\n"
		f"Your main goal for this conversation is to practice the topic: '{lesson.theme}'. "
		f"Try to use words like: {', '.join(lesson.vocabulary)}."
	)


def _strip_punctuation(word: str) -> str:
	return re.sub(r"[.,]", "", word)


class ContentService:
	def __init__(self, client: Optional[GeminiClient]) -> None:
		self.client = client

	def _require_client(self) -> GeminiClient:
		if self.client is None:
			raise RuntimeError("Gemini is not configured")
		return self.client

	async def _json(self, prompt: str, schema: Dict[str, Any]) -> Any:
		return await self._require_client().generate_json(prompt, schema)

	async def chat(self, history: List[Dict[str, str]], *, system_instruction: str) -> str:
		"""One tutor turn. Unlike the generators this raises on failure; the caller decides what to show."""
		return await self._require_client().chat(history, system_instruction=system_instruction)

	async def generate_lesson_materials(self, lesson: Lesson) -> GeneratedLessonMaterials:
		prompt = (
			"Based on the following A1 English lesson, generate practice materials.\n"
			f"{_lesson_header(lesson)}\n\n"
			"Generate the following materials in a single JSON object:\n"
			'1. "readingText": A very simple story (3-5 short sentences) for an A1 learner using the lesson\'s vocabulary and theme.\n'
			'2. "flashcards": Up to 20 flashcards for the most important vocabulary. Each has "english" (from the vocabulary list), "spanish" (its translation) and "example" (a simple A1 sentence).\n'
			'3. "chatSystemInstruction": A system instruction for the chatbot tutor Kandy. It MUST combine the standard Kandy persona with a directive to focus the conversation on the lesson.\n'
			f"The standard persona is: \"{DEFAULT_SYSTEM_INSTRUCTION}\"\n"
			f"The directive is: \"Your main goal for this conversation is to practice the topic: '{lesson.theme}'. Try to use words like: {', '.join(lesson.vocabulary)}.\"\n"
			'4. "exercises": An object with a "fillInTheBlank" array of 15 questions. Each has "question" (an A1 sentence with "___" as the blank) and "answer" (the vocabulary word that fits).'
		)
		try:
			data = await self._json(prompt, MATERIALS_SCHEMA)
			return GeneratedLessonMaterials.model_validate(data)
		except Exception as e:
			logger.warning("Error generating lesson materials for %s (fallback used): %s", lesson.id, e)
		vocab = lesson.vocabulary[:5]
		first = vocab[0] if vocab else "new things"
		second = vocab[1] if len(vocab) > 1 else "English"
		return GeneratedLessonMaterials(
			reading_text=(
				f"This is a practice lesson about {lesson.theme}. My name is Alex. "
				f"I like to learn about {first}. Every day, I practice {second}. It is fun."
			),
			flashcards=[Flashcard(english=v, spanish=f"({v} en español)", example=f"This is an example for {v}.") for v in vocab],
			chat_system_instruction=themed_instruction(lesson),
			exercises=LessonExercises(
				fill_in_the_blank=[FillInTheBlankExercise(question="This is a sentence with ___.", answer=v) for v in vocab],
			),
		)

	async def generate_more_exercises(self, lesson: Lesson) -> List[FillInTheBlankExercise]:
		prompt = (
			"Based on the following A1 English lesson, generate a new and different set of 15 practice exercises.\n"
			f"{_lesson_header(lesson)}\n\n"
			'Generate ONLY a JSON array of 15 fill-in-the-blank objects, each with "question" '
			'(a simple A1 sentence with "___" as the blank) and "answer" (the vocabulary word that fits).\n'
			"Do not repeat questions that might have been generated before. Be creative."
		)
		try:
			data = await self._json(prompt, EXERCISES_SCHEMA)
			exercises = _exercises_adapter.validate_python(data)
			if exercises:
				return exercises
			raise ValueError("empty exercise list")
		except Exception as e:
			logger.warning("Error generating more exercises for %s (fallback used): %s", lesson.id, e)
		return [
			FillInTheBlankExercise(question="This is a ___ exercise.", answer="practice"),
			FillInTheBlankExercise(question="I like to ___ English.", answer="learn"),
			FillInTheBlankExercise(question="Let's ___ again tomorrow.", answer="practice"),
			FillInTheBlankExercise(question="Can you ___ this sentence?", answer="read"),
			FillInTheBlankExercise(question="Please ___ the blank.", answer="fill"),
		]

	async def generate_dictation(self, lesson: Lesson) -> Dictation:
		prompt = (
			f'Based on the A1 English lesson titled "{lesson.title}" with the theme "{lesson.theme}" '
			f"and vocabulary [{', '.join(lesson.vocabulary)}], generate a practice dictation.\n\n"
			"The response must be a JSON object with two properties:\n"
			'1. "title": A short, engaging title for the dictation, related to the lesson.\n'
			'2. "transcript": A single, simple sentence for the dictation. It MUST be under 100 characters and use vocabulary from the lesson.'
		)
		try:
			data = await self._json(prompt, DICTATION_SCHEMA)
			dictation = Dictation.model_validate(data)
			if dictation.transcript.strip():
				return dictation
			raise ValueError("empty transcript")
		except Exception as e:
			logger.warning("Error generating dictation for %s (fallback used): %s", lesson.id, e)
		return Dictation(title="Práctica de Dictado", transcript="Let's practice some English words today.")

	async def generate_reading_text(self) -> str:
		prompt = (
			"Generate a very simple story for an A1 English learner. It must be between 3 and 5 short sentences. "
			"Use basic vocabulary. For example, talk about a cat, a house, or a family."
		)
		try:
			text = (await self._require_client().generate(prompt)).strip()
			if text:
				return text
			raise ValueError("empty reading text")
		except Exception as e:
			logger.warning("Error generating reading text (fallback used): %s", e)
		return FALLBACK_READING_TEXT

	async def generate_pronunciation_feedback(self, text: str) -> PronunciationFeedback:
		original_words = _strip_punctuation(text).split()
		prompt = (
			f'Analyze the following A1 English text and create a simulated pronunciation report. The text is: "{text}".\n'
			"Follow these rules:\n"
			"1. Mark about 80-90% of the words as correct.\n"
			"2. Randomly select 1 or 2 words and mark them as incorrect.\n"
			'3. For the incorrect words, suggest 2-3 simple phonemes to improve, like "/æ/ as in cat" or "/iː/ as in see".'
		)
		try:
			data = await self._json(prompt, PRONUNCIATION_SCHEMA)
			parsed = PronunciationFeedback.model_validate(data)
		except Exception as e:
			logger.warning("Error generating pronunciation feedback (fallback used): %s", e)
			return PronunciationFeedback(
				words=[PronunciationWord(word=w, is_correct=i != 2) for i, w in enumerate(original_words)],
				phonemes_to_improve=["/æ/ as in 'cat'", "/ð/ as in 'the'"],
			)
		# Re-align with the learner's text; words the model skipped count as correct
		verdicts: Dict[str, bool] = {}
		for item in parsed.words:
			verdicts.setdefault(_strip_punctuation(item.word).lower(), item.is_correct)
		return PronunciationFeedback(
			words=[PronunciationWord(word=w, is_correct=verdicts.get(w.lower(), True)) for w in original_words],
			phonemes_to_improve=parsed.phonemes_to_improve,
		)

	async def get_word_definition(self, word: str) -> WordDefinition:
		clean = re.sub(r"[.,!?]", "", word.lower()).strip()
		if not clean:
			return WordDefinition(translation="-", overview="Esto es puntuación o un espacio.")
		prompt = (
			f'Provide a simple Spanish translation and a brief, A1-level English overview for the word: "{clean}". '
			"The overview should explain its main meaning in a friendly way, as if for a beginner."
		)
		try:
			data = await self._json(prompt, DEFINITION_SCHEMA)
			return WordDefinition.model_validate(data)
		except Exception as e:
			logger.warning("Error getting definition for %r (fallback used): %s", word, e)
		return WordDefinition(
			translation="No disponible",
			overview="No se pudo obtener la definición. Es posible que se haya superado la cuota de la API. Inténtalo de nuevo más tarde.",
		)

	async def extract_lesson_from_pdf(self, data: bytes, mime_type: str = "application/pdf") -> LessonOutline:
		prompt = (
			"You are an expert in analyzing educational materials for A1 English learners. Analyze the provided PDF document, "
			"which is a page or chapter from an English textbook, and extract a lesson plan:\n"
			"1. Lesson Title: the main title of the unit or lesson.\n"
			'2. Main Theme: a short sentence describing what the lesson is about (e.g., "Talking about hobbies and free time activities.").\n'
			"3. Key Vocabulary: a list of the most important new words or short phrases from the lesson.\n\n"
			"Return the information in a clean JSON object with keys title, theme and vocabulary."
		)
		parts = [
			{"text": prompt},
			{"inlineData": {"mimeType": mime_type, "data": base64.b64encode(data).decode("ascii")}},
		]
		try:
			raw = await self._require_client().generate_multimodal(parts, schema=OUTLINE_SCHEMA)
			return LessonOutline.model_validate_json(strip_code_fence(raw))
		except Exception as e:
			logger.warning("Error extracting lesson from PDF (fallback used): %s", e)
		return LessonOutline(
			title="Lección de Muestra (PDF)",
			theme="Hablar sobre rutinas diarias",
			vocabulary=["wake up", "eat breakfast", "go to school", "have lunch", "do homework"],
		)


class SpeakingScenario(BaseModel):
	id: str
	title: str
	description: str
	system_instruction: str


SPEAKING_SCENARIOS: List[SpeakingScenario] = [
	SpeakingScenario(
		id="restaurant",
		title="En el Restaurante",
		description="Pide comida y bebida en un restaurante.",
		system_instruction='You are Kandy, a friendly restaurant waitress. Your customer is an A1 English learner. Start by greeting them and asking "What would you like to order?". Your goal is to take their order. Use simple A1 vocabulary related to food (e.g., "water", "pizza", "salad", "chicken", "apple juice", "dessert") and restaurant interactions (e.g., "order", "anything else?", "enjoy your meal"). Keep your responses very short and encouraging.',
	),
	SpeakingScenario(
		id="airport",
		title="En el Aeropuerto",
		description="Haz el check-in para un vuelo.",
		system_instruction='You are Kandy, a friendly airline check-in agent. Your customer is an A1 English learner. Start by greeting them and asking "Where are you flying to today?". Your goal is to check them in for their flight. Use simple A1 vocabulary related to travel (e.g., "passport", "ticket", "bag", "window seat", "gate", "flight"). Keep your responses very short and clear.',
	),
	SpeakingScenario(
		id="interview",
		title="Entrevista de Trabajo",
		description="Responde a preguntas básicas en una entrevista.",
		system_instruction='You are Kandy, a friendly job interviewer. The candidate is an A1 English learner. Start by saying "Hello, thank you for coming. Tell me about yourself." Your goal is to ask simple job interview questions. Use basic A1 vocabulary (e.g., "name", "work", "like", "good at", "job"). Keep your questions very short and simple.',
	),
	SpeakingScenario(
		id="cinema",
		title="En el Cine",
		description="Compra entradas para ver una película.",
		system_instruction='You are Kandy, a friendly cinema ticket seller. The customer is an A1 English learner. Start by asking, "Hello! Which movie would you like to see?". Your goal is to sell them a ticket. Use simple A1 vocabulary like "movie", "ticket", "how many", "time", "popcorn", "drink". Keep your interaction short and helpful.',
	),
	SpeakingScenario(
		id="taxi",
		title="En un Taxi",
		description="Dile al conductor a dónde quieres ir.",
		system_instruction='You are Kandy, a friendly taxi driver. The passenger is an A1 English learner. Start the conversation with "Good morning! Where to?". Your goal is to understand their destination. Use simple A1 vocabulary like "go to", "address", "please", "here is fine", "thank you". Keep your responses very short.',
	),
	SpeakingScenario(
		id="university",
		title="En la Universidad",
		description="Pide indicaciones para llegar a un aula.",
		system_instruction='You are Kandy, a helpful university student. An A1 English learner asks you for directions. Start with "Hi! Can I help you?". Your goal is to help them find a classroom. Use simple A1 vocabulary like "classroom", "where is", "go straight", "turn left", "turn right", "next to". Keep your directions simple.',
	),
	SpeakingScenario(
		id="work",
		title="Día en el Trabajo",
		description="Saluda a un colega y habla de una tarea.",
		system_instruction='You are Kandy, a friendly coworker. You are talking to a new colleague who is an A1 English learner. Start by saying, "Good morning! How are you today?". Your goal is to have a short, simple chat about work. Use A1 vocabulary like "email", "meeting", "report", "help", "computer", "coffee break".',
	),
]


def find_scenario(scenario_id: str) -> Optional[SpeakingScenario]:
	return next((s for s in SPEAKING_SCENARIOS if s.id == scenario_id), None)
