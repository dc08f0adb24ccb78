from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..content import (
	DEFAULT_SYSTEM_INSTRUCTION,
	SPEAKING_SCENARIOS,
	ContentService,
	SpeakingScenario,
	find_scenario,
	themed_instruction,
)
from ..corrections import CorrectionTracker, parse_reply
from ..deps import get_content_service, get_lesson_store, get_progress_service
from ..lessons import LessonStore
from ..progress import rewards
from ..progress.achievements import AchievementId
from ..progress.service import ActivityResult, ProgressService
from ..schemas import WordCorrection
from ..settings import settings
from .auth import User, get_current_user
from .progress import award

router = APIRouter(prefix="/chat", tags=["chat"], dependencies=[Depends(get_current_user)])
logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Ups, algo salió mal. La IA no está disponible en este momento, inténtalo de nuevo más tarde."
MAX_HISTORY_TURNS = 40


class ChatSession:
	def __init__(self, username: str, system_instruction: str, *, scenario_id: Optional[str] = None) -> None:
		self.session_id: str = uuid.uuid4().hex
		self.username = username
		self.system_instruction = system_instruction
		self.scenario_id = scenario_id
		self.history: List[Dict[str, str]] = []
		self.turns: int = 0
		self.corrections = CorrectionTracker()
		self.word_watcher_reported = False
		self.scenario_completed = False
		self.last_activity_at = datetime.utcnow()

	def remember(self, role: str, text: str) -> None:
		self.history.append({"role": role, "text": text})
		if len(self.history) > MAX_HISTORY_TURNS:
			del self.history[: len(self.history) - MAX_HISTORY_TURNS]
		# Gemini expects the conversation to open with a user turn
		while self.history and self.history[0]["role"] != "user":
			self.history.pop(0)


# In-process session storage; idle entries are dropped by purge_idle_sessions
_sessions: Dict[str, ChatSession] = {}


def purge_idle_sessions(now: Optional[datetime] = None) -> int:
	"""Drop chat sessions with no activity for ``CHAT_IDLE_HOURS``; returns how many."""
	hours = settings.chat_idle_hours
	if hours <= 0:
		return 0
	threshold = (now or datetime.utcnow()) - timedelta(hours=hours)
	stale = [sid for sid, state in _sessions.items() if state.last_activity_at < threshold]
	for sid in stale:
		_sessions.pop(sid, None)
	return len(stale)


class StartChatRequest(BaseModel):
	lesson_id: Optional[str] = None
	scenario_id: Optional[str] = None


class StartChatResponse(BaseModel):
	session_id: str
	scenario: Optional[SpeakingScenario] = None


class MessageRequest(BaseModel):
	session_id: str
	message: str = Field(min_length=1, max_length=2000)


class MessageResponse(BaseModel):
	reply: str
	corrections: List[WordCorrection] = Field(default_factory=list)
	distinct_corrections: int = 0
	progress: Optional[ActivityResult] = None
	word_watcher: Optional[ActivityResult] = None


class CompleteScenarioRequest(BaseModel):
	session_id: str


def _session_for(session_id: str, user: User) -> ChatSession:
	state = _sessions.get(session_id)
	if state is None or state.username != user.username:
		raise HTTPException(status_code=404, detail="chat session not found")
	state.last_activity_at = datetime.utcnow()
	return state


@router.get("/scenarios", response_model=List[SpeakingScenario])
def list_scenarios():
	return SPEAKING_SCENARIOS


@router.post("/start", response_model=StartChatResponse)
def start_chat(
	req: StartChatRequest,
	user: User = Depends(get_current_user),
	lessons: LessonStore = Depends(get_lesson_store),
):
	scenario = None
	instruction = DEFAULT_SYSTEM_INSTRUCTION
	if req.scenario_id:
		scenario = find_scenario(req.scenario_id)
		if scenario is None:
			raise HTTPException(status_code=404, detail="scenario not found")
		instruction = scenario.system_instruction
	elif req.lesson_id:
		lesson = lessons.get(req.lesson_id)
		if lesson is None:
			raise HTTPException(status_code=404, detail="lesson not found")
		instruction = themed_instruction(lesson)
	state = ChatSession(user.username, instruction, scenario_id=scenario.id if scenario else None)
	_sessions[state.session_id] = state
	return StartChatResponse(session_id=state.session_id, scenario=scenario)


@router.post("/message", response_model=MessageResponse)
async def send_message(
	req: MessageRequest,
	user: User = Depends(get_current_user),
	content: ContentService = Depends(get_content_service),
	progress: ProgressService = Depends(get_progress_service),
):
	state = _session_for(req.session_id, user)
	state.remember("user", req.message)
	try:
		raw = await content.chat(state.history, system_instruction=state.system_instruction)
	except Exception as e:
		logger.warning("Chat turn failed for session %s: %s", state.session_id, e)
		# Drop the unanswered turn so the learner can simply retry
		state.history.pop()
		return MessageResponse(reply=FALLBACK_REPLY)
	state.remember("model", raw)
	visible, corrections = parse_reply(raw)

	state.turns += 1
	# Scenario conversations are rewarded once, on completion
	result = None
	if state.scenario_id is None:
		token = AchievementId.FIRST_CHAT if state.turns == 1 else None
		result = award(progress, rewards.CHAT_TURN, "Interacción en Chat", token)

	distinct = state.corrections.add(corrections)
	watcher = None
	if state.corrections.earned is not None and not state.word_watcher_reported:
		watcher = award(progress, rewards.WORD_CORRECTIONS, "Corrección de Palabras", state.corrections.earned)
		state.word_watcher_reported = True
	return MessageResponse(
		reply=visible,
		corrections=corrections,
		distinct_corrections=distinct,
		progress=result,
		word_watcher=watcher,
	)


@router.post("/scenario/complete", response_model=ActivityResult)
def complete_scenario(
	req: CompleteScenarioRequest,
	user: User = Depends(get_current_user),
	progress: ProgressService = Depends(get_progress_service),
):
	state = _session_for(req.session_id, user)
	if state.scenario_id is None:
		raise HTTPException(status_code=400, detail="not a speaking scenario session")
	if state.scenario_completed:
		raise HTTPException(status_code=409, detail="scenario already completed")
	state.scenario_completed = True
	return award(progress, rewards.SPEAKING_SCENARIO, "Conversación Libre", AchievementId.SPEAKING_SCENARIO)


@router.delete("/{session_id}", status_code=204)
def end_chat(session_id: str, user: User = Depends(get_current_user)):
	_session_for(session_id, user)
	_sessions.pop(session_id, None)
