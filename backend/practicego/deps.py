from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends
from sqlalchemy.orm import Session

from .content import ContentService
from .db import get_db
from .gemini_client import GeminiClient
from .lessons import LessonStore
from .progress.clock import Clock, local_now
from .progress.service import ProgressService
from .routers.auth import User, get_current_user
from .settings import settings
from .storage import SqlKeyValueStore


def get_clock() -> Clock:
	return local_now


def get_progress_service(
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
	clock: Clock = Depends(get_clock),
) -> ProgressService:
	return ProgressService(SqlKeyValueStore(db, user.username), settings.progress_storage_key, clock=clock)


def get_lesson_store(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> LessonStore:
	return LessonStore(SqlKeyValueStore(db, user.username), settings.lessons_storage_key)


async def get_content_service() -> AsyncIterator[ContentService]:
	# Without an API key every content call serves its canned fallback
	client = GeminiClient() if settings.gemini_api_key else None
	try:
		yield ContentService(client)
	finally:
		if client is not None:
			await client.aclose()
