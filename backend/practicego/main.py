import asyncio
import logging

from fastapi import FastAPI

from .db import Base, engine, get_db
from .cleanup import purge_stale_sessions
from .settings import settings
from .routers import health
from .routers import auth
from .routers import progress
from .routers import lessons
from .routers import practice
from .routers import chat

logger = logging.getLogger(__name__)


def configure_logging() -> None:
	logging.basicConfig(
		level=settings.log_level.upper(),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	logging.getLogger("httpx").setLevel(logging.WARNING)


app = FastAPI(title="PracticeGo API")
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(progress.router)
app.include_router(lessons.router)
app.include_router(practice.router)
app.include_router(chat.router)


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}


def _run_cleanup() -> None:
	removed_chats = chat.purge_idle_sessions()
	if removed_chats:
		logger.info("Dropped %d idle chat sessions", removed_chats)
	db = next(get_db())
	try:
		removed = purge_stale_sessions(db)
		if removed:
			logger.info("Purged %d stale auth sessions", removed)
	except Exception:
		logger.exception("Session cleanup failed")
	finally:
		db.close()


async def _cleanup_watcher():
	while True:
		await asyncio.sleep(24 * 60 * 60)
		_run_cleanup()


@app.on_event("startup")
async def startup_event():
	configure_logging()
	Base.metadata.create_all(bind=engine)
	_run_cleanup()
	asyncio.create_task(_cleanup_watcher())
