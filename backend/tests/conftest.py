import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from practicego.storage import InMemoryKeyValueStore
from practicego.progress.service import ProgressService

from helpers import PROGRESS_KEY, FakeClock, FakeGemini, at


@pytest.fixture
def clock():
	return FakeClock(at(2024, 3, 10, 9, 30))


@pytest.fixture
def kv():
	return InMemoryKeyValueStore()


@pytest.fixture
def service(kv, clock):
	return ProgressService(kv, PROGRESS_KEY, clock=clock)


@pytest.fixture
def gemini():
	return FakeGemini()


@pytest.fixture
def api(clock, gemini):
	"""TestClient on an in-memory database, fake clock and fake Gemini, already logged in."""
	from practicego.content import ContentService
	from practicego.db import Base, get_db
	from practicego.deps import get_clock, get_content_service
	from practicego.main import app
	from practicego.routers import chat
	from practicego.settings import settings

	engine = create_engine(
		"sqlite://",
		connect_args={"check_same_thread": False},
		poolclass=StaticPool,
		future=True,
	)
	Base.metadata.create_all(bind=engine)
	TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)

	def override_db():
		db = TestingSession()
		try:
			yield db
		finally:
			db.close()

	app.dependency_overrides[get_db] = override_db
	app.dependency_overrides[get_clock] = lambda: clock
	app.dependency_overrides[get_content_service] = lambda: ContentService(gemini)

	client = TestClient(app)
	resp = client.post("/auth/token", data={"username": settings.app_username, "password": settings.app_password})
	assert resp.status_code == 200
	client.headers["Authorization"] = f"Bearer {resp.json()['access_token']}"
	yield client

	app.dependency_overrides.clear()
	chat._sessions.clear()
	engine.dispose()
