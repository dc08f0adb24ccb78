from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ..deps import get_clock, get_progress_service
from ..progress.achievements import CATALOG, Achievement, AchievementId
from ..progress.clock import Clock
from ..progress.errors import InvalidActivityError
from ..progress.ledger import CalendarDay, calendar_view
from ..progress.record import ProgressRecord
from ..progress.service import ActivityResult, ProgressService
from .auth import get_current_user

router = APIRouter(prefix="/progress", tags=["progress"], dependencies=[Depends(get_current_user)])


class ActivityRequest(BaseModel):
	points: int
	activity: str = Field(min_length=1, max_length=120)
	achievement: Optional[str] = None


class AchievementStatus(Achievement):
	unlocked: bool


def award(service: ProgressService, points: int, activity: str, achievement=None) -> ActivityResult:
	"""Record an activity on behalf of a feature endpoint, mapping bad input to 422."""
	try:
		return service.add_points(points, activity, achievement)
	except InvalidActivityError as e:
		raise HTTPException(status_code=422, detail=str(e))


@router.get("", response_model=ProgressRecord)
def get_progress(service: ProgressService = Depends(get_progress_service)):
	return service.get_progress()


@router.post("/activity", response_model=ActivityResult)
def record_activity(req: ActivityRequest, service: ProgressService = Depends(get_progress_service)):
	return award(service, req.points, req.activity, req.achievement)


@router.get("/achievements", response_model=List[AchievementStatus])
def list_achievements(service: ProgressService = Depends(get_progress_service)):
	unlocked = set(service.get_progress().achievements)
	return [
		AchievementStatus(**achievement.model_dump(), unlocked=achievement_id in unlocked)
		for achievement_id, achievement in CATALOG.items()
	]


@router.get("/achievements/{achievement_id}", response_model=Achievement)
def get_achievement(achievement_id: AchievementId):
	return CATALOG[achievement_id]


@router.get("/calendar", response_model=List[CalendarDay])
def get_calendar(
	days: int = Query(default=30, ge=1, le=366),
	service: ProgressService = Depends(get_progress_service),
	clock: Clock = Depends(get_clock),
):
	return calendar_view(service.get_progress(), clock(), days=days)
