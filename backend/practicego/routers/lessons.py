from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from ..content import ContentService
from ..deps import get_content_service, get_lesson_store, get_progress_service
from ..lessons import LessonStore
from ..progress import rewards
from ..progress.service import ActivityResult, ProgressService
from ..schemas import Dictation, FillInTheBlankExercise, GeneratedLessonMaterials, Lesson, LessonOutline
from .auth import get_current_user
from .progress import award

router = APIRouter(prefix="/lessons", tags=["lessons"], dependencies=[Depends(get_current_user)])

MAX_PDF_BYTES = 10 * 1024 * 1024


class CreateLessonRequest(BaseModel):
	title: str = Field(min_length=1, max_length=200)
	theme: str = Field(min_length=1, max_length=500)
	vocabulary: List[str] = Field(default_factory=list)


class MaterialsResponse(BaseModel):
	lesson: Lesson
	materials: GeneratedLessonMaterials
	progress: ActivityResult


def _lesson_or_404(store: LessonStore, lesson_id: str) -> Lesson:
	lesson = store.get(lesson_id)
	if lesson is None:
		raise HTTPException(status_code=404, detail="lesson not found")
	return lesson


@router.get("", response_model=List[Lesson])
def list_lessons(store: LessonStore = Depends(get_lesson_store)):
	return store.all_lessons()


@router.post("", response_model=Lesson, status_code=201)
def create_lesson(req: CreateLessonRequest, store: LessonStore = Depends(get_lesson_store)):
	return store.add_custom(req.title, req.theme, req.vocabulary)


@router.post("/from-pdf", response_model=LessonOutline)
async def outline_from_pdf(
	file: UploadFile = File(...),
	content: ContentService = Depends(get_content_service),
):
	# Returns a draft; the client confirms it through POST /lessons
	data = await file.read()
	if not data:
		raise HTTPException(status_code=400, detail="empty upload")
	if len(data) > MAX_PDF_BYTES:
		raise HTTPException(status_code=413, detail="file too large")
	return await content.extract_lesson_from_pdf(data, file.content_type or "application/pdf")


@router.post("/{lesson_id}/materials", response_model=MaterialsResponse)
async def lesson_materials(
	lesson_id: str,
	store: LessonStore = Depends(get_lesson_store),
	content: ContentService = Depends(get_content_service),
	progress: ProgressService = Depends(get_progress_service),
):
	lesson = _lesson_or_404(store, lesson_id)
	result = award(progress, rewards.DAILY_LESSON, "Clase del Día completada")
	materials = await content.generate_lesson_materials(lesson)
	return MaterialsResponse(lesson=lesson, materials=materials, progress=result)


@router.post("/{lesson_id}/exercises", response_model=List[FillInTheBlankExercise])
async def more_exercises(
	lesson_id: str,
	store: LessonStore = Depends(get_lesson_store),
	content: ContentService = Depends(get_content_service),
):
	return await content.generate_more_exercises(_lesson_or_404(store, lesson_id))


@router.post("/{lesson_id}/dictation", response_model=Dictation)
async def dictation(
	lesson_id: str,
	store: LessonStore = Depends(get_lesson_store),
	content: ContentService = Depends(get_content_service),
):
	return await content.generate_dictation(_lesson_or_404(store, lesson_id))
