import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.api.common import load_curriculum, load_lesson, resolve_preferences
from app.core.deps import get_current_user_id, get_curricula, get_generation_service, get_profiles
from app.models.lesson import LearningPreferences
from app.services.ai import GenerationError
from app.services.curriculum import CurriculumStore
from app.services.lesson_generation import LessonGenerationService
from app.services.profile_store import ProfileStore
from app.services.telemetry import instrument

logger = logging.getLogger("lessoncraft.lessons")
router = APIRouter(prefix="/api/lessons", tags=["lessons"])


class LessonGenerationRequest(BaseModel):
    curriculum_id: str
    lesson_id: str
    subject_id: Optional[str] = None
    unit_id: Optional[str] = None
    chapter_id: Optional[str] = None
    learning_preferences: Optional[LearningPreferences] = None


@router.post("/generate")
@instrument(route="/api/lessons/generate", version="v1")
async def generate_lesson(
    request: LessonGenerationRequest,
    user_id: str = Depends(get_current_user_id),
    service: LessonGenerationService = Depends(get_generation_service),
    profiles: ProfileStore = Depends(get_profiles),
    curricula: CurriculumStore = Depends(get_curricula),
):
    """Generate a personalised lesson for one curriculum lesson."""
    curriculum = load_curriculum(curricula, request.curriculum_id)
    location = load_lesson(
        curriculum,
        request.lesson_id,
        subject_id=request.subject_id,
        unit_id=request.unit_id,
        chapter_id=request.chapter_id,
    )

    profile = None
    if request.learning_preferences is None:
        try:
            profile = profiles.get_profile(user_id)
        except Exception as exc:
            # stored preferences are optional here; fall back to the default
            logger.warning("[lessons.generate] profile lookup failed for %s: %s", user_id, exc)
    preferences = resolve_preferences(request.learning_preferences, profile)

    try:
        lesson = await service.generate_lesson(location.lesson, preferences)
    except GenerationError as exc:
        logger.error("[lessons.generate] lesson=%s: %s", request.lesson_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate lesson content")

    return {
        "success": True,
        "data": {
            "lesson": lesson.model_dump(),
            "curriculum": {
                "id": request.curriculum_id,
                "country": curriculum.get("country"),
                "grade": curriculum.get("grade"),
                "subject": location.subject_name,
            },
            "generated_at": datetime.now(timezone.utc).isoformat(),
        },
    }
