import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.api.common import load_curriculum, load_lesson, load_or_create_profile, resolve_preferences
from app.core.deps import get_current_user_id, get_curricula, get_generation_service, get_profiles
from app.models.lesson import Difficulty, LearningPreferences
from app.services.ai import GenerationError
from app.services.curriculum import CurriculumStore
from app.services.lesson_generation import MAX_QUESTIONS, MIN_QUESTIONS, LessonGenerationService
from app.services.mastery import default_skill_entry
from app.services.profile_store import ProfileStore
from app.services.telemetry import emit_event, instrument

logger = logging.getLogger("lessoncraft.questions")
router = APIRouter(prefix="/api/questions", tags=["questions"])


class QuestionGenerationRequest(BaseModel):
    curriculum_id: str
    lesson_id: str
    difficulty: Difficulty = "medium"
    count: int = Field(default=3, ge=MIN_QUESTIONS, le=MAX_QUESTIONS)
    learning_preferences: Optional[LearningPreferences] = None


@router.post("/generate")
@instrument(route="/api/questions/generate", version="v1")
async def generate_questions(
    request: QuestionGenerationRequest,
    user_id: str = Depends(get_current_user_id),
    service: LessonGenerationService = Depends(get_generation_service),
    profiles: ProfileStore = Depends(get_profiles),
    curricula: CurriculumStore = Depends(get_curricula),
):
    """Generate practice questions, dampening difficulty by the student's mastery."""
    curriculum = load_curriculum(curricula, request.curriculum_id)
    location = load_lesson(curriculum, request.lesson_id)

    profile = load_or_create_profile(profiles, user_id)
    skill = profile.skill_profile.get(request.lesson_id) or default_skill_entry()
    preferences = resolve_preferences(request.learning_preferences, profile)

    try:
        question_set = await service.generate_questions(
            location.lesson,
            request.difficulty,
            request.count,
            preferences,
            mastery_score=skill.mastery_score,
        )
    except GenerationError as exc:
        logger.error("[questions.generate] lesson=%s: %s", request.lesson_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate practice questions")

    emit_event(
        "questions_generated",
        route="/api/questions/generate",
        version="v1",
        student_id=user_id,
        lesson_id=request.lesson_id,
        difficulty=question_set.difficulty,
        ok=True,
        dropped_blocks=question_set.dropped_blocks,
        padded=question_set.padded,
    )

    return {
        "success": True,
        "data": {
            "questions": [q.model_dump(exclude_none=True) for q in question_set.questions],
            "lesson": {
                "id": location.lesson.lesson_id,
                "name": location.lesson.name,
                "objectives": location.lesson.objectives,
            },
            "difficulty": question_set.difficulty,
            "student_mastery": {
                "score": skill.mastery_score,
                "confidence": skill.confidence,
            },
            "dropped_blocks": question_set.dropped_blocks,
            "padded": question_set.padded,
            "generated_at": datetime.now(timezone.utc).isoformat(),
        },
    }
