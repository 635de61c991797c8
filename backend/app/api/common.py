"""Helpers shared by the lesson, question and profile routers."""
import logging
from typing import Optional

from fastapi import HTTPException

from app.core.config import default_preferences
from app.models.lesson import LearningPreferences, StudentProfile
from app.services.curriculum import CurriculumStore, LessonLocation, find_lesson
from app.services.profile_store import ProfileStore

logger = logging.getLogger("lessoncraft.api")


def load_curriculum(curricula: CurriculumStore, curriculum_id: str) -> dict:
    try:
        curriculum = curricula.get_curriculum(curriculum_id)
    except Exception as exc:
        logger.error("[api.load_curriculum] DB error for %s: %s", curriculum_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load curriculum")
    if curriculum is None:
        raise HTTPException(status_code=404, detail="Curriculum not found")
    return curriculum


def load_lesson(
    curriculum: dict,
    lesson_id: str,
    subject_id: Optional[str] = None,
    unit_id: Optional[str] = None,
    chapter_id: Optional[str] = None,
) -> LessonLocation:
    location = find_lesson(curriculum, lesson_id, subject_id, unit_id, chapter_id)
    if location is None:
        raise HTTPException(status_code=404, detail="Lesson not found in curriculum")
    return location


def load_or_create_profile(profiles: ProfileStore, user_id: str) -> StudentProfile:
    try:
        profile = profiles.get_profile(user_id)
        if profile is None:
            profile = profiles.create_profile(user_id, default_preferences())
    except Exception as exc:
        logger.error("[api.load_or_create_profile] DB error for %s: %s", user_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load profile")
    return profile


def resolve_preferences(
    requested: Optional[LearningPreferences],
    profile: Optional[StudentProfile],
) -> LearningPreferences:
    """Request preferences win, then the stored profile, then the configured default."""
    if requested is not None:
        return requested
    if profile is not None:
        return profile.learning_preferences
    return default_preferences()
