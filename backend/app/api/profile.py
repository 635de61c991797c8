import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.api.common import load_or_create_profile
from app.core.deps import get_current_user_id, get_profiles
from app.models.lesson import InteractionReport, LearningPreferences, SkillEntry
from app.services.lesson_generation import LessonGenerationService
from app.services.profile_store import ProfileStore
from app.services.telemetry import emit_event, instrument

logger = logging.getLogger("lessoncraft.profile")
router = APIRouter(prefix="/api/profile", tags=["profile"])


class UpdateProfileRequest(BaseModel):
    learning_preferences: Optional[LearningPreferences] = None
    skill_profile: Optional[dict[str, SkillEntry]] = None


@router.get("")
def get_profile(
    user_id: str = Depends(get_current_user_id),
    profiles: ProfileStore = Depends(get_profiles),
):
    """Return the student's profile, creating the default one on first access."""
    profile = load_or_create_profile(profiles, user_id)
    return {"success": True, "data": profile.model_dump(mode="json")}


@router.put("")
def update_profile(
    request: UpdateProfileRequest,
    user_id: str = Depends(get_current_user_id),
    profiles: ProfileStore = Depends(get_profiles),
):
    """Replace learning preferences and/or the whole skill profile."""
    load_or_create_profile(profiles, user_id)
    try:
        if request.learning_preferences is not None:
            profiles.save_preferences(user_id, request.learning_preferences)
        if request.skill_profile is not None:
            profiles.save_skill_profile(user_id, request.skill_profile)
        profile = profiles.get_profile(user_id)
    except Exception as exc:
        logger.error("[profile.update] DB error for %s: %s", user_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update profile")
    return {
        "success": True,
        "data": profile.model_dump(mode="json"),
        "message": "Profile updated successfully",
    }


@router.post("")
@instrument(route="/api/profile", version="v1")
def record_interaction(
    report: InteractionReport,
    user_id: str = Depends(get_current_user_id),
    profiles: ProfileStore = Depends(get_profiles),
):
    """Apply one interaction report to the student's mastery for a lesson."""
    try:
        skill_profile = profiles.get_skill_profile(user_id)
        entry, updated = LessonGenerationService.record_interaction(skill_profile, report)
        profiles.save_skill_profile(user_id, updated)
    except Exception as exc:
        logger.error("[profile.record_interaction] DB error for %s: %s", user_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update skill profile")

    emit_event(
        "interaction_recorded",
        route="/api/profile",
        version="v1",
        student_id=user_id,
        lesson_id=report.lesson_id,
        ok=True,
    )
    return {
        "success": True,
        "data": {
            "lesson_id": report.lesson_id,
            "skill_data": entry.model_dump(mode="json"),
        },
        "message": "Skill profile updated successfully",
    }
