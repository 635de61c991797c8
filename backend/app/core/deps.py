import logging

from fastapi import Header, HTTPException

from app.services.curriculum import CurriculumStore, get_curriculum_store
from app.services.lesson_generation import LessonGenerationService, get_lesson_generation_service
from app.services.profile_store import ProfileStore, get_profile_store

logger = logging.getLogger("lessoncraft.auth")


def get_current_user_id(authorization: str = Header(None)) -> str:
    """Extract user_id from a Supabase JWT bearer token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authentication required")
    token = authorization.replace("Bearer ", "", 1)
    try:
        from app.services.supabase_client import get_supabase_client

        resp = get_supabase_client().auth.get_user(token)
        if not resp or not resp.user:
            raise HTTPException(status_code=401, detail="Invalid token")
        return resp.user.id
    except HTTPException:
        raise
    except Exception as exc:
        logger.warning("[auth] token rejected: %s", exc)
        raise HTTPException(status_code=401, detail=f"Authentication failed: {exc}")


def get_generation_service() -> LessonGenerationService:
    try:
        return get_lesson_generation_service()
    except ValueError as exc:
        # missing API key for the configured provider
        logger.error("[deps.get_generation_service] %s", exc)
        raise HTTPException(status_code=503, detail="Language model is not configured")


def get_profiles() -> ProfileStore:
    return get_profile_store()


def get_curricula() -> CurriculumStore:
    return get_curriculum_store()
