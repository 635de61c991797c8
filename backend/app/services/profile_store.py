import logging
from typing import Optional

from app.models.lesson import LearningPreferences, SkillEntry, StudentProfile

logger = logging.getLogger("lessoncraft.profile_store")


def _skill_profile_to_json(profile: dict[str, SkillEntry]) -> dict:
    return {lesson_id: entry.model_dump(mode="json") for lesson_id, entry in profile.items()}


def _split_skill_profile(data: Optional[dict]) -> tuple[dict[str, SkillEntry], dict]:
    """Decode stored JSON into (readable entries, raw entries that failed validation)."""
    readable: dict[str, SkillEntry] = {}
    unreadable: dict = {}
    for lesson_id, raw in (data or {}).items():
        try:
            readable[lesson_id] = SkillEntry.model_validate(raw)
        except ValueError as exc:
            logger.warning("Unreadable skill entry %r kept as stored: %s", lesson_id, exc)
            unreadable[lesson_id] = raw
    return readable, unreadable


def _skill_profile_from_json(data: Optional[dict]) -> dict[str, SkillEntry]:
    return _split_skill_profile(data)[0]


class ProfileStore:
    """
    Per-student skill profile (lesson_id -> SkillEntry) and learning preferences.

    Writes replace the whole skill mapping. Concurrent read-modify-write of the
    same student's mapping is not serialized here.
    """

    def get_profile(self, user_id: str) -> Optional[StudentProfile]:
        raise NotImplementedError

    def create_profile(self, user_id: str, preferences: LearningPreferences) -> StudentProfile:
        raise NotImplementedError

    def save_skill_profile(self, user_id: str, skill_profile: dict[str, SkillEntry]) -> None:
        raise NotImplementedError

    def save_preferences(self, user_id: str, preferences: LearningPreferences) -> None:
        raise NotImplementedError

    def get_skill_profile(self, user_id: str) -> dict[str, SkillEntry]:
        profile = self.get_profile(user_id)
        return dict(profile.skill_profile) if profile else {}


class InMemoryProfileStore(ProfileStore):
    def __init__(self, default_preferences: Optional[LearningPreferences] = None):
        self._data: dict[str, StudentProfile] = {}
        self._default_preferences = default_preferences

    def _defaults(self) -> LearningPreferences:
        if self._default_preferences is None:
            from app.core.config import default_preferences
            self._default_preferences = default_preferences()
        return self._default_preferences

    def get_profile(self, user_id: str) -> Optional[StudentProfile]:
        profile = self._data.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    def create_profile(self, user_id: str, preferences: LearningPreferences) -> StudentProfile:
        profile = StudentProfile(user_id=user_id, skill_profile={}, learning_preferences=preferences)
        self._data[user_id] = profile
        return profile.model_copy(deep=True)

    def save_skill_profile(self, user_id: str, skill_profile: dict[str, SkillEntry]) -> None:
        current = self._data.get(user_id)
        prefs = current.learning_preferences if current else self._defaults()
        self._data[user_id] = StudentProfile(
            user_id=user_id, skill_profile=dict(skill_profile), learning_preferences=prefs
        )

    def save_preferences(self, user_id: str, preferences: LearningPreferences) -> None:
        current = self._data.get(user_id)
        skills = current.skill_profile if current else {}
        self._data[user_id] = StudentProfile(
            user_id=user_id, skill_profile=skills, learning_preferences=preferences
        )


class SupabaseProfileStore(ProfileStore):
    """Backed by the `student_profiles` table (user_id, skill_profile, learning_preferences)."""

    def __init__(self, supabase_client, default_preferences: LearningPreferences):
        self.sb = supabase_client
        self._default_preferences = default_preferences

    def _fetch_row(self, user_id: str) -> Optional[dict]:
        r = (
            self.sb.table("student_profiles")
            .select("*")
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )
        return getattr(r, "data", None) or None

    def _preferences(self, row: dict) -> LearningPreferences:
        prefs_raw = row.get("learning_preferences")
        try:
            return LearningPreferences.model_validate(prefs_raw) if prefs_raw else self._default_preferences
        except ValueError as exc:
            logger.warning("Invalid stored preferences for %s: %s", row.get("user_id"), exc)
            return self._default_preferences

    def get_profile(self, user_id: str) -> Optional[StudentProfile]:
        data = self._fetch_row(user_id)
        if not data:
            return None
        return StudentProfile(
            user_id=data["user_id"],
            skill_profile=_skill_profile_from_json(data.get("skill_profile")),
            learning_preferences=self._preferences(data),
        )

    def create_profile(self, user_id: str, preferences: LearningPreferences) -> StudentProfile:
        payload = {
            "user_id": user_id,
            "skill_profile": {},
            "learning_preferences": preferences.model_dump(mode="json"),
        }
        self.sb.table("student_profiles").upsert(payload, on_conflict="user_id").execute()
        return StudentProfile(user_id=user_id, skill_profile={}, learning_preferences=preferences)

    def save_skill_profile(self, user_id: str, skill_profile: dict[str, SkillEntry]) -> None:
        """
        Replace the readable entries. Stored entries that failed validation
        are written back unchanged unless `skill_profile` supplies that lesson.
        """
        row = self._fetch_row(user_id)
        prefs = self._preferences(row) if row else self._default_preferences
        _, unreadable = _split_skill_profile(row.get("skill_profile") if row else None)
        payload = {
            "user_id": user_id,
            "skill_profile": {**unreadable, **_skill_profile_to_json(skill_profile)},
            "learning_preferences": prefs.model_dump(mode="json"),
        }
        self.sb.table("student_profiles").upsert(payload, on_conflict="user_id").execute()

    def save_preferences(self, user_id: str, preferences: LearningPreferences) -> None:
        row = self._fetch_row(user_id)
        payload = {
            "user_id": user_id,
            # stored JSON passes through untouched
            "skill_profile": (row.get("skill_profile") or {}) if row else {},
            "learning_preferences": preferences.model_dump(mode="json"),
        }
        self.sb.table("student_profiles").upsert(payload, on_conflict="user_id").execute()


PROFILE_STORE = InMemoryProfileStore()


def get_profile_store() -> ProfileStore:
    from app.core.config import get_settings, default_preferences

    settings = get_settings()
    if settings.profile_store.lower() != "supabase":
        return PROFILE_STORE

    # lazy import to avoid dependency/testing issues
    from app.services.supabase_client import get_supabase_client
    return SupabaseProfileStore(get_supabase_client(), default_preferences(settings))
