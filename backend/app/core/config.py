from pydantic_settings import BaseSettings
from functools import lru_cache

from app.models.lesson import LearningPreferences, TutorPersona


class Settings(BaseSettings):
    # Application
    app_name: str = "LessonCraft AI"
    debug: bool = False

    # Supabase (auth, profiles, curricula)
    supabase_url: str = ""
    supabase_service_key: str = ""

    # Persistence backends: "memory" | "supabase"
    profile_store: str = "memory"
    curriculum_store: str = "memory"

    # LLM provider: "gemini" | "openai"
    llm_provider: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # Generation budgets
    lesson_temperature: float = 0.7
    lesson_max_tokens: int = 4000
    questions_temperature: float = 0.8
    questions_max_tokens: int = 3000

    # Learning preferences applied when a student has none stored
    default_learning_style: str = "simplified"
    default_tutor_name: str = "Professor Ahmed"
    default_tutor_gender: str = "male"

    # CORS
    frontend_url: str = "http://localhost:3000"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def llm_configured(self) -> bool:
        if self.llm_provider == "openai":
            return bool(self.openai_api_key)
        return bool(self.gemini_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def default_preferences(settings: Settings | None = None) -> LearningPreferences:
    """Learning preferences used whenever a caller omits them."""
    if settings is None:
        settings = get_settings()
    return LearningPreferences(
        style=settings.default_learning_style,
        tutor_persona=TutorPersona(
            name=settings.default_tutor_name,
            gender=settings.default_tutor_gender,
        ),
    )
