"""Lesson generation service: prompt → model → parser → padder.

Also applies interaction reports to a student's skill profile. The service
holds no per-call state; persistence stays with the caller.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from app.core.config import Settings, get_settings
from app.models.lesson import (
    GeneratedLesson,
    InteractionReport,
    LearningPreferences,
    LessonSpec,
    QuestionSet,
    SkillEntry,
)
from app.services.ai import GenerationClient, get_generation_client
from app.services.fallback_padder import pad_questions
from app.services.lesson_parser import parse_generated_lesson
from app.services.mastery import adapt_difficulty, apply_interaction, merge_skill_entry
from app.services.prompt_builder import build_lesson_prompt, build_questions_prompt
from app.services.question_parser import parse_generated_questions

logger = logging.getLogger("lessoncraft.generation")

MIN_QUESTIONS = 1
MAX_QUESTIONS = 10


class LessonGenerationService:
    def __init__(self, client: GenerationClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()

    async def generate_lesson(
        self,
        lesson: LessonSpec,
        preferences: LearningPreferences,
    ) -> GeneratedLesson:
        """Generate one lesson. GenerationError from the client propagates."""
        prompt = build_lesson_prompt(lesson, preferences)
        raw = await self.client.generate(
            prompt,
            temperature=self.settings.lesson_temperature,
            max_tokens=self.settings.lesson_max_tokens,
        )
        generated = parse_generated_lesson(raw, lesson)
        logger.info(
            "[generation.lesson] lesson=%s key_points=%d duration=%dmin",
            lesson.lesson_id, len(generated.key_points), generated.estimated_duration,
        )
        return generated

    async def generate_questions(
        self,
        lesson: LessonSpec,
        difficulty: str,
        count: int,
        preferences: LearningPreferences,
        mastery_score: Optional[float] = None,
    ) -> QuestionSet:
        """
        Generate exactly `count` practice questions.

        When `mastery_score` is given the requested difficulty is first
        dampened by mastery.adapt_difficulty().
        """
        if not MIN_QUESTIONS <= count <= MAX_QUESTIONS:
            raise ValueError(f"count must be between {MIN_QUESTIONS} and {MAX_QUESTIONS}")

        used_difficulty = difficulty
        if mastery_score is not None:
            used_difficulty = adapt_difficulty(difficulty, mastery_score)
            if used_difficulty != difficulty:
                logger.info(
                    "[generation.questions] lesson=%s difficulty %s -> %s (mastery=%.2f)",
                    lesson.lesson_id, difficulty, used_difficulty, mastery_score,
                )

        prompt = build_questions_prompt(lesson, used_difficulty, count, preferences)
        raw = await self.client.generate(
            prompt,
            temperature=self.settings.questions_temperature,
            max_tokens=self.settings.questions_max_tokens,
        )
        parsed = parse_generated_questions(raw)
        questions = pad_questions(parsed.questions, count)
        padded = max(0, count - len(parsed.questions))

        if parsed.dropped or padded:
            logger.warning(
                "[generation.questions] lesson=%s parsed=%d dropped=%d padded=%d",
                lesson.lesson_id, len(parsed.questions), len(parsed.dropped), padded,
            )
        return QuestionSet(
            questions=questions,
            difficulty=used_difficulty,
            dropped_blocks=len(parsed.dropped),
            padded=padded,
        )

    @staticmethod
    def record_interaction(
        skill_profile: dict[str, SkillEntry],
        report: InteractionReport,
        now: Optional[datetime] = None,
    ) -> tuple[SkillEntry, dict[str, SkillEntry]]:
        """Apply one report; returns (new entry, full mapping to write back)."""
        entry = apply_interaction(skill_profile.get(report.lesson_id), report, now=now)
        return entry, merge_skill_entry(skill_profile, report.lesson_id, entry)


def get_lesson_generation_service() -> LessonGenerationService:
    settings = get_settings()
    return LessonGenerationService(get_generation_client(settings), settings)
