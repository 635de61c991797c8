"""
Prompt Builder: deterministic prompt construction for lesson generation.

Two public functions:

  build_lesson_prompt(lesson: LessonSpec, preferences: LearningPreferences) -> str
    Full lesson prompt in the tutor's voice, with the heading layout that
    lesson_parser.parse_generated_lesson() reads back.

  build_questions_prompt(lesson, difficulty, count, preferences) -> str
    Practice-question prompt with the "**Question <n>**" block layout that
    question_parser.parse_generated_questions() reads back.

Both are pure string formatting: no I/O, no randomness, no hidden defaults.
Callers resolve preferences first (see app.core.config.default_preferences).
"""
from __future__ import annotations

from app.models.lesson import LearningPreferences, LessonSpec
from app.prompts.lesson_generation import (
    CONNECTION_TEST_PROMPT,
    DEFAULT_DIFFICULTY_INSTRUCTION,
    DEFAULT_STYLE_INSTRUCTION,
    DIFFICULTY_INSTRUCTIONS,
    LESSON_GENERATION_PROMPT,
    QUESTIONS_GENERATION_PROMPT,
    STYLE_INSTRUCTIONS,
)


def get_style_instructions(style: str) -> str:
    return STYLE_INSTRUCTIONS.get(style, DEFAULT_STYLE_INSTRUCTION)


def get_difficulty_instructions(difficulty: str) -> str:
    return DIFFICULTY_INSTRUCTIONS.get(difficulty, DEFAULT_DIFFICULTY_INSTRUCTION)


def _tutor_gender(preferences: LearningPreferences) -> str:
    return "female" if preferences.tutor_persona.gender == "female" else "male"


def build_lesson_prompt(lesson: LessonSpec, preferences: LearningPreferences) -> str:
    """
    Build the lesson-generation prompt.

    Objectives are rendered one bullet per line; key terms comma-separated.
    """
    objectives_list = "\n".join(f"- {obj}" for obj in lesson.objectives)
    return LESSON_GENERATION_PROMPT.format(
        tutor_name=preferences.tutor_persona.name,
        tutor_gender=_tutor_gender(preferences),
        lesson_name=lesson.name,
        objectives_list=objectives_list,
        keywords=", ".join(lesson.keywords),
        style_instructions=get_style_instructions(preferences.style),
        style=preferences.style,
    )


def build_questions_prompt(
    lesson: LessonSpec,
    difficulty: str,
    count: int,
    preferences: LearningPreferences,
) -> str:
    """Build the practice-question prompt for `count` questions at `difficulty`."""
    return QUESTIONS_GENERATION_PROMPT.format(
        tutor_name=preferences.tutor_persona.name,
        tutor_gender=_tutor_gender(preferences),
        count=count,
        lesson_name=lesson.name,
        objectives=", ".join(lesson.objectives),
        keywords=", ".join(lesson.keywords),
        difficulty=difficulty,
        difficulty_instructions=get_difficulty_instructions(difficulty),
        style_instructions=get_style_instructions(preferences.style),
    )


def build_connection_test_prompt() -> str:
    return CONNECTION_TEST_PROMPT
