"""Reconcile parsed questions with the number the caller asked for."""
from __future__ import annotations

from app.models.lesson import GeneratedQuestion

FALLBACK_ANSWER = (
    "Please refer to the lesson content for key concepts and their explanations."
)
FALLBACK_EXPLANATION = (
    "This is a general question about the lesson content. Review the main points "
    "covered in the lesson to provide a comprehensive answer."
)


def make_fallback_question(index: int) -> GeneratedQuestion:
    """Placeholder short-answer question for 1-based position `index`."""
    return GeneratedQuestion(
        question=f"What is an important concept from this lesson? (Question {index})",
        type="short-answer",
        correct_answer=FALLBACK_ANSWER,
        explanation=FALLBACK_EXPLANATION,
    )


def pad_questions(parsed: list[GeneratedQuestion], count: int) -> list[GeneratedQuestion]:
    """
    Return exactly `count` questions in parse order.

    Short lists are padded with placeholders, long lists keep the first
    `count` (earlier parses are preferred).
    """
    count = max(count, 0)
    out = list(parsed[:count])
    while len(out) < count:
        out.append(make_fallback_question(len(out) + 1))
    return out
