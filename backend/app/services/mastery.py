from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from app.models.lesson import InteractionRecord, InteractionReport, SkillEntry


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CORRECT_STEP = 0.10
INCORRECT_STEP = 0.05
MAX_HISTORY = 10

HIGH_CONFIDENCE_AT = 0.7
MEDIUM_CONFIDENCE_AT = 0.4

# Difficulty dampening thresholds
HARD_DOWNGRADE_BELOW = 0.3
EASY_UPGRADE_ABOVE = 0.8

_SCORE_PRECISION = 6


# ---------------------------------------------------------------------------
# Pure helper functions (no DB, testable without mocks)
# ---------------------------------------------------------------------------

def clamp_score(score: float) -> float:
    return max(0.0, min(1.0, float(score)))


def confidence_for_score(score: float) -> str:
    """Bucket a mastery score into low / medium / high."""
    if score >= HIGH_CONFIDENCE_AT:
        return "high"
    if score >= MEDIUM_CONFIDENCE_AT:
        return "medium"
    return "low"


def default_skill_entry() -> SkillEntry:
    return SkillEntry(mastery_score=0.0, confidence="low", last_attempt=None, interaction_history=[])


def _next_score(current: float, report: InteractionReport) -> tuple[float, str]:
    """Return (new_score, action) for one interaction report."""
    if report.is_correct is not None:
        if report.is_correct:
            return min(1.0, current + CORRECT_STEP), "correct_answer"
        return max(0.0, current - INCORRECT_STEP), "incorrect_answer"
    if report.mastery_score is not None:
        return clamp_score(report.mastery_score), "lesson_view"
    return current, "lesson_view"


def apply_interaction(
    entry: Optional[SkillEntry],
    report: InteractionReport,
    now: Optional[datetime] = None,
) -> SkillEntry:
    """
    Pure function, no DB calls.
    Computes the next SkillEntry for one interaction; `entry` is not mutated.

    Order of precedence for the score: is_correct, then the explicit
    mastery_score override, then unchanged (a plain lesson view).
    """
    current = entry or default_skill_entry()

    score, action = _next_score(current.mastery_score, report)
    score = round(clamp_score(score), _SCORE_PRECISION)

    confidence = report.confidence or confidence_for_score(score)

    ts = report.timestamp or now or datetime.now(timezone.utc)
    record = InteractionRecord(timestamp=ts, action=action, mastery_score=score)
    history = [*current.interaction_history, record][-MAX_HISTORY:]

    return SkillEntry(
        mastery_score=score,
        confidence=confidence,
        last_attempt=ts,
        interaction_history=history,
    )


def adapt_difficulty(requested: str, mastery_score: float) -> str:
    """One-step clamp of the requested difficulty against current mastery."""
    if requested == "hard" and mastery_score < HARD_DOWNGRADE_BELOW:
        return "medium"
    if requested == "easy" and mastery_score > EASY_UPGRADE_ABOVE:
        return "medium"
    return requested


def mastery_for(profile: dict[str, SkillEntry], lesson_id: str) -> float:
    entry = profile.get(lesson_id)
    return entry.mastery_score if entry is not None else 0.0


def merge_skill_entry(
    profile: dict[str, SkillEntry],
    lesson_id: str,
    entry: SkillEntry,
) -> dict[str, SkillEntry]:
    """Return a new mapping with one lesson replaced and the rest preserved."""
    return {**profile, lesson_id: entry}
