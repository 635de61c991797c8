from pydantic import BaseModel, ConfigDict, Field
from typing import Literal
from datetime import datetime


LearningStyle = Literal["academic", "simplified", "humorous"]
Difficulty = Literal["easy", "medium", "hard"]
QuestionType = Literal["multiple-choice", "short-answer"]
Confidence = Literal["low", "medium", "high"]
InteractionAction = Literal["lesson_view", "correct_answer", "incorrect_answer"]


class LessonSpec(BaseModel):
    """A single curriculum lesson, as handed to the prompt builder."""
    model_config = ConfigDict(frozen=True)

    lesson_id: str
    name: str
    objectives: list[str] = []
    keywords: list[str] = []

    @classmethod
    def from_curriculum(cls, node: dict) -> "LessonSpec":
        """Build from a curriculum lesson node (camelCase document keys).

        Non-list objectives / keywords are read as empty.
        """
        def str_list(value) -> list[str]:
            return [str(v) for v in value] if isinstance(value, list) else []

        return cls(
            lesson_id=str(node.get("lessonId") or node.get("lesson_id") or ""),
            name=str(node.get("name") or ""),
            objectives=str_list(node.get("objectives")),
            keywords=str_list(node.get("keywords")),
        )


class TutorPersona(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    gender: Literal["male", "female"]


class LearningPreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    style: LearningStyle
    tutor_persona: TutorPersona


class GeneratedLesson(BaseModel):
    lesson_id: str
    title: str
    content: str
    summary: str = ""
    key_points: list[str] = []
    estimated_duration: int = Field(ge=5)


class GeneratedQuestion(BaseModel):
    question: str
    type: QuestionType
    options: list[str] | None = None
    correct_answer: str
    explanation: str = ""


class DroppedBlock(BaseModel):
    index: int
    missing_fields: list[str]


class QuestionParseResult(BaseModel):
    questions: list[GeneratedQuestion] = []
    dropped: list[DroppedBlock] = []


class QuestionSet(BaseModel):
    questions: list[GeneratedQuestion]
    difficulty: Difficulty
    dropped_blocks: int = 0
    padded: int = 0


class InteractionRecord(BaseModel):
    timestamp: datetime
    action: InteractionAction
    mastery_score: float


class SkillEntry(BaseModel):
    mastery_score: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: Confidence = "low"
    last_attempt: datetime | None = None
    interaction_history: list[InteractionRecord] = []


class InteractionReport(BaseModel):
    lesson_id: str
    is_correct: bool | None = None
    mastery_score: float | None = None
    confidence: Confidence | None = None
    timestamp: datetime | None = None


class StudentProfile(BaseModel):
    user_id: str
    skill_profile: dict[str, SkillEntry] = {}
    learning_preferences: LearningPreferences
