"""question_parser.py: turn a raw practice-question reply into questions.

Segmentation: the reply is split on the "**Question <n>**" markers the
question prompt asks for. Text before the first marker is discarded; every
remaining segment is one candidate block.

Each block is read by a small line-oriented state machine:

  PREAMBLE ──Question:──▶ QUESTION ──A)…D)──▶ OPTIONS
      │                      │                   │
      └──────────────Correct Answer:─────────────┴──▶ ANSWER ──Explanation:──▶ EXPLANATION

  - "Type:" is read in any state before EXPLANATION (first one wins).
  - Unlabelled lines continue the field of the current state.
  - Once in EXPLANATION, everything up to the end of the block is explanation.

A block without question text or correct answer is dropped. Dropped blocks
are returned in QuestionParseResult.dropped (with the missing fields) and
logged; they never raise.
"""
from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Optional

from app.models.lesson import DroppedBlock, GeneratedQuestion, QuestionParseResult

logger = logging.getLogger("lessoncraft.question_parser")

MAX_OPTIONS = 4
DEFAULT_TYPE = "multiple-choice"
_TYPE_RE = re.compile(r"^(multiple[\s_-]*choice|short[\s_-]*answer)\b", re.IGNORECASE)

_MARKER_RE = re.compile(r"\*\*Question\s+\d+\*\*")
_LABEL_RE = re.compile(
    r"^\s*(?:\*\*)?(type|question|correct answer|explanation)(?:\*\*)?\s*:\s*(?:\*\*)?\s*(.*)$",
    re.IGNORECASE,
)
_OPTION_RE = re.compile(r"^\s*([A-D])\)\s*(.*)$")


class _State(Enum):
    PREAMBLE = "preamble"
    QUESTION = "question"
    OPTIONS = "options"
    ANSWER = "answer"
    EXPLANATION = "explanation"


def split_question_blocks(text: str) -> list[str]:
    """Split on "**Question <n>**" markers, dropping the text before the first."""
    return _MARKER_RE.split(text or "")[1:]


def _normalise_type(value: str) -> Optional[str]:
    """Known type at the start of the value ("short-answer question" -> short-answer)."""
    m = _TYPE_RE.match(value.strip().strip("*").strip())
    if m is None:
        return None
    return "multiple-choice" if m.group(1).lower().startswith("multiple") else "short-answer"


class _BlockScanner:
    """Accumulates the labelled fields of one question block."""

    def __init__(self) -> None:
        self.state = _State.PREAMBLE
        self.qtype: Optional[str] = None
        self.question: list[str] = []
        self.options: list[list[str]] = []
        self.answer: list[str] = []
        self.explanation: list[str] = []

    def feed(self, line: str) -> None:
        if self.state is _State.EXPLANATION:
            self.explanation.append(line)
            return

        label = _LABEL_RE.match(line)
        if label:
            name = label.group(1).lower()
            value = label.group(2)
            if name == "type":
                if self.qtype is None:
                    self.qtype = _normalise_type(value) or DEFAULT_TYPE
                return
            if name == "question" and self.state is _State.PREAMBLE:
                self.state = _State.QUESTION
                self.question.append(value)
                return
            if name == "correct answer" and self.state is not _State.ANSWER:
                self.state = _State.ANSWER
                self.answer.append(value)
                return
            if name == "explanation":
                self.state = _State.EXPLANATION
                self.explanation.append(value)
                return

        if self.state in (_State.QUESTION, _State.OPTIONS):
            option = _OPTION_RE.match(line)
            if option:
                self.state = _State.OPTIONS
                self.options.append([option.group(2)])
                return

        if self.state is _State.QUESTION:
            self.question.append(line)
        elif self.state is _State.OPTIONS:
            self.options[-1].append(line)
        elif self.state is _State.ANSWER:
            self.answer.append(line)

    @staticmethod
    def _join(lines: list[str]) -> str:
        return "\n".join(lines).strip()

    def missing_fields(self) -> list[str]:
        missing = []
        if not self._join(self.question):
            missing.append("question")
        if not self._join(self.answer):
            missing.append("correct_answer")
        return missing

    def build(self) -> Optional[GeneratedQuestion]:
        if self.missing_fields():
            return None
        qtype = self.qtype or DEFAULT_TYPE
        options = None
        if qtype == "multiple-choice":
            options = [self._join(o) for o in self.options[:MAX_OPTIONS]]
        return GeneratedQuestion(
            question=self._join(self.question),
            type=qtype,
            options=options,
            correct_answer=self._join(self.answer),
            explanation=self._join(self.explanation),
        )


def _scan(block: str) -> _BlockScanner:
    scanner = _BlockScanner()
    for line in block.splitlines():
        scanner.feed(line)
    return scanner


def parse_question_block(block: str) -> Optional[GeneratedQuestion]:
    """Parse one block; None when question text or correct answer is missing."""
    return _scan(block).build()


def parse_generated_questions(raw: str) -> QuestionParseResult:
    result = QuestionParseResult()
    for index, block in enumerate(split_question_blocks(raw), start=1):
        scanner = _scan(block)
        question = scanner.build()
        if question is None:
            missing = scanner.missing_fields()
            logger.warning(
                "[question_parser] dropped block %d: missing %s", index, ", ".join(missing)
            )
            result.dropped.append(DroppedBlock(index=index, missing_fields=missing))
            continue
        result.questions.append(question)
    return result
