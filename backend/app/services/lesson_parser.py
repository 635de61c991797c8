"""lesson_parser.py: turn a raw lesson reply into a GeneratedLesson.

The reply is untrusted text. Parsing is a single pass over lines that splits
the reply into heading-delimited sections; each field is then read from the
section it lives in:

  title              → first level-1 heading ("# Title")
  key_points         → contiguous bullet block under "## Key Points"
  summary            → body of "## Summary" up to the next heading
  estimated_duration → max(5, ceil(words / 200)) over the whole reply

parse_generated_lesson() is total: any input, including "", yields a valid
GeneratedLesson built from defaults.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Optional

from app.models.lesson import GeneratedLesson, LessonSpec

WORDS_PER_MINUTE = 200
MIN_DURATION_MINUTES = 5

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_BULLET_RE = re.compile(r"^\s*[-*+]\s+(.*)$")

KEY_POINTS_HEADING = "key points"
SUMMARY_HEADING = "summary"


@dataclass
class Section:
    """A heading and the raw lines under it. level 0 = text before any heading."""
    level: int
    heading: str
    lines: list[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.heading.strip().rstrip(":").strip().lower()

    @property
    def body(self) -> str:
        return "\n".join(self.lines).strip()


def scan_sections(text: str) -> list[Section]:
    """Split text into sections at every markdown heading line."""
    sections = [Section(level=0, heading="")]
    in_fence = False
    for line in text.splitlines():
        if _FENCE_RE.match(line):
            in_fence = not in_fence
        m = None if in_fence else _HEADING_RE.match(line)
        if m and m.group(2):
            sections.append(Section(level=len(m.group(1)), heading=m.group(2)))
        else:
            sections[-1].lines.append(line)
    return sections


def _find_section(sections: list[Section], key: str) -> Optional[Section]:
    for section in sections:
        if section.level >= 1 and section.key == key:
            return section
    return None


def extract_title(sections: list[Section], fallback: str) -> str:
    for section in sections:
        if section.level == 1 and section.heading.strip():
            return section.heading.strip()
    return fallback


def extract_key_points(sections: list[Section]) -> list[str]:
    section = _find_section(sections, KEY_POINTS_HEADING)
    if section is None:
        return []
    points: list[str] = []
    for line in section.lines:
        m = _BULLET_RE.match(line)
        if m:
            point = m.group(1).strip()
            if point:
                points.append(point)
            continue
        if not line.strip() and not points:
            # blank lines between heading and first bullet
            continue
        break
    return points


def extract_summary(sections: list[Section]) -> str:
    section = _find_section(sections, SUMMARY_HEADING)
    return section.body if section is not None else ""


def estimate_duration(text: str) -> int:
    """Reading time in whole minutes, never below MIN_DURATION_MINUTES."""
    word_count = len(text.split())
    return max(MIN_DURATION_MINUTES, math.ceil(word_count / WORDS_PER_MINUTE))


def parse_generated_lesson(raw: str, lesson: LessonSpec) -> GeneratedLesson:
    text = raw or ""
    sections = scan_sections(text)
    return GeneratedLesson(
        lesson_id=lesson.lesson_id,
        title=extract_title(sections, lesson.name),
        content=text,
        summary=extract_summary(sections),
        key_points=extract_key_points(sections),
        estimated_duration=estimate_duration(text),
    )
