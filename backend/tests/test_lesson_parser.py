"""
Tests for the lesson reply parser.

All tests run fully offline — no LLM calls required.
"""
import sys
import os
import random

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.models.lesson import LessonSpec
from app.services.lesson_parser import (
    estimate_duration,
    parse_generated_lesson,
    scan_sections,
)


LESSON = LessonSpec(
    lesson_id="bio-7-1",
    name="Photosynthesis",
    objectives=["Describe the light reactions"],
    keywords=["chlorophyll"],
)

FULL_REPLY = """# How Plants Make Food

## Introduction
Plants are tiny factories.

## Main Content
### Light reactions
Chlorophyll captures light.

## Key Points
- Plants convert light into chemical energy
- Chlorophyll is green
* Oxygen is a by-product

## Summary
Photosynthesis turns light, water and CO2
into sugar and oxygen.

## Further Reading
Nothing here.
"""


# ---------------------------------------------------------------------------
# scan_sections
# ---------------------------------------------------------------------------

class TestScanSections:
    def test_preamble_is_level_zero(self):
        sections = scan_sections("intro line\n# Title\nbody")
        assert sections[0].level == 0
        assert sections[0].lines == ["intro line"]
        assert sections[1].level == 1
        assert sections[1].heading == "Title"

    def test_heading_levels(self):
        sections = scan_sections("# A\n## B\n### C")
        assert [s.level for s in sections[1:]] == [1, 2, 3]

    def test_hash_without_space_is_not_heading(self):
        sections = scan_sections("#hashtag\n#1 fan")
        assert len(sections) == 1

    def test_closing_hashes_stripped(self):
        sections = scan_sections("## Summary ##\ntext")
        assert sections[1].heading == "Summary"

    def test_heading_inside_code_fence_ignored(self):
        sections = scan_sections("```python\n# a comment\n```\n# Real Title")
        headings = [s.heading for s in sections if s.level]
        assert headings == ["Real Title"]


# ---------------------------------------------------------------------------
# parse_generated_lesson — full reply
# ---------------------------------------------------------------------------

class TestFullReply:
    def test_title_from_first_h1(self):
        lesson = parse_generated_lesson(FULL_REPLY, LESSON)
        assert lesson.title == "How Plants Make Food"

    def test_key_points_in_order_markers_stripped(self):
        lesson = parse_generated_lesson(FULL_REPLY, LESSON)
        assert lesson.key_points == [
            "Plants convert light into chemical energy",
            "Chlorophyll is green",
            "Oxygen is a by-product",
        ]

    def test_summary_stops_at_next_heading(self):
        lesson = parse_generated_lesson(FULL_REPLY, LESSON)
        assert lesson.summary == "Photosynthesis turns light, water and CO2\ninto sugar and oxygen."

    def test_content_is_verbatim(self):
        lesson = parse_generated_lesson(FULL_REPLY, LESSON)
        assert lesson.content == FULL_REPLY

    def test_lesson_id_carried_over(self):
        assert parse_generated_lesson(FULL_REPLY, LESSON).lesson_id == "bio-7-1"

    def test_short_reply_gets_minimum_duration(self):
        assert parse_generated_lesson(FULL_REPLY, LESSON).estimated_duration == 5


# ---------------------------------------------------------------------------
# Defaults and edge cases
# ---------------------------------------------------------------------------

class TestDefaults:
    def test_no_sections_at_all(self):
        """Reply without Key Points / Summary / title falls back to defaults."""
        lesson = parse_generated_lesson("Just some prose about plants.", LESSON)
        assert lesson.key_points == []
        assert lesson.summary == ""
        assert lesson.title == "Photosynthesis"

    def test_empty_reply(self):
        lesson = parse_generated_lesson("", LESSON)
        assert lesson.title == "Photosynthesis"
        assert lesson.content == ""
        assert lesson.estimated_duration == 5

    def test_h2_is_not_a_title(self):
        lesson = parse_generated_lesson("## Introduction\nhello", LESSON)
        assert lesson.title == "Photosynthesis"

    def test_title_after_preamble(self):
        lesson = parse_generated_lesson("Sure! Here is your lesson.\n\n# Leaves\n", LESSON)
        assert lesson.title == "Leaves"

    def test_key_points_heading_case_and_colon(self):
        lesson = parse_generated_lesson("## KEY POINTS:\n- one\n- two\n", LESSON)
        assert lesson.key_points == ["one", "two"]

    def test_key_points_blank_lines_before_bullets(self):
        lesson = parse_generated_lesson("## Key Points\n\n\n- one\n- two", LESSON)
        assert lesson.key_points == ["one", "two"]

    def test_key_points_stop_at_first_non_bullet(self):
        reply = "## Key Points\n- one\n- two\nThat is all.\n- not a key point"
        lesson = parse_generated_lesson(reply, LESSON)
        assert lesson.key_points == ["one", "two"]

    def test_key_points_heading_without_bullets(self):
        lesson = parse_generated_lesson("## Key Points\nNo bullets here", LESSON)
        assert lesson.key_points == []

    def test_summary_at_end_of_text(self):
        lesson = parse_generated_lesson("## Summary\n  Short and sweet.  ", LESSON)
        assert lesson.summary == "Short and sweet."

    def test_empty_summary_section(self):
        lesson = parse_generated_lesson("## Summary\n## Next", LESSON)
        assert lesson.summary == ""


# ---------------------------------------------------------------------------
# estimate_duration
# ---------------------------------------------------------------------------

class TestEstimateDuration:
    def test_exactly_1000_words_is_five_minutes(self):
        text = " ".join(["word"] * 1000)
        assert estimate_duration(text) == 5

    def test_1001_words_rounds_up(self):
        text = " ".join(["word"] * 1001)
        assert estimate_duration(text) == 6

    def test_whitespace_runs_count_once(self):
        text = "\n\n".join(["word"] * 1200) + "   \t  "
        assert estimate_duration(text) == 6

    def test_never_below_five(self):
        assert estimate_duration("a b c") == 5
        assert estimate_duration("") == 5


# ---------------------------------------------------------------------------
# Totality / idempotence
# ---------------------------------------------------------------------------

_FRAGMENTS = [
    "# ", "## Key Points", "## Summary", "- ", "* ", "\n", "\n\n", "```",
    "Title", "words words", "#", "##", "   ", ":", "\t", "ü", "## ", "- - -",
]


class TestFuzz:
    def test_parser_is_total_over_random_fragments(self):
        rng = random.Random(1234)
        for _ in range(500):
            text = "".join(rng.choice(_FRAGMENTS) for _ in range(rng.randint(0, 40)))
            lesson = parse_generated_lesson(text, LESSON)
            assert lesson.title
            assert lesson.estimated_duration >= 5
            assert lesson.content == text

    def test_parsing_twice_is_identical(self):
        first = parse_generated_lesson(FULL_REPLY, LESSON)
        second = parse_generated_lesson(FULL_REPLY, LESSON)
        assert first == second
