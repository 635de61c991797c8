"""
Tests for the practice-question reply parser.

All tests run fully offline — no LLM calls required.
"""
import sys
import os
import random

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.services.question_parser import (
    parse_generated_questions,
    parse_question_block,
    split_question_blocks,
)


REPLY = """Here are your questions!

**Question 1**
Type: multiple-choice
Question: Which pigment captures light?
A) Chlorophyll
B) Keratin
C) Melanin
D) Hemoglobin
Correct Answer: A
Explanation: Chlorophyll absorbs red and blue light.

**Question 2**
Type: short-answer
Question: Name the gas released during photosynthesis.
Correct Answer: Oxygen
Explanation: Water is split and oxygen is released.
"""


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

class TestSplitBlocks:
    def test_preamble_discarded(self):
        blocks = split_question_blocks(REPLY)
        assert len(blocks) == 2
        assert "Here are your questions" not in blocks[0]

    def test_no_markers_no_blocks(self):
        assert split_question_blocks("Question: what?\nCorrect Answer: x") == []

    def test_empty_text(self):
        assert split_question_blocks("") == []

    def test_marker_numbers_need_not_be_sequential(self):
        text = "**Question 3**\nQuestion: a\nCorrect Answer: b\n**Question 9**\nQuestion: c\nCorrect Answer: d"
        assert len(split_question_blocks(text)) == 2


# ---------------------------------------------------------------------------
# Well-formed blocks
# ---------------------------------------------------------------------------

class TestWellFormed:
    def test_two_questions_parsed(self):
        result = parse_generated_questions(REPLY)
        assert len(result.questions) == 2
        assert result.dropped == []

    def test_multiple_choice_fields(self):
        q = parse_generated_questions(REPLY).questions[0]
        assert q.type == "multiple-choice"
        assert q.question == "Which pigment captures light?"
        assert q.options == ["Chlorophyll", "Keratin", "Melanin", "Hemoglobin"]
        assert q.correct_answer == "A"
        assert q.explanation == "Chlorophyll absorbs red and blue light."

    def test_short_answer_has_no_options(self):
        q = parse_generated_questions(REPLY).questions[1]
        assert q.type == "short-answer"
        assert q.options is None
        assert q.correct_answer == "Oxygen"

    def test_multiline_question_text(self):
        block = "Question: Read this:\nThe leaf is green.\nWhy?\nA) x\nCorrect Answer: A"
        q = parse_question_block(block)
        assert q.question == "Read this:\nThe leaf is green.\nWhy?"

    def test_multiline_explanation_keeps_everything(self):
        block = "Question: q\nCorrect Answer: a\nExplanation: first\nA) not an option\nCorrect Answer: ignored"
        q = parse_question_block(block)
        assert q.explanation == "first\nA) not an option\nCorrect Answer: ignored"
        assert q.options == []

    def test_multiline_correct_answer(self):
        block = "Type: short-answer\nQuestion: q\nCorrect Answer: line one\nline two\nExplanation: e"
        q = parse_question_block(block)
        assert q.correct_answer == "line one\nline two"

    def test_labels_case_insensitive_and_bold(self):
        block = "**Type:** Short-Answer\nquestion: q?\n**Correct Answer:** yes\nEXPLANATION: because"
        q = parse_question_block(block)
        assert q.type == "short-answer"
        assert q.question == "q?"
        assert q.correct_answer == "yes"
        assert q.explanation == "because"

    def test_missing_explanation_is_empty(self):
        q = parse_question_block("Question: q\nCorrect Answer: a")
        assert q.explanation == ""


# ---------------------------------------------------------------------------
# Type handling
# ---------------------------------------------------------------------------

class TestType:
    def test_missing_type_defaults_to_multiple_choice(self):
        q = parse_question_block("Question: q\nA) one\nCorrect Answer: A")
        assert q.type == "multiple-choice"
        assert q.options == ["one"]

    def test_unknown_type_defaults_to_multiple_choice(self):
        q = parse_question_block("Type: essay\nQuestion: q\nCorrect Answer: a")
        assert q.type == "multiple-choice"

    def test_type_followed_by_extra_words(self):
        q = parse_question_block("Type: short-answer question\nQuestion: q\nCorrect Answer: a")
        assert q.type == "short-answer"
        assert q.options is None

    def test_type_spelling_variants(self):
        assert parse_question_block("Type: Short Answer\nQuestion: q\nCorrect Answer: a").type == "short-answer"
        assert parse_question_block("Type: short_answer (1 mark)\nQuestion: q\nCorrect Answer: a").type == "short-answer"
        q = parse_question_block("Type: Multiple Choice question\nQuestion: q\nA) x\nCorrect Answer: A")
        assert q.type == "multiple-choice"
        assert q.options == ["x"]

    def test_first_type_line_wins(self):
        q = parse_question_block("Type: short-answer\nType: multiple-choice\nQuestion: q\nCorrect Answer: a")
        assert q.type == "short-answer"


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class TestOptions:
    def test_zero_options_accepted(self):
        q = parse_question_block("Type: multiple-choice\nQuestion: q\nCorrect Answer: B")
        assert q is not None
        assert q.options == []

    def test_at_most_four_options(self):
        block = "Question: q\nA) 1\nB) 2\nC) 3\nD) 4\nA) 5\nCorrect Answer: A"
        q = parse_question_block(block)
        assert q.options == ["1", "2", "3", "4"]

    def test_option_continuation_line(self):
        block = "Question: q\nA) first part\n   second part\nB) two\nCorrect Answer: A"
        q = parse_question_block(block)
        assert q.options == ["first part\n   second part", "two"]

    def test_answer_not_checked_against_options(self):
        q = parse_question_block("Question: q\nA) one\nB) two\nCorrect Answer: Z")
        assert q.correct_answer == "Z"

    def test_short_answer_ignores_option_lines(self):
        q = parse_question_block("Type: short-answer\nQuestion: q\nA) one\nCorrect Answer: x")
        assert q.options is None


# ---------------------------------------------------------------------------
# Dropped blocks
# ---------------------------------------------------------------------------

class TestDropped:
    def test_missing_correct_answer_dropped(self):
        text = REPLY + "\n**Question 3**\nType: short-answer\nQuestion: Why?\nExplanation: because\n"
        result = parse_generated_questions(text)
        assert len(result.questions) == 2
        assert len(result.dropped) == 1
        assert result.dropped[0].index == 3
        assert result.dropped[0].missing_fields == ["correct_answer"]

    def test_missing_question_dropped(self):
        assert parse_question_block("Type: short-answer\nCorrect Answer: a") is None

    def test_blank_fields_dropped(self):
        assert parse_question_block("Question:   \nCorrect Answer:   \n") is None

    def test_both_missing_reported(self):
        result = parse_generated_questions("**Question 1**\nnothing useful here")
        assert result.questions == []
        assert result.dropped[0].missing_fields == ["question", "correct_answer"]

    def test_drop_does_not_stop_later_blocks(self):
        text = "**Question 1**\ngarbage\n**Question 2**\nQuestion: ok?\nCorrect Answer: yes"
        result = parse_generated_questions(text)
        assert [q.question for q in result.questions] == ["ok?"]


# ---------------------------------------------------------------------------
# Totality / idempotence
# ---------------------------------------------------------------------------

_FRAGMENTS = [
    "**Question 1**", "**Question 22**", "Type:", " multiple-choice", " short-answer",
    "Question:", "Correct Answer:", "Explanation:", "A)", "B)", "C)", "D)", "E)",
    "\n", " ", "text", "**", "*", ":", "\r\n", "ß", "Question", "42",
]


class TestFuzz:
    def test_parser_is_total_over_random_fragments(self):
        rng = random.Random(99)
        for _ in range(500):
            text = "".join(rng.choice(_FRAGMENTS) for _ in range(rng.randint(0, 60)))
            result = parse_generated_questions(text)
            for q in result.questions:
                assert q.question.strip()
                assert q.correct_answer.strip()
                if q.type == "multiple-choice":
                    assert q.options is not None and len(q.options) <= 4
                else:
                    assert q.options is None
            assert len(result.questions) + len(result.dropped) == len(split_question_blocks(text))

    def test_parsing_twice_is_identical(self):
        assert parse_generated_questions(REPLY) == parse_generated_questions(REPLY)
