"""
Tests for question-count reconciliation.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.models.lesson import GeneratedQuestion
from app.services.fallback_padder import make_fallback_question, pad_questions
from app.services.question_parser import parse_generated_questions


def _q(n: int) -> GeneratedQuestion:
    return GeneratedQuestion(
        question=f"Parsed question {n}?",
        type="short-answer",
        correct_answer=f"answer {n}",
        explanation="",
    )


class TestPadQuestions:
    @pytest.mark.parametrize("count", range(1, 11))
    @pytest.mark.parametrize("parsed_len", [0, 1, 5, 10, 15])
    def test_length_always_equals_count(self, count, parsed_len):
        parsed = [_q(i) for i in range(parsed_len)]
        assert len(pad_questions(parsed, count)) == count

    def test_pads_after_parsed_in_order(self):
        out = pad_questions([_q(1), _q(2)], 4)
        assert out[0].question == "Parsed question 1?"
        assert out[1].question == "Parsed question 2?"
        assert out[2] == make_fallback_question(3)
        assert out[3] == make_fallback_question(4)

    def test_truncates_keeping_earliest(self):
        out = pad_questions([_q(i) for i in range(1, 6)], 2)
        assert [q.question for q in out] == ["Parsed question 1?", "Parsed question 2?"]

    def test_exact_count_unchanged(self):
        parsed = [_q(1), _q(2), _q(3)]
        out = pad_questions(parsed, 3)
        assert out == parsed
        assert out is not parsed

    def test_input_not_mutated(self):
        parsed = [_q(1)]
        pad_questions(parsed, 3)
        assert len(parsed) == 1


class TestFallbackQuestion:
    def test_placeholder_shape(self):
        q = make_fallback_question(7)
        assert q.type == "short-answer"
        assert q.options is None
        assert "(Question 7)" in q.question
        assert q.correct_answer
        assert q.explanation


class TestDroppedBlockIsPadded:
    def test_missing_correct_answer_then_padded_back(self):
        reply = (
            "**Question 1**\nType: short-answer\nQuestion: What is a leaf?\n"
            "Correct Answer: An organ\nExplanation: e\n"
            "**Question 2**\nType: short-answer\nQuestion: Why green?\nExplanation: e\n"
        )
        parsed = parse_generated_questions(reply)
        assert len(parsed.questions) == 1
        out = pad_questions(parsed.questions, 2)
        assert len(out) == 2
        assert out[0].question == "What is a leaf?"
        assert out[1] == make_fallback_question(2)
