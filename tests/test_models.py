"""Tests for data models."""
from __future__ import annotations

from tense_quiz.models import (
    AnswerOption,
    DocumentState,
    GenerationRequest,
    LifecycleState,
    Question,
    ScoreResult,
)


class TestQuestion:
    def test_defaults(self):
        q = Question()
        assert q.text is None
        assert q.answers == []

    def test_to_dict_uses_wire_keys(self):
        q = Question("Q?", [AnswerOption("a", True)])
        assert q.to_dict() == {"question": "Q?", "answers": [{"text": "a", "correct": True}]}


class TestGenerationRequest:
    def test_from_camel_case(self):
        r = GenerationRequest.from_dict({"tense": "past-simple", "questionCount": 4})
        assert r == GenerationRequest("past-simple", 4)

    def test_from_snake_case(self):
        r = GenerationRequest.from_dict({"tense": "past-simple", "question_count": 4})
        assert r.question_count == 4

    def test_missing_fields(self):
        r = GenerationRequest.from_dict({})
        assert r.tense is None
        assert r.question_count is None


class TestDocumentState:
    def test_to_dict(self):
        state = DocumentState(LifecycleState.FAILED, [Question("Q?")], cycle=2, diagnostic="boom")
        assert state.to_dict() == {
            "state": "failed",
            "cycle": 2,
            "questions": [{"question": "Q?", "answers": []}],
            "diagnostic": "boom",
        }


class TestScoreResult:
    def test_perfect(self):
        assert ScoreResult(2, 2).perfect
        assert not ScoreResult(1, 2).perfect
        assert not ScoreResult(0, 0).perfect

    def test_message(self):
        assert ScoreResult(1, 3).message == "You got 1 out of 3 correct!"
