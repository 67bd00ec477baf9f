"""Exceptions raised at the quiz consumer boundary."""
from __future__ import annotations


class QuizError(Exception):
    pass


class InvalidRequest(QuizError):
    """A generation request failed boundary validation."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class IncompleteAnswers(QuizError):
    """Scoring was asked for before every question had a selection."""

    def __init__(self, missing: list[int]):
        numbers = ", ".join(str(i) for i in missing)
        super().__init__(f"unanswered questions: {numbers}")
        self.missing = missing


class QuizNotReady(QuizError):
    pass


class InvalidSelection(QuizError):
    pass
