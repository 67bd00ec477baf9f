from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass
class AnswerOption:
    text: str | None = None
    correct: bool | None = None

    def to_dict(self) -> dict:
        return {"text": self.text, "correct": self.correct}


@dataclass
class Question:
    text: str | None = None  # streamed as "question"
    answers: list[AnswerOption] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "question": self.text,
            "answers": [a.to_dict() for a in self.answers],
        }


@dataclass
class Quiz:
    questions: list[Question] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"questions": [q.to_dict() for q in self.questions]}


@dataclass(frozen=True)
class GenerationRequest:
    tense: str
    question_count: int

    @classmethod
    def from_dict(cls, data: dict) -> GenerationRequest:
        """Build a request from an API payload (camelCase or snake_case)."""
        count = data.get("questionCount", data.get("question_count"))
        return cls(tense=data.get("tense"), question_count=count)


class LifecycleState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    READY = "ready"
    FAILED = "failed"


@dataclass
class DocumentState:
    lifecycle: LifecycleState
    questions: list[Question]
    cycle: int = 0
    diagnostic: str | None = None

    def to_dict(self) -> dict:
        return {
            "state": self.lifecycle.value,
            "cycle": self.cycle,
            "questions": [q.to_dict() for q in self.questions],
            "diagnostic": self.diagnostic,
        }


@dataclass(frozen=True)
class ScoreResult:
    correct_count: int
    total_count: int

    @property
    def perfect(self) -> bool:
        return self.total_count > 0 and self.correct_count == self.total_count

    @property
    def message(self) -> str:
        return f"You got {self.correct_count} out of {self.total_count} correct!"

    def to_dict(self) -> dict:
        return {
            "correct_count": self.correct_count,
            "total_count": self.total_count,
            "perfect": self.perfect,
            "message": self.message,
        }
