"""Shared test fixtures."""
from __future__ import annotations

import json

import pytest

from tense_quiz.models import GenerationRequest


class FakeLLM:
    """Fake provider that streams canned responses in fixed-size chunks.

    ``responses`` are used one per call (the last one repeats).  With
    ``fail_after`` set, a stream raises ``ConnectionError`` after that many
    characters.  ``open_streams`` counts streams that have not been closed.
    """

    def __init__(self, responses=None, chunk_size: int = 7, fail_after: int | None = None):
        self._responses = responses or [""]
        self.chunk_size = chunk_size
        self.fail_after = fail_after
        self.prompts: list[str] = []
        self.systems: list[str | None] = []
        self.schemas: list[dict | None] = []
        self.open_streams = 0

    async def generate_stream(self, prompt: str, temperature: float = 0.7,
                              system: str | None = None, json_schema: dict | None = None):
        idx = min(len(self.prompts), len(self._responses) - 1)
        self.prompts.append(prompt)
        self.systems.append(system)
        self.schemas.append(json_schema)
        text = self._responses[idx]
        self.open_streams += 1
        try:
            for i in range(0, len(text), self.chunk_size):
                if self.fail_after is not None and i >= self.fail_after:
                    raise ConnectionError("connection reset by peer")
                yield text[i:i + self.chunk_size]
        finally:
            self.open_streams -= 1

    def name(self) -> str:
        return "fake-llm"

    @property
    def call_count(self) -> int:
        return len(self.prompts)


@pytest.fixture
def quiz_data():
    """A well-formed three-question quiz, as the model would stream it."""
    return {
        "questions": [
            {
                "question": "Yesterday she ___ to the market.",
                "answers": [
                    {"text": "went", "correct": True},
                    {"text": "goes", "correct": False},
                    {"text": "has gone", "correct": False},
                ],
            },
            {
                "question": "They ___ football last Sunday.",
                "answers": [
                    {"text": "play", "correct": False},
                    {"text": "played", "correct": True},
                ],
            },
            {
                "question": "I ___ him two days ago.",
                "answers": [
                    {"text": "have seen", "correct": False},
                    {"text": "see", "correct": False},
                    {"text": "saw", "correct": True},
                ],
            },
        ]
    }


@pytest.fixture
def quiz_json(quiz_data):
    return json.dumps(quiz_data, indent=2)


@pytest.fixture
def past_simple():
    return GenerationRequest(tense="past-simple", question_count=3)
