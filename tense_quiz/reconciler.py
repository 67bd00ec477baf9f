"""Fold streamed quiz snapshots into one growing, render-ready document.

A ``QuizSession`` owns the quiz and the answer selections for one consumer.
Each ``submit`` starts a new cycle; the cycle's iterator validates every
snapshot leniently, merges it into the held quiz and publishes the result.
Merging is monotonic: a question keeps its index, and a field that has been
published is never erased or shortened by a later snapshot.
"""
from __future__ import annotations

import contextlib
import copy
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from tense_quiz.errors import IncompleteAnswers, InvalidSelection, QuizNotReady
from tense_quiz.models import (
    AnswerOption,
    DocumentState,
    GenerationRequest,
    LifecycleState,
    Question,
    Quiz,
    ScoreResult,
)
from tense_quiz.prompts import format_instruction
from tense_quiz.schema import (
    correctness_warnings,
    validate_complete,
    validate_partial,
    validate_request,
)

if TYPE_CHECKING:
    from tense_quiz.generator import SnapshotStream, StreamingGenerator

_log = logging.getLogger("tense_quiz.session")


def _merge_text(held: str | None, new: str | None) -> str | None:
    if new is None:
        return held
    if held is None or len(new) >= len(held):
        return new
    return held


def _merge_question(held: Question, new: Question) -> None:
    held.text = _merge_text(held.text, new.text)
    for j, answer in enumerate(new.answers):
        if j >= len(held.answers):
            held.answers.append(AnswerOption())
        target = held.answers[j]
        target.text = _merge_text(target.text, answer.text)
        if answer.correct is not None:
            target.correct = answer.correct


def merge_quiz(held: Quiz, incoming: Quiz) -> None:
    """Merge *incoming* into *held* in place.

    Positions are authoritative: question *i* of the snapshot always merges
    into question *i* of the held quiz, new positions are appended, and
    fields missing from the snapshot leave the held values alone.
    """
    for i, question in enumerate(incoming.questions):
        if i >= len(held.questions):
            held.questions.append(Question())
        _merge_question(held.questions[i], question)


class QuizSession:
    def __init__(self, generator: StreamingGenerator):
        self.generator = generator
        self._cycle = 0
        self._lifecycle = LifecycleState.IDLE
        self._quiz = Quiz()
        self._selections: dict[int, int] = {}  # question index -> answer index
        self._diagnostic: str | None = None
        self._request: GenerationRequest | None = None

    @property
    def lifecycle(self) -> LifecycleState:
        return self._lifecycle

    @property
    def request(self) -> GenerationRequest | None:
        return self._request

    @property
    def selections(self) -> dict[int, AnswerOption]:
        return {
            i: copy.deepcopy(self._quiz.questions[i].answers[j])
            for i, j in self._selections.items()
        }

    def current_state(self) -> DocumentState:
        return DocumentState(
            lifecycle=self._lifecycle,
            questions=copy.deepcopy(self._quiz.questions),
            cycle=self._cycle,
            diagnostic=self._diagnostic,
        )

    def submit(self, request: GenerationRequest) -> AsyncIterator[DocumentState]:
        """Start a new cycle and return its stream of published states.

        Raises ``InvalidRequest`` without touching the current state.  The
        generator is not contacted until the returned iterator is consumed.
        """
        validate_request(request)
        if self._lifecycle is LifecycleState.STREAMING:
            _log.info("Cycle %d superseded by a new request", self._cycle)
        self._cycle += 1
        self._request = request
        self._quiz = Quiz()
        self._selections = {}
        self._diagnostic = None
        self._lifecycle = LifecycleState.STREAMING
        _log.info("Cycle %d: %d x %s", self._cycle, request.question_count, request.tense)
        stream = self.generator.stream(format_instruction(request))
        return self._reconcile(self._cycle, stream)

    async def run(self, request: GenerationRequest) -> DocumentState:
        """Submit and drain the cycle; returns the last published state."""
        state = self.current_state()
        async for state in self.submit(request):
            pass
        return state

    async def _reconcile(self, cycle: int, stream: SnapshotStream) -> AsyncIterator[DocumentState]:
        # Closing the snapshots releases the provider's connection
        async with contextlib.aclosing(aiter(stream)) as snapshots:
            async for raw in snapshots:
                if cycle != self._cycle:
                    _log.info("Cycle %d: dropping snapshot from superseded stream", cycle)
                    return
                partial, dropped = validate_partial(raw)
                for reason in dropped:
                    _log.info("Cycle %d: dropped %s", cycle, reason)
                merge_quiz(self._quiz, partial)
                yield self.current_state()

        if cycle != self._cycle:
            return
        self._finish(stream)
        yield self.current_state()

    def _finish(self, stream: SnapshotStream) -> None:
        report = validate_complete(self._quiz)
        if report.ok:
            self._lifecycle = LifecycleState.READY
            for warning in correctness_warnings(self._quiz):
                _log.warning("Cycle %d: %s", self._cycle, warning)
            expected = self._request.question_count if self._request else None
            if expected is not None and expected != len(self._quiz.questions):
                _log.warning("Cycle %d: asked for %d questions, got %d",
                             self._cycle, expected, len(self._quiz.questions))
            _log.info("Cycle %d ready: %d questions", self._cycle, len(self._quiz.questions))
            return

        self._lifecycle = LifecycleState.FAILED
        if stream.error:
            self._diagnostic = stream.error
        elif stream.snapshot_count == 0:
            self._diagnostic = "the generator produced no quiz"
        else:
            self._diagnostic = "incomplete quiz: " + "; ".join(report.violations)
        _log.warning("Cycle %d failed: %s", self._cycle, self._diagnostic)

    def select_answer(self, question_index: int, option: AnswerOption | int) -> None:
        if self._lifecycle in (LifecycleState.IDLE, LifecycleState.FAILED):
            raise InvalidSelection(f"no quiz to answer ({self._lifecycle.value})")
        questions = self._quiz.questions
        if (not isinstance(question_index, int) or isinstance(question_index, bool)
                or not 0 <= question_index < len(questions)):
            raise InvalidSelection(f"no question at index {question_index}")
        answers = questions[question_index].answers
        if isinstance(option, AnswerOption):
            try:
                answer_index = answers.index(option)
            except ValueError:
                raise InvalidSelection(
                    f"{option.text!r} is not an answer to question {question_index}"
                ) from None
        elif isinstance(option, int) and not isinstance(option, bool) and 0 <= option < len(answers):
            answer_index = option
        else:
            raise InvalidSelection(f"no answer {option!r} for question {question_index}")
        self._selections[question_index] = answer_index

    def verify(self) -> ScoreResult:
        """Score the held selections. Pure: no state changes."""
        if self._lifecycle is not LifecycleState.READY:
            raise QuizNotReady(f"quiz is {self._lifecycle.value}, not ready")
        total = len(self._quiz.questions)
        missing = [i for i in range(total) if i not in self._selections]
        if missing:
            raise IncompleteAnswers(missing)
        correct = sum(
            1 for i, j in self._selections.items()
            if self._quiz.questions[i].answers[j].correct is True
        )
        return ScoreResult(correct_count=correct, total_count=total)
