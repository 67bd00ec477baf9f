"""Quiz document contract: shape description, lenient and strict validation.

Mid-stream the schema is advisory: ``validate_partial`` keeps whatever is
well-typed and reports the rest.  At completion it is authoritative:
``validate_complete`` checks that every question and answer is fully formed.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from tense_quiz.errors import InvalidRequest
from tense_quiz.models import AnswerOption, GenerationRequest, Question, Quiz

TENSES = [
    ("present-simple", "Present Simple"),
    ("present-continuous", "Present Continuous"),
    ("present-perfect", "Present Perfect"),
    ("present-perfect-continuous", "Present Perfect Continuous"),
    ("past-simple", "Past Simple"),
    ("past-continuous", "Past Continuous"),
    ("past-perfect", "Past Perfect"),
    ("past-perfect-continuous", "Past Perfect Continuous"),
    ("future-simple", "Future Simple"),
    ("future-continuous", "Future Continuous"),
    ("future-perfect", "Future Perfect"),
    ("future-perfect-continuous", "Future Perfect Continuous"),
    ("conditional-simple", "Conditional Simple"),
    ("conditional-continuous", "Conditional Continuous"),
    ("conditional-perfect", "Conditional Perfect"),
    ("conditional-perfect-continuous", "Conditional Perfect Continuous"),
]

TENSE_VALUES = frozenset(value for value, _ in TENSES)

MIN_QUESTIONS = 1
MAX_QUESTIONS = 10


@dataclass
class ValidationReport:
    ok: bool
    violations: list[str] = field(default_factory=list)


def describe() -> dict:
    """JSON Schema for a complete quiz, as handed to the generator."""
    answer = {
        "type": "object",
        "properties": {
            "text": {"type": "string", "description": "The answer text"},
            "correct": {"type": "boolean", "description": "Whether the answer is correct"},
        },
        "required": ["text", "correct"],
        "additionalProperties": False,
    }
    question = {
        "type": "object",
        "properties": {
            "question": {"type": "string", "description": "The question text"},
            "answers": {"type": "array", "items": answer},
        },
        "required": ["question", "answers"],
        "additionalProperties": False,
    }
    return {
        "type": "object",
        "properties": {
            "questions": {"type": "array", "items": question},
        },
        "required": ["questions"],
        "additionalProperties": False,
    }


def validate_request(request: GenerationRequest) -> None:
    """Raise ``InvalidRequest`` unless the request may be sent to the generator."""
    if not isinstance(request.tense, str):
        raise InvalidRequest("tense", f"must be a string (got {type(request.tense).__name__})")
    if request.tense not in TENSE_VALUES:
        raise InvalidRequest("tense", f"unknown tense {request.tense!r}")
    count = request.question_count
    # bool is an int subclass; a checkbox value is not a question count
    if not isinstance(count, int) or isinstance(count, bool):
        raise InvalidRequest(
            "questionCount", f"must be an integer (got {type(count).__name__})"
        )
    if not MIN_QUESTIONS <= count <= MAX_QUESTIONS:
        raise InvalidRequest(
            "questionCount",
            f"must be between {MIN_QUESTIONS} and {MAX_QUESTIONS} (got {count})",
        )


def _partial_answer(value, path: str, dropped: list[str]) -> AnswerOption:
    if not isinstance(value, dict):
        dropped.append(f"{path}: expected object, got {type(value).__name__}")
        return AnswerOption()
    option = AnswerOption()
    if "text" in value:
        if isinstance(value["text"], str):
            option.text = value["text"]
        else:
            dropped.append(f"{path}.text: expected string, got {type(value['text']).__name__}")
    if "correct" in value:
        if isinstance(value["correct"], bool):
            option.correct = value["correct"]
        else:
            dropped.append(f"{path}.correct: expected boolean, got {type(value['correct']).__name__}")
    return option


def _partial_question(value, path: str, dropped: list[str]) -> Question:
    if not isinstance(value, dict):
        dropped.append(f"{path}: expected object, got {type(value).__name__}")
        return Question()
    question = Question()
    if "question" in value:
        if isinstance(value["question"], str):
            question.text = value["question"]
        else:
            dropped.append(f"{path}.question: expected string, got {type(value['question']).__name__}")
    if "answers" in value:
        answers = value["answers"]
        if isinstance(answers, list):
            question.answers = [
                _partial_answer(a, f"{path}.answers[{j}]", dropped)
                for j, a in enumerate(answers)
            ]
        else:
            dropped.append(f"{path}.answers: expected array, got {type(answers).__name__}")
    return question


def validate_partial(value) -> tuple[Quiz, list[str]]:
    """Keep the well-typed subset of *value*.

    Returns the accepted quiz and a list of dropped-field descriptions.
    Malformed list elements become empty placeholders so that every accepted
    element keeps its position.
    """
    dropped: list[str] = []
    if not isinstance(value, dict):
        if value is not None:
            dropped.append(f"document: expected object, got {type(value).__name__}")
        return Quiz(), dropped
    questions = value.get("questions")
    if questions is None:
        return Quiz(), dropped
    if not isinstance(questions, list):
        dropped.append(f"questions: expected array, got {type(questions).__name__}")
        return Quiz(), dropped
    quiz = Quiz(questions=[
        _partial_question(q, f"questions[{i}]", dropped)
        for i, q in enumerate(questions)
    ])
    return quiz, dropped


def validate_complete(quiz: Quiz) -> ValidationReport:
    violations = []
    if not quiz.questions:
        violations.append("quiz has no questions")
    for i, q in enumerate(quiz.questions, 1):
        if not q.text:
            violations.append(f"question {i} has no text")
        if not q.answers:
            violations.append(f"question {i} has no answers")
        for j, a in enumerate(q.answers, 1):
            if not a.text:
                violations.append(f"question {i} answer {j} has no text")
            if not isinstance(a.correct, bool):
                violations.append(f"question {i} answer {j} has no correctness flag")
    return ValidationReport(ok=not violations, violations=violations)


def correctness_warnings(quiz: Quiz) -> list[str]:
    """Questions that do not have exactly one correct answer."""
    warnings = []
    for i, q in enumerate(quiz.questions, 1):
        n = sum(1 for a in q.answers if a.correct is True)
        if n != 1:
            warnings.append(f"question {i} has {n} correct answers")
    return warnings
