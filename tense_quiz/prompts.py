"""Prompt templates for quiz generation."""
from __future__ import annotations

import json

from tense_quiz.models import GenerationRequest

SYSTEM_PROMPT = "You generate quiz questions to practice english tenses"

INSTRUCTION_TEMPLATE = "Generate {count} questions about {tense} tense"

QUIZ_PROMPT = """\
{instruction}.

Each question is a multiple-choice item testing the correct use of the tense. \
Give every question between 2 and 4 answers, exactly one of which is correct. \
Mark the correct answer with "correct": true and every other answer with \
"correct": false.

Respond with a single JSON object matching this schema, with no other text:
{schema}

Example:
{{
  "questions": [
    {{
      "question": "Yesterday she ___ to the market.",
      "answers": [
        {{"text": "went", "correct": true}},
        {{"text": "goes", "correct": false}},
        {{"text": "has gone", "correct": false}}
      ]
    }}
  ]
}}
"""


def format_instruction(request: GenerationRequest) -> str:
    return INSTRUCTION_TEMPLATE.format(
        count=request.question_count,
        tense=request.tense,
    )


def build_quiz_prompt(instruction: str, schema: dict) -> str:
    return QUIZ_PROMPT.format(
        instruction=instruction,
        schema=json.dumps(schema, indent=2),
    )
