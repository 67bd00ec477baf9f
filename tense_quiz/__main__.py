"""CLI entry point for tense-quiz.

Usage:
  python -m tense_quiz serve [--host HOST] [--port PORT]
  python -m tense_quiz tenses
  python -m tense_quiz quiz --tense TENSE [--count N]
"""
from __future__ import annotations

import asyncio
import logging
import sys


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "tenses":
        _tenses()
    elif command == "quiz":
        _quiz(args[1:])
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, tenses, quiz")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _serve(args: list[str]):
    import uvicorn

    from tense_quiz.config import load_settings

    settings = load_settings()
    port = int(_parse_flag(args, "--port", str(settings.port)))
    host = _parse_flag(args, "--host", settings.host)

    print(f"Starting Tense Quiz on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    uvicorn.run(
        "tense_quiz.app:app",
        host=host,
        port=port,
        reload=False,
        timeout_graceful_shutdown=5,
    )


def _tenses():
    from tense_quiz.schema import TENSES

    for value, label in TENSES:
        print(f"  {value:32s} {label}")


def _ask(prompt: str, upper: int) -> int:
    while True:
        raw = input(prompt).strip()
        if raw.isdigit() and 1 <= int(raw) <= upper:
            return int(raw) - 1
        print(f"  Enter a number between 1 and {upper}.")


async def _play(session, request) -> int:
    from tense_quiz.models import LifecycleState

    state = session.current_state()
    async for state in session.submit(request):
        if state.lifecycle is LifecycleState.STREAMING:
            done = sum(1 for q in state.questions if q.text and q.answers)
            print(f"\r  Receiving questions... {done}", end="", flush=True)
    print()

    if state.lifecycle is not LifecycleState.READY:
        print(f"Generation failed: {state.diagnostic}")
        print("Run the command again to retry.")
        return 1

    for i, q in enumerate(state.questions):
        print(f"\n{i + 1}. {q.text}")
        for j, a in enumerate(q.answers):
            print(f"   {j + 1}) {a.text}")
        session.select_answer(i, _ask("   Your answer: ", len(q.answers)))

    score = session.verify()
    print(f"\n{score.message}")
    if score.perfect:
        print("Perfect score!")
    return 0


def _quiz(args: list[str]):
    logging.basicConfig(level=logging.WARNING, format="%(name)s | %(message)s")

    from tense_quiz.config import load_settings
    from tense_quiz.errors import InvalidRequest
    from tense_quiz.generator import StreamingGenerator
    from tense_quiz.models import GenerationRequest
    from tense_quiz.providers.factory import make_llm
    from tense_quiz.reconciler import QuizSession
    from tense_quiz.schema import validate_request

    tense = _parse_flag(args, "--tense", "")
    count_raw = _parse_flag(args, "--count", "5")
    try:
        count = int(count_raw)
    except ValueError:
        print(f"--count must be a number (got {count_raw!r})")
        sys.exit(1)

    settings = load_settings()
    try:
        llm = make_llm(settings)
    except ValueError as e:
        print(e)
        sys.exit(1)

    request = GenerationRequest(tense=tense, question_count=count)
    try:
        validate_request(request)
    except InvalidRequest as e:
        print(f"Invalid request: {e}")
        print("Run 'python -m tense_quiz tenses' for the list of tenses.")
        sys.exit(1)

    session = QuizSession(StreamingGenerator(llm, temperature=settings.llm_temperature))
    print(f"Generating {count} questions about {tense} using {llm.name()}...")
    sys.exit(asyncio.run(_play(session, request)))


if __name__ == "__main__":
    main()
