"""FastAPI application: quiz generation, answering and scoring."""
from __future__ import annotations

import json
import logging

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse

from tense_quiz.config import Settings, load_settings, save_settings
from tense_quiz.errors import IncompleteAnswers, InvalidRequest, InvalidSelection, QuizNotReady
from tense_quiz.generator import StreamingGenerator
from tense_quiz.models import GenerationRequest
from tense_quiz.providers.factory import make_llm
from tense_quiz.reconciler import QuizSession
from tense_quiz.schema import TENSES

app = FastAPI(title="Tense Quiz")

_log = logging.getLogger("tense_quiz.api")

# Global state (initialized lazily or by tests)
_settings: Settings | None = None
_session: QuizSession | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def _make_generator(s: Settings) -> StreamingGenerator:
    return StreamingGenerator(make_llm(s), temperature=s.llm_temperature)


def get_session() -> QuizSession:
    global _session
    if _session is None:
        _session = QuizSession(_make_generator(get_settings()))
    return _session


def _selections_dict(session: QuizSession) -> dict:
    return {str(i): a.to_dict() for i, a in sorted(session.selections.items())}


async def _json_object(request: Request) -> dict:
    """Decode the request body as a JSON object; an empty body counts as ``{}``."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise InvalidRequest("body", "not valid JSON") from None
    if not isinstance(body, dict):
        raise InvalidRequest("body", "expected a JSON object")
    return body


# ── API: Tenses ───────────────────────────────────────────────────────────

@app.get("/api/tenses")
async def api_tenses():
    return [{"value": value, "label": label} for value, label in TENSES]


# ── API: Quiz ─────────────────────────────────────────────────────────────

@app.post("/api/quiz")
async def api_quiz_submit(request: Request):
    try:
        body = await _json_object(request)
        states = get_session().submit(GenerationRequest.from_dict(body))
    except InvalidRequest as e:
        _log.info("Rejected request: %s", e)
        return JSONResponse(
            {"error": "invalid_request", "field": e.field, "message": e.message},
            status_code=422,
        )

    async def stream():
        async for state in states:
            yield f"data: {json.dumps(state.to_dict())}\n\n"

    return StreamingResponse(
        stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@app.get("/api/quiz")
async def api_quiz_state():
    session = get_session()
    result = session.current_state().to_dict()
    result["selections"] = _selections_dict(session)
    return result


@app.post("/api/quiz/answer")
async def api_quiz_answer(request: Request):
    try:
        body = await _json_object(request)
    except InvalidRequest as e:
        raise HTTPException(400, e.message)
    if "question_index" not in body or "answer_index" not in body:
        raise HTTPException(400, "question_index and answer_index are required")
    session = get_session()
    try:
        session.select_answer(body["question_index"], body["answer_index"])
    except InvalidSelection as e:
        raise HTTPException(400, str(e))
    return {"selections": _selections_dict(session)}


@app.post("/api/quiz/verify")
async def api_quiz_verify():
    try:
        score = get_session().verify()
    except IncompleteAnswers as e:
        return JSONResponse(
            {"error": "incomplete_answers", "message": str(e), "missing": e.missing},
            status_code=400,
        )
    except QuizNotReady as e:
        raise HTTPException(409, str(e))
    return score.to_dict()


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    try:
        body = await _json_object(request)
    except InvalidRequest as e:
        raise HTTPException(400, e.message)
    global _settings
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    updates = {k: v for k, v in body.items() if k in known}
    s = Settings(**{**get_settings().to_dict(), **updates})
    try:
        generator = _make_generator(s)
    except ValueError as e:
        raise HTTPException(400, str(e))
    _settings = s
    save_settings(s)
    # Swap the provider without discarding the quiz in progress
    get_session().generator = generator
    return s.to_dict()
