"""Turn a generation instruction into a terminated sequence of quiz snapshots."""
from __future__ import annotations

import contextlib
import copy
import logging
import time
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from tense_quiz.partial_json import PartialJSONError, parse_partial_json
from tense_quiz.prompts import SYSTEM_PROMPT, build_quiz_prompt
from tense_quiz.schema import describe

if TYPE_CHECKING:
    from tense_quiz.providers.base import LLMProvider

_log = logging.getLogger("tense_quiz.stream")


class SnapshotStream:
    """Single-use async iterator of partial quiz documents.

    Each item is the decoded JSON value of everything the model has produced
    so far; an item is only emitted when it differs from the previous one.
    Provider faults and undecodable output end the sequence early and are
    recorded in ``error`` rather than raised.
    """

    def __init__(
        self,
        llm: LLMProvider,
        prompt: str,
        system: str,
        schema: dict,
        temperature: float,
    ):
        self._llm = llm
        self._prompt = prompt
        self._system = system
        self._schema = schema
        self._temperature = temperature
        self._consumed = False
        self.error: str | None = None
        self.snapshot_count = 0

    def __aiter__(self) -> AsyncIterator[dict]:
        if self._consumed:
            raise RuntimeError("snapshot stream can only be consumed once")
        self._consumed = True
        return self._snapshots()

    async def _snapshots(self) -> AsyncIterator[dict]:
        t0 = time.monotonic()
        text = ""
        last = None
        chunks = self._llm.generate_stream(
            self._prompt,
            temperature=self._temperature,
            system=self._system,
            json_schema=self._schema,
        )
        try:
            async with contextlib.aclosing(chunks):
                async for chunk in chunks:
                    text += chunk
                    try:
                        snapshot = parse_partial_json(text)
                    except PartialJSONError as e:
                        self.error = f"malformed response from {self._llm.name()}: {e}"
                        _log.warning("Stopping stream: %s", self.error)
                        _log.debug("  Raw response: %.300s", text)
                        return
                    if snapshot is None or snapshot == last:
                        continue
                    last = snapshot
                    self.snapshot_count += 1
                    yield copy.deepcopy(snapshot)
        except Exception as e:
            self.error = f"generation failed ({self._llm.name()}): {e}"
            _log.warning("Generation failed after %d snapshots: %s", self.snapshot_count, e)
            return
        _log.info(
            "Stream ended: %d snapshots in %.1fs",
            self.snapshot_count, time.monotonic() - t0,
        )


class StreamingGenerator:
    """Wrap an LLM provider as a source of partial quiz snapshots."""

    def __init__(self, llm: LLMProvider, temperature: float = 0.7, system: str = SYSTEM_PROMPT):
        self.llm = llm
        self.temperature = temperature
        self.system = system

    def stream(self, instruction: str) -> SnapshotStream:
        schema = describe()
        _log.info("Requesting quiz from %s: %s", self.llm.name(), instruction)
        return SnapshotStream(
            self.llm,
            build_quiz_prompt(instruction, schema),
            system=self.system,
            schema=schema,
            temperature=self.temperature,
        )
