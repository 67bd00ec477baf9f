from __future__ import annotations

import json
import logging
import time
from collections.abc import AsyncIterator

import httpx

from tense_quiz.providers.base import LLMProvider

log = logging.getLogger("tense_quiz.llm")

_THINK_OPEN = "<think>"
_THINK_CLOSE = "</think>"


class OllamaProvider(LLMProvider):
    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "qwen3:8b",
        thinking: bool = False,
        timeout: float = 120.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.thinking = thinking
        self.timeout = timeout

    def _body(self, prompt: str, temperature: float, system: str | None,
              json_schema: dict | None, stream: bool) -> dict:
        body: dict = {
            "model": self.model,
            "prompt": prompt,
            "options": {"temperature": temperature},
            "stream": stream,
            "think": self.thinking,
        }
        if system:
            body["system"] = system
        if json_schema is not None:
            # Ollama constrains decoding to the schema when given one
            body["format"] = json_schema
        return body

    async def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        system: str | None = None,
        json_schema: dict | None = None,
    ) -> str:
        log.info("── PROMPT (%s) ──\n%s", self.model, prompt)
        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                f"{self.base_url}/api/generate",
                json=self._body(prompt, temperature, system, json_schema, stream=False),
            )
            resp.raise_for_status()
            data = resp.json()
        elapsed = time.monotonic() - t0
        response = data["response"]
        tokens = data.get("eval_count", "?")
        log.info("── RESPONSE (%.1fs, %s tokens) ──\n%s", elapsed, tokens, response)
        return response

    async def generate_stream(
        self,
        prompt: str,
        temperature: float = 0.7,
        system: str | None = None,
        json_schema: dict | None = None,
    ) -> AsyncIterator[str]:
        """Stream tokens from Ollama, stripping <think>...</think> blocks."""
        log.info("── STREAM PROMPT (%s) ──\n%s", self.model, prompt)
        if system:
            log.info("── SYSTEM ──\n%s", system)
        t0 = time.monotonic()
        buf = ""
        in_think = False
        body = self._body(prompt, temperature, system, json_schema, stream=True)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            async with client.stream("POST", f"{self.base_url}/api/generate", json=body) as resp:
                resp.raise_for_status()
                async for line in resp.aiter_lines():
                    if not line.strip():
                        continue
                    data = json.loads(line)
                    if data.get("error"):
                        raise RuntimeError(f"ollama: {data['error']}")
                    token = data.get("response", "")
                    if not token:
                        continue

                    buf += token

                    while True:
                        if in_think:
                            idx = buf.find(_THINK_CLOSE)
                            if idx < 0:
                                buf = buf[-(len(_THINK_CLOSE) - 1):]
                                break
                            buf = buf[idx + len(_THINK_CLOSE):]
                            in_think = False
                        else:
                            idx = buf.find(_THINK_OPEN)
                            if idx >= 0:
                                if idx > 0:
                                    yield buf[:idx]
                                buf = buf[idx + len(_THINK_OPEN):]
                                in_think = True
                            else:
                                # Hold back enough for a split "<think>" tag
                                keep = len(_THINK_OPEN) - 1
                                if len(buf) > keep:
                                    yield buf[:-keep]
                                    buf = buf[-keep:]
                                break

        if buf and not in_think:
            yield buf

        elapsed = time.monotonic() - t0
        log.info("── STREAM COMPLETE (%.1fs) ──", elapsed)

    def name(self) -> str:
        return f"ollama/{self.model}"
