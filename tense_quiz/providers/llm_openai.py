from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator

from tense_quiz.providers.base import LLMProvider

log = logging.getLogger("tense_quiz.llm")


class OpenAIProvider(LLMProvider):
    def __init__(self, model: str = "gpt-4o-mini", max_tokens: int = 4096):
        import openai
        self.client = openai.AsyncOpenAI(
            api_key=os.environ.get("OPENAI_API_KEY", ""),
        )
        self.model = model
        self.max_tokens = max_tokens

    def _request(self, prompt: str, temperature: float, system: str | None,
                 json_schema: dict | None) -> dict:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        kwargs: dict = {
            "model": self.model,
            "temperature": temperature,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if json_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "quiz", "schema": json_schema},
            }
        return kwargs

    async def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        system: str | None = None,
        json_schema: dict | None = None,
    ) -> str:
        resp = await self.client.chat.completions.create(
            **self._request(prompt, temperature, system, json_schema),
        )
        return resp.choices[0].message.content or ""

    async def generate_stream(
        self,
        prompt: str,
        temperature: float = 0.7,
        system: str | None = None,
        json_schema: dict | None = None,
    ) -> AsyncIterator[str]:
        log.info("── STREAM PROMPT (%s) ──\n%s", self.model, prompt)
        stream = await self.client.chat.completions.create(
            stream=True,
            **self._request(prompt, temperature, system, json_schema),
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta

    def name(self) -> str:
        return f"openai/{self.model}"
