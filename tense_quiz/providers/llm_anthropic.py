from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator

from tense_quiz.providers.base import LLMProvider

log = logging.getLogger("tense_quiz.llm")


class AnthropicProvider(LLMProvider):
    def __init__(self, model: str = "claude-sonnet-4-20250514", max_tokens: int = 4096):
        import anthropic
        self.client = anthropic.AsyncAnthropic(
            api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
        )
        self.model = model
        self.max_tokens = max_tokens

    def _request(self, prompt: str, temperature: float, system: str | None) -> dict:
        # No constrained decoding here; the quiz prompt already carries the schema
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        return kwargs

    async def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        system: str | None = None,
        json_schema: dict | None = None,
    ) -> str:
        message = await self.client.messages.create(
            **self._request(prompt, temperature, system),
        )
        return message.content[0].text

    async def generate_stream(
        self,
        prompt: str,
        temperature: float = 0.7,
        system: str | None = None,
        json_schema: dict | None = None,
    ) -> AsyncIterator[str]:
        log.info("── STREAM PROMPT (%s) ──\n%s", self.model, prompt)
        async with self.client.messages.stream(
            **self._request(prompt, temperature, system),
        ) as stream:
            async for text in stream.text_stream:
                yield text

    def name(self) -> str:
        return f"anthropic/{self.model}"
