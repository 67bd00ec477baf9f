from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class LLMProvider(ABC):
    @abstractmethod
    async def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        system: str | None = None,
        json_schema: dict | None = None,
    ) -> str:
        ...

    async def generate_stream(
        self,
        prompt: str,
        temperature: float = 0.7,
        system: str | None = None,
        json_schema: dict | None = None,
    ) -> AsyncIterator[str]:
        """Stream response text. Default: yield full response at once."""
        result = await self.generate(prompt, temperature, system=system, json_schema=json_schema)
        yield result

    @abstractmethod
    def name(self) -> str:
        ...
