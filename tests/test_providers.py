"""Tests for provider selection and the Ollama stream filter."""
from __future__ import annotations

import json

import httpx
import pytest

from tense_quiz.config import Settings
from tense_quiz.providers.factory import make_llm
from tense_quiz.providers.llm_ollama import OllamaProvider


class TestMakeLLM:
    def test_ollama(self):
        llm = make_llm(Settings(llm_provider="ollama", llm_model="llama3"))
        assert isinstance(llm, OllamaProvider)
        assert llm.name() == "ollama/llama3"

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            make_llm(Settings(llm_provider="nope"))


def _ollama_lines(tokens: list[str]) -> bytes:
    lines = [json.dumps({"response": t, "done": False}) for t in tokens]
    lines.append(json.dumps({"response": "", "done": True}))
    return ("\n".join(lines) + "\n").encode()


class TestOllamaStream:
    @pytest.mark.asyncio
    async def test_strips_think_and_sends_schema(self, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            tokens = ["<thi", "nk>draft {\"x\"", "</think>", '{"questions"', ": []}"]
            return httpx.Response(200, content=_ollama_lines(tokens))

        real_client = httpx.AsyncClient

        def client_factory(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(handler)
            return real_client(*args, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", client_factory)

        llm = OllamaProvider(model="qwen3:8b")
        schema = {"type": "object"}
        chunks = [c async for c in llm.generate_stream("prompt", system="sys", json_schema=schema)]

        assert "".join(chunks) == '{"questions": []}'
        assert seen["body"]["format"] == schema
        assert seen["body"]["system"] == "sys"
        assert seen["body"]["stream"] is True

    @pytest.mark.asyncio
    async def test_error_line_raises(self, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b'{"error": "model not found"}\n')

        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            httpx, "AsyncClient",
            lambda *a, **kw: real_client(*a, transport=httpx.MockTransport(handler), **kw),
        )

        llm = OllamaProvider()
        with pytest.raises(RuntimeError, match="model not found"):
            async for _ in llm.generate_stream("prompt"):
                pass


class TestAnthropicRequest:
    def test_prompt_sent_unchanged(self):
        from tense_quiz.providers.llm_anthropic import AnthropicProvider

        llm = AnthropicProvider(model="claude-test")
        kwargs = llm._request("Generate 3 questions\n\nSchema: {}", 0.5, "sys")
        assert kwargs["messages"] == [
            {"role": "user", "content": "Generate 3 questions\n\nSchema: {}"},
        ]
        assert kwargs["system"] == "sys"
        assert kwargs["temperature"] == 0.5
