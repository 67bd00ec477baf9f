from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tense_quiz.config import Settings
    from tense_quiz.providers.base import LLMProvider


def make_llm(settings: Settings) -> LLMProvider:
    """Instantiate the configured provider; SDKs are imported lazily."""
    if settings.llm_provider == "ollama":
        from tense_quiz.providers.llm_ollama import OllamaProvider
        return OllamaProvider(
            base_url=settings.ollama_url,
            model=settings.llm_model,
            thinking=settings.llm_thinking,
        )
    elif settings.llm_provider == "anthropic":
        from tense_quiz.providers.llm_anthropic import AnthropicProvider
        return AnthropicProvider(model=settings.llm_model, max_tokens=settings.llm_max_tokens)
    elif settings.llm_provider == "openai":
        from tense_quiz.providers.llm_openai import OpenAIProvider
        return OpenAIProvider(model=settings.llm_model, max_tokens=settings.llm_max_tokens)
    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
