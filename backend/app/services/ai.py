"""LLM generation clients.

Every client exposes one coroutine, ``generate(prompt, *, temperature,
max_tokens) -> str``. Replies are untrusted text; the only guarantee made
here is that a returned string is non-empty. Every other outcome (SDK error,
network error, timeout, empty reply) raises GenerationError. Nothing is
retried.
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Protocol

from app.prompts.lesson_generation import CONNECTION_TEST_REPLY
from app.services.prompt_builder import build_connection_test_prompt

logger = logging.getLogger("lessoncraft.ai")
_prompt_logger = logging.getLogger("lessoncraft.llm_prompts")


class GenerationError(RuntimeError):
    """The language model could not produce a usable reply."""


class GenerationClient(Protocol):
    async def generate(self, prompt: str, *, temperature: float = 0.7, max_tokens: int = 2048) -> str:
        ...


def _log_prompt(provider: str, model: str, prompt: str, temperature: float, max_tokens: int) -> None:
    if os.environ.get("DEBUG_LLM_PROMPTS", "").lower() in ("1", "true"):
        _prompt_logger.warning(
            "\n\n%s\n"
            "── PROMPT ──────────────────────────────────────────────\n%s\n"
            "── CONFIG ──────────────────────────────────────────────\n"
            "  provider=%s  model=%s  temp=%s  max_tokens=%s\n"
            "%s",
            "=" * 60,
            prompt,
            provider,
            model,
            temperature,
            max_tokens,
            "=" * 60,
        )


def _require_text(text: str | None, provider: str) -> str:
    if not text or not text.strip():
        raise GenerationError(f"Empty response from {provider}")
    return text


class GeminiGenerationClient:
    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        if not api_key:
            raise ValueError("GEMINI_API_KEY is not configured")
        from google import genai
        from google.genai import types

        self._types = types
        self._client = genai.Client(api_key=api_key)
        self.model = model

    async def generate(self, prompt: str, *, temperature: float = 0.7, max_tokens: int = 2048) -> str:
        _log_prompt("gemini", self.model, prompt, temperature, max_tokens)
        types = self._types
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            # Disable thinking so the token budget goes to the reply itself
            thinking_config=types.ThinkingConfig(thinking_budget=0),
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except Exception as exc:
            raise GenerationError(f"Gemini call failed: {exc}") from exc
        return _require_text(response.text, "Gemini")


class OpenAIGenerationClient:
    def __init__(self, api_key: str, model: str = "gpt-4o"):
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not configured")
        from openai import AsyncOpenAI

        self._client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def generate(self, prompt: str, *, temperature: float = 0.7, max_tokens: int = 2048) -> str:
        _log_prompt("openai", self.model, prompt, temperature, max_tokens)
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
            text = response.choices[0].message.content
        except Exception as exc:
            raise GenerationError(f"OpenAI call failed: {exc}") from exc
        return _require_text(text, "OpenAI")


@lru_cache(maxsize=8)
def _cached_client(provider: str, api_key: str, model: str) -> GenerationClient:
    # one SDK client (and connection pool) per provider / key / model
    if provider == "openai":
        return OpenAIGenerationClient(api_key=api_key, model=model)
    return GeminiGenerationClient(api_key=api_key, model=model)


def get_generation_client(settings=None) -> GenerationClient:
    """Return the shared generation client for the llm_provider setting."""
    if settings is None:
        from app.core.config import get_settings

        settings = get_settings()
    if settings.llm_provider == "openai":
        return _cached_client("openai", settings.openai_api_key, settings.openai_model)
    return _cached_client("gemini", settings.gemini_api_key, settings.gemini_model)


async def check_connection(client: GenerationClient) -> bool:
    """Send the fixed liveness prompt; True only if the model echoes it back."""
    try:
        reply = await client.generate(build_connection_test_prompt(), temperature=0.0, max_tokens=100)
    except GenerationError as exc:
        logger.error("[ai.check_connection] %s", exc)
        return False
    return CONNECTION_TEST_REPLY in reply
