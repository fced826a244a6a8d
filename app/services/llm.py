# =============================================================================
# Multi-Provider LLM Abstraction — Completion Client
# =============================================================================
#
# Provides a common interface for LLM completions, with concrete
# implementations for OpenAI-compatible APIs and Anthropic (Claude).
# Every stage of the research pipeline and the /chat endpoint go through
# this interface, so tests can swap in a stub provider.
#
# Errors raised by the SDKs (network, auth, rate limit, server errors) and
# responses with no choices at all are surfaced as UpstreamError. A
# response whose text is empty is NOT an error; callers decide what to
# do with blank output.
#
# ARCHITECTURE:
#   LLMProvider (Protocol)
#   ├── OpenAICompatibleProvider — OpenAI / any OpenAI-compatible API
#   │   └── complete()          — system prompt as message role
#   ├── AnthropicProvider       — Claude via native Anthropic SDK
#   │   └── complete()          — system prompt as top-level kwarg
#   └── get_llm_provider()      — Singleton factory, reads from config
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from app.config import settings

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """A completion call failed or came back without a response."""


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class LLMResponse:
    """
    Standardised response from any LLM provider.

    Normalises the different response formats (Anthropic vs OpenAI)
    into a single structure that downstream code can consume.
    """

    content: str           # The generated text (may be empty)
    model: str             # Model identifier reported by the provider
    input_tokens: int      # Tokens consumed by the prompt
    output_tokens: int     # Tokens generated in the response


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class LLMProvider(Protocol):
    """
    Protocol defining the LLM provider interface.

    Any object with a matching async `complete()` works, including the
    stub providers used in tests.
    """

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        model: str | None = None,
    ) -> LLMResponse:
        """
        Generate a completion from the LLM.

        Args:
            messages: Conversation messages as dicts with "role" and "content".
                Roles: "user", "assistant" (no "system" — use the system param).
            system: System prompt for the LLM. Handled differently per provider:
                - Anthropic: top-level `system=` kwarg
                - OpenAI: prepended as {"role": "system", ...} message
            temperature: Sampling temperature (provider default if None).
            max_tokens: Override max output tokens (default from config).
            model: Override the provider's default model.

        Returns:
            LLMResponse with generated text and usage metrics.

        Raises:
            UpstreamError: The call failed or returned no response.
        """
        ...


# ---------------------------------------------------------------------------
# Implementation 1: OpenAI-Compatible
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider:
    """
    OpenAI-compatible provider for any API that follows the OpenAI spec.

    Pointing at a different vendor is a config change:
        LLM_PROVIDER=openai_compatible
        LLM_BASE_URL=https://api.deepseek.com/v1
        LLM_API_KEY=your-key
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        from openai import AsyncOpenAI

        resolved_key = api_key or settings.llm_api_key or settings.openai_api_key
        if not resolved_key:
            raise ValueError(
                "No API key configured for OpenAI-compatible provider. "
                "Set OPENAI_API_KEY or LLM_API_KEY in .env"
            )

        client_kwargs: dict = {
            "api_key": resolved_key,
            "max_retries": settings.llm_max_retries,
        }
        resolved_base_url = base_url or settings.llm_base_url
        if resolved_base_url:
            client_kwargs["base_url"] = resolved_base_url
        if settings.llm_timeout_seconds is not None:
            client_kwargs["timeout"] = settings.llm_timeout_seconds

        self._client = AsyncOpenAI(**client_kwargs)
        self._model = model or settings.research_model
        self._max_tokens = settings.llm_max_tokens

        logger.info(
            "Initialized OpenAICompatibleProvider (model=%s, base_url=%s)",
            self._model,
            resolved_base_url or "https://api.openai.com/v1",
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        model: str | None = None,
    ) -> LLMResponse:
        """Generate a completion using an OpenAI-compatible API."""
        from openai import OpenAIError

        # OpenAI: system prompt goes as the first message
        all_messages: list[dict[str, str]] = []
        if system:
            all_messages.append({"role": "system", "content": system})
        all_messages.extend(messages)

        kwargs: dict = {
            "model": model or self._model,
            "messages": all_messages,
            "max_tokens": max_tokens or self._max_tokens,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            raise UpstreamError(f"Completion request failed: {e}") from e

        if not response.choices:
            raise UpstreamError("Completion response contained no choices")

        content = response.choices[0].message.content or ""

        # Token counts: OpenAI uses different field names than Anthropic
        usage = response.usage
        input_tokens = usage.prompt_tokens if usage else 0
        output_tokens = usage.completion_tokens if usage else 0

        return LLMResponse(
            content=content,
            model=response.model or kwargs["model"],
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )


# ---------------------------------------------------------------------------
# Implementation 2: Anthropic (Claude)
# ---------------------------------------------------------------------------


class AnthropicProvider:
    """
    Anthropic Claude provider using the native SDK.

    KEY API DIFFERENCE: Anthropic takes system prompts as a top-level
    `system=` kwarg, NOT as a message with role "system".
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        from anthropic import AsyncAnthropic

        resolved_key = api_key or settings.llm_api_key or settings.anthropic_api_key
        if not resolved_key:
            raise ValueError(
                "No Anthropic API key configured. Set LLM_API_KEY or "
                "ANTHROPIC_API_KEY in .env"
            )

        client_kwargs: dict = {
            "api_key": resolved_key,
            "max_retries": settings.llm_max_retries,
        }
        if settings.llm_timeout_seconds is not None:
            client_kwargs["timeout"] = settings.llm_timeout_seconds

        self._client = AsyncAnthropic(**client_kwargs)
        self._model = model or settings.research_model
        self._max_tokens = settings.llm_max_tokens

        logger.info(
            "Initialized AnthropicProvider (model=%s)", self._model
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        model: str | None = None,
    ) -> LLMResponse:
        """Generate a completion using Claude."""
        from anthropic import AnthropicError

        kwargs: dict = {
            "model": model or self._model,
            "messages": messages,
            "max_tokens": max_tokens or self._max_tokens,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        # Anthropic: system prompt is a top-level kwarg, not a message
        if system:
            kwargs["system"] = system

        try:
            response = await self._client.messages.create(**kwargs)
        except AnthropicError as e:
            raise UpstreamError(f"Completion request failed: {e}") from e

        if not response.content:
            raise UpstreamError("Completion response contained no content blocks")

        # Extract text from the first text block
        content = ""
        for block in response.content:
            if block.type == "text":
                content = block.text
                break

        return LLMResponse(
            content=content,
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

# Lazy singleton — avoid re-creating client on every request
_provider: OpenAICompatibleProvider | AnthropicProvider | None = None


def get_llm_provider() -> OpenAICompatibleProvider | AnthropicProvider:
    """
    Factory that returns the configured LLM provider.

    Reads `llm_provider` from settings:
    - "openai_compatible" → OpenAICompatibleProvider
    - "anthropic" → AnthropicProvider (Claude)

    Raises:
        ValueError: If the provider type is unknown or no API key is set.
    """
    global _provider
    if _provider is None:
        if settings.llm_provider == "openai_compatible":
            _provider = OpenAICompatibleProvider()
        elif settings.llm_provider == "anthropic":
            _provider = AnthropicProvider()
        else:
            raise ValueError(
                f"Unknown LLM provider '{settings.llm_provider}'. "
                "Supported: 'openai_compatible', 'anthropic'"
            )
    return _provider
