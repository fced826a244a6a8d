# =============================================================================
# Shared Test Fixtures
# =============================================================================
#
# StubLLM stands in for the completion service: it records every call and
# answers from a fixed reply list or a responder function, so no API keys
# or network access are needed.
# =============================================================================

from __future__ import annotations

import pytest

from app.services.corpus import CorpusContext
from app.services.llm import LLMResponse, UpstreamError

CORPUS_TEXT = """# X25 Batch

## Ledgerly
Industry: Fintech
Automated bookkeeping and cash-flow forecasting for small businesses.

## Botanica
Industry: Consumer
Subscription plant care with sensors that tell you when to water.
"""


class StubLLM:
    """Deterministic LLMProvider that records the instructions it receives."""

    def __init__(self, replies=None, responder=None, fail_on_call=None):
        self.replies = list(replies or [])
        self.responder = responder
        self.fail_on_call = fail_on_call
        self.calls: list[dict] = []

    async def complete(
        self,
        messages,
        system=None,
        temperature=None,
        max_tokens=None,
        model=None,
    ):
        self.calls.append({
            "messages": messages,
            "system": system,
            "temperature": temperature,
            "model": model,
        })
        if self.fail_on_call == len(self.calls):
            raise UpstreamError("upstream exploded: secret diagnostic")

        if self.responder is not None:
            content = self.responder(system or "", messages)
        else:
            content = self.replies[len(self.calls) - 1]

        return LLMResponse(
            content=content,
            model=model or "stub-model",
            input_tokens=10,
            output_tokens=5,
        )


def echo_responder(system: str, messages: list[dict[str, str]]) -> str:
    """Reply with a stage tag and the user content, so outputs are traceable."""
    content = messages[-1]["content"]
    if system.startswith("You are a Query Rephraser"):
        return f"refined: {content}"
    if system.startswith("You are a Search Agent"):
        return f"findings for: {content}"
    return f"answer from: {content}"


@pytest.fixture
def corpus() -> CorpusContext:
    return CorpusContext(text=CORPUS_TEXT, source="test-corpus.md")


@pytest.fixture
def stub_llm_factory():
    return StubLLM


@pytest.fixture
def echo_llm() -> StubLLM:
    return StubLLM(responder=echo_responder)
