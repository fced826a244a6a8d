# =============================================================================
# Chat Agent — Single-Turn Corpus-Grounded Passthrough
# =============================================================================
#
# One completion call per request: the client's conversation is forwarded
# with a system prompt that embeds the whole corpus. No orchestration, no
# stage records.
# =============================================================================

from __future__ import annotations

import logging

from app.config import settings
from app.services.corpus import CorpusContext
from app.services.llm import LLMProvider

logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.7


def build_chat_system_prompt(corpus: CorpusContext) -> str:
    """System prompt for /chat with the corpus embedded verbatim."""
    prompt = (
        "You are a knowledgeable AI assistant with access to information "
        f"about {settings.corpus_description}.\n"
        "You have access to the following directory data:\n\n"
        f"{corpus.text}\n\n"
        "When answering questions:\n"
        "1. Only use information that's explicitly present in the data provided\n"
        "2. If asked about a specific company, provide all available "
        "information about it\n"
        "3. If asked to compare companies or find companies by criteria "
        "(e.g., industry, batch, location), analyze the data accordingly\n"
        "4. If information is not available in the data, clearly state that\n"
        "5. You can make logical connections between data points, but "
        "clearly indicate when you're making an inference\n"
        "6. Format your responses in a clear, readable way"
    )
    if settings.corpus_batch:
        prompt += (
            f"\n\nCurrent data is from the {settings.corpus_batch} batch "
            f"of {settings.corpus_description}."
        )
    return prompt


async def chat_reply(
    messages: list[dict[str, str]],
    corpus: CorpusContext,
    llm: LLMProvider,
    model: str | None = None,
) -> str:
    """
    Answer the latest turn of a conversation.

    Raises:
        UpstreamError: The completion call failed.
    """
    logger.info("Chat request: %d message(s)", len(messages))

    response = await llm.complete(
        messages=messages,
        system=build_chat_system_prompt(corpus),
        temperature=CHAT_TEMPERATURE,
        model=model or settings.chat_model,
    )
    return response.content
