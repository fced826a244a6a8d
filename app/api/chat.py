# =============================================================================
# Chat API — Corpus-Grounded Chat Passthrough
# =============================================================================
#
# POST /chat forwards the conversation to the chat model with the corpus
# in the system prompt and returns the assistant's message.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.agents.chat import chat_reply
from app.api.deps import get_corpus, get_llm
from app.api.research import INTERNAL_ERROR
from app.models.requests import ChatMessage, ChatRequest
from app.models.responses import ErrorResponse
from app.services.corpus import CorpusContext
from app.services.llm import LLMProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


@router.post(
    "/chat",
    response_model=ChatMessage,
    responses={500: {"model": ErrorResponse}},
    summary="Chat about the startup directory",
)
async def chat_endpoint(
    request: ChatRequest,
    corpus: CorpusContext = Depends(get_corpus),
    llm: LLMProvider = Depends(get_llm),
) -> ChatMessage | JSONResponse:
    try:
        content = await chat_reply(
            [message.model_dump() for message in request.messages],
            corpus=corpus,
            llm=llm,
        )
    except Exception as e:
        logger.exception("Chat completion failed: %s", e)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=INTERNAL_ERROR).model_dump(),
        )

    return ChatMessage(role="assistant", content=content)
