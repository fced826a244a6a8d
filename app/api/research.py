# =============================================================================
# Research API — Three-Stage Research Endpoint
# =============================================================================
#
# Provides POST /research, which runs the rephraser → searcher → generator
# pipeline synchronously and returns every step at once. Clients replay
# the steps with their own pacing (see app/client/progress.py).
#
# Errors: any failure, upstream or otherwise, becomes a generic 500 with
# `{"error": "Internal server error"}`. The diagnostic is logged here and
# never sent to the client.
# =============================================================================

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.agents.orchestrator import run_research
from app.api.deps import get_corpus, get_llm
from app.models.requests import ResearchRequest
from app.models.responses import ErrorResponse, ResearchResponse, ResearchStep
from app.services.corpus import CorpusContext
from app.services.llm import LLMProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Research"])

INTERNAL_ERROR = "Internal server error"


@router.post(
    "/research",
    response_model=ResearchResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Research a question against the startup directory",
    description=(
        "Rephrases the query, searches the loaded directory for relevant "
        "entries, and writes a markdown answer from the findings. All three "
        "steps are returned in order together with the final answer."
    ),
)
async def research_endpoint(
    request: ResearchRequest,
    corpus: CorpusContext = Depends(get_corpus),
    llm: LLMProvider = Depends(get_llm),
) -> ResearchResponse | JSONResponse:
    logger.info("Research request: query='%s'", request.query[:80])
    start_time = time.monotonic()

    try:
        result = await run_research(request.query, corpus=corpus, llm=llm)
    except Exception as e:
        logger.exception("Research pipeline crashed: %s", e)
        return _internal_error()

    if not result.ok:
        logger.error(
            "Research failed at stage %s: %s",
            result.failure.stage.value, result.failure.diagnostic,
        )
        return _internal_error()

    logger.info(
        "Research request complete in %d ms",
        int((time.monotonic() - start_time) * 1000),
    )

    return ResearchResponse(
        steps=[
            ResearchStep(
                agent=step.stage.value, status=step.status, output=step.output,
            )
            for step in result.steps
        ],
        final_response=result.final_answer,
    )


def _internal_error() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=INTERNAL_ERROR).model_dump(),
    )
