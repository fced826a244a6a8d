# =============================================================================
# FastAPI Application — Entry Point
# =============================================================================
#
# Run with:
#   uvicorn app.main:app --reload
#
# STARTUP (lifespan):
#   1. Configure logging
#   2. Load the corpus file (missing/unreadable → startup aborts)
#   3. Build the LLM provider (missing credential → startup aborts)
#
# Both endpoints depend on the corpus and the provider, so the server
# refuses to start rather than failing every request.
# =============================================================================

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import chat, research
from app.config import Settings, get_settings, settings
from app.models.responses import ErrorResponse, HealthResponse
from app.services.corpus import init_corpus
from app.services.llm import get_llm_provider

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    configure_logging()

    logger.info("Loading corpus from %s...", settings.corpus_path)
    corpus = init_corpus()
    logger.info("Corpus ready (%d characters)", len(corpus))

    provider = get_llm_provider()
    logger.info("LLM provider ready: %s", type(provider).__name__)

    logger.info("%s ready", settings.app_name)
    yield
    logger.info("Shutting down %s", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description=(
        "Answers questions about a startup directory with a three-stage "
        "research pipeline (rephrase → search → generate) and a "
        "corpus-grounded chat endpoint."
    ),
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(research.router)
app.include_router(chat.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed bodies as `{"error": ...}` with a 422."""
    messages = [
        f"{'.'.join(str(part) for part in err['loc'][1:])}: {err['msg']}"
        for err in exc.errors()
    ]
    logger.info("Rejected malformed request to %s: %s", request.url.path, messages)
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error="Invalid request: " + "; ".join(messages),
        ).model_dump(),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health(config: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(version=config.app_version, service=config.app_name)
