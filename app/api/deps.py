# =============================================================================
# API Dependencies — Provider and Corpus Injection
# =============================================================================
#
# Route handlers receive the completion provider and the corpus through
# FastAPI's dependency system rather than importing the singletons
# directly, so tests can substitute stubs via dependency_overrides:
#
#   app.dependency_overrides[get_llm] = lambda: StubLLM()
#   app.dependency_overrides[get_corpus] = lambda: CorpusContext(...)
# =============================================================================

from __future__ import annotations

from app.services.corpus import CorpusContext
from app.services.corpus import get_corpus as _get_corpus
from app.services.llm import LLMProvider, get_llm_provider


def get_llm() -> LLMProvider:
    """FastAPI dependency returning the process-wide LLM provider."""
    return get_llm_provider()


def get_corpus() -> CorpusContext:
    """FastAPI dependency returning the startup-loaded corpus."""
    return _get_corpus()
