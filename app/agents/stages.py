# =============================================================================
# Research Stages — Stage Descriptors and Executor
# =============================================================================
#
# The research pipeline is three completion calls in a fixed order:
#
#   rephraser ──▶ searcher ──▶ generator
#   (refine)      (search)      (synthesize)
#
# Each stage is described by a StageSpec: its role instruction, how its
# user message is built from the query and earlier outputs, its sampling
# temperature, and the text to use when the model returns nothing.
#
# Only the searcher sees the corpus. The rephraser works on the raw query
# and the generator works on the refined query plus the search findings.
#
# TEMPERATURES:
#   rephraser 0.3  (query rewriting)
#   searcher  0.5  (extraction from the corpus)
#   generator 0.7  (final prose answer)
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum

from app.config import settings
from app.services.llm import LLMProvider

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Pipeline stages, in execution order. Values are the wire agent names."""

    REFINE = "rephraser"
    SEARCH = "searcher"
    SYNTHESIZE = "generator"


NO_FINDINGS = "No relevant information found."
NO_ANSWER = "Sorry, I could not generate a response."


# ---------------------------------------------------------------------------
# Role Instructions
# ---------------------------------------------------------------------------


def _refine_instruction(context: str | None) -> str:
    return (
        "You are a Query Rephraser Agent. Your job is to take a user's "
        "question and rephrase it to be more precise, specific, and "
        "searchable.\n"
        "Maintain the original intent but make it clearer and more focused "
        "on extracting relevant information.\n"
        "Only return the rephrased query with no additional explanation."
    )


def _search_instruction(context: str | None) -> str:
    return (
        "You are a Search Agent with access to information about "
        f"{settings.corpus_description}. Given a query, find the most "
        "relevant information from the database.\n"
        "Your job is to extract and organize the most pertinent details "
        "that answer the query.\n"
        "Here is the database:\n\n"
        f"{context or ''}\n\n"
        "Return only the relevant information with brief explanations of "
        "why it's relevant. Format your response in markdown."
    )


def _synthesize_instruction(context: str | None) -> str:
    return (
        "You are a Response Generation Agent. Your job is to take search "
        f"results about {settings.corpus_description} and craft them into "
        "a comprehensive, well-organized answer.\n"
        "Make your response engaging, informative, and easy to understand. "
        "Use markdown formatting for better readability.\n"
        "Do not add information that isn't supported by the search results."
    )


# ---------------------------------------------------------------------------
# Input Builders
# ---------------------------------------------------------------------------
# `outputs` maps Stage.value → output text of every stage that already ran.
# ---------------------------------------------------------------------------


def _refine_input(query: str, outputs: Mapping[str, str]) -> str:
    return query


def _search_input(query: str, outputs: Mapping[str, str]) -> str:
    return outputs[Stage.REFINE.value]


def _synthesize_input(query: str, outputs: Mapping[str, str]) -> str:
    return (
        f"Query: {outputs[Stage.REFINE.value]}\n\n"
        f"Search Results: {outputs[Stage.SEARCH.value]}"
    )


# ---------------------------------------------------------------------------
# Stage Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StageSpec:
    """Everything needed to run one pipeline stage."""

    stage: Stage
    status_message: str
    temperature: float
    uses_corpus: bool
    # Text returned when the model answers with nothing usable.
    # None means "pass the stage input through unchanged".
    fallback: str | None
    instruction: Callable[[str | None], str]
    build_input: Callable[[str, Mapping[str, str]], str]


STAGES: tuple[StageSpec, ...] = (
    StageSpec(
        stage=Stage.REFINE,
        status_message="Rephrasing your query for better search results...",
        temperature=0.3,
        uses_corpus=False,
        fallback=None,
        instruction=_refine_instruction,
        build_input=_refine_input,
    ),
    StageSpec(
        stage=Stage.SEARCH,
        status_message="Searching for relevant information...",
        temperature=0.5,
        uses_corpus=True,
        fallback=NO_FINDINGS,
        instruction=_search_instruction,
        build_input=_search_input,
    ),
    StageSpec(
        stage=Stage.SYNTHESIZE,
        status_message="Generating comprehensive response...",
        temperature=0.7,
        uses_corpus=False,
        fallback=NO_ANSWER,
        instruction=_synthesize_instruction,
        build_input=_synthesize_input,
    ),
)


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


async def execute_stage(
    spec: StageSpec,
    input_text: str,
    context: str | None,
    llm: LLMProvider,
    model: str | None = None,
) -> str:
    """
    Run one stage: exactly one completion call, no retry.

    Args:
        spec: The stage descriptor.
        input_text: User-message content for this stage.
        context: Corpus text, embedded only for stages with uses_corpus.
        llm: Completion provider.
        model: Optional model override.

    Returns:
        The model's text, or the stage fallback if it came back blank.

    Raises:
        UpstreamError: The completion call failed.
    """
    system = spec.instruction(context if spec.uses_corpus else None)

    logger.info(
        "Stage %s: calling LLM (temperature=%.1f, input=%d chars)",
        spec.stage.value, spec.temperature, len(input_text),
    )

    response = await llm.complete(
        messages=[{"role": "user", "content": input_text}],
        system=system,
        temperature=spec.temperature,
        model=model,
    )

    if not response.content.strip():
        logger.warning(
            "Stage %s returned no text; using fallback", spec.stage.value,
        )
        return spec.fallback if spec.fallback is not None else input_text

    logger.info(
        "Stage %s complete: model=%s, tokens=%d+%d",
        spec.stage.value, response.model,
        response.input_tokens, response.output_tokens,
    )
    return response.content
