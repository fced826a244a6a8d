# =============================================================================
# LangGraph Orchestrator — Research Pipeline Assembly
# =============================================================================
#
# Wires the three research stages into a LangGraph StateGraph:
#
#   START ──▶ rephraser ──▶ searcher ──▶ generator ──▶ END
#
# The graph is built from the ordered STAGES tuple in stages.py, so each
# node is the same small function parameterised by its StageSpec. Nodes
# read earlier outputs from state["outputs"] and append exactly one
# StepRecord to state["steps"].
#
# run_research() streams node updates rather than waiting for the final
# state. That way the steps completed before an upstream failure are
# still known, along with which stage was running when it failed.
#
# The graph is compiled once at import and shared by all requests; the
# state carries the provider and corpus for a single run.
# =============================================================================

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass, field
from typing import Annotated

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from app.agents.stages import STAGES, Stage, StageSpec, execute_stage
from app.config import settings
from app.services.corpus import CorpusContext
from app.services.llm import LLMProvider, UpstreamError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StepRecord:
    """Observable result of one completed stage."""

    stage: Stage
    status: str
    output: str


@dataclass(frozen=True)
class PipelineFailure:
    """Which stage failed and the (server-side only) reason."""

    stage: Stage
    diagnostic: str


@dataclass
class PipelineResult:
    """
    Outcome of one pipeline run.

    Exactly one of `final_answer` and `failure` is set. On failure,
    `steps` holds the stages that completed before the failing one.
    """

    steps: list[StepRecord] = field(default_factory=list)
    final_answer: str | None = None
    failure: PipelineFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


# ---------------------------------------------------------------------------
# Graph State Schema
# ---------------------------------------------------------------------------


def _merge_outputs(left: dict[str, str], right: dict[str, str]) -> dict[str, str]:
    return {**left, **right}


class PipelineState(TypedDict, total=False):
    """
    State that flows through the research graph.

    `steps` and `outputs` use reducers so each node only returns its own
    contribution.
    """

    # --- Input (set by caller) ---
    query: str
    corpus: CorpusContext
    llm: LLMProvider
    model: str

    # --- Accumulated by nodes ---
    outputs: Annotated[dict[str, str], _merge_outputs]
    steps: Annotated[list[StepRecord], operator.add]


# ---------------------------------------------------------------------------
# Node Factory
# ---------------------------------------------------------------------------


def _stage_node(spec: StageSpec):
    async def node(state: PipelineState) -> dict:
        input_text = spec.build_input(state["query"], state.get("outputs", {}))
        context = state["corpus"].text if spec.uses_corpus else None

        output = await execute_stage(
            spec,
            input_text,
            context=context,
            llm=state["llm"],
            model=state.get("model"),
        )

        record = StepRecord(
            stage=spec.stage, status=spec.status_message, output=output,
        )
        return {"outputs": {spec.stage.value: output}, "steps": [record]}

    node.__name__ = f"{spec.stage.value}_node"
    return node


# ---------------------------------------------------------------------------
# Graph Assembly
# ---------------------------------------------------------------------------


def build_graph(stages: tuple[StageSpec, ...] = STAGES):
    """Compile a linear graph that runs `stages` in order."""
    builder = StateGraph(PipelineState)

    previous = START
    for spec in stages:
        builder.add_node(spec.stage.value, _stage_node(spec))
        builder.add_edge(previous, spec.stage.value)
        previous = spec.stage.value
    builder.add_edge(previous, END)

    return builder.compile()


graph = build_graph()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def run_research(
    query: str,
    corpus: CorpusContext,
    llm: LLMProvider,
    model: str | None = None,
) -> PipelineResult:
    """
    Run refine → search → synthesize for one query.

    Args:
        query: The user's question, passed to the rephraser as-is.
        corpus: Startup-loaded corpus, embedded into the search stage only.
        llm: Completion provider used by every stage.
        model: Optional model override (defaults to settings.research_model).

    Returns:
        PipelineResult with three ordered steps and the final answer, or a
        failure naming the stage whose completion call failed.
    """
    initial_state: PipelineState = {
        "query": query,
        "corpus": corpus,
        "llm": llm,
        "model": model or settings.research_model,
        "outputs": {},
        "steps": [],
    }

    logger.info("Starting research pipeline: query='%s'", query[:80])

    steps: list[StepRecord] = []
    try:
        async for update in graph.astream(initial_state, stream_mode="updates"):
            for node_update in update.values():
                if node_update:
                    steps.extend(node_update.get("steps", []))
    except UpstreamError as e:
        failed = STAGES[len(steps)].stage
        logger.error(
            "Research pipeline failed at stage %s after %d step(s): %s",
            failed.value, len(steps), e,
        )
        return PipelineResult(
            steps=steps,
            failure=PipelineFailure(stage=failed, diagnostic=str(e)),
        )

    final_answer = steps[-1].output
    logger.info(
        "Research pipeline complete: %d steps, answer=%d chars",
        len(steps), len(final_answer),
    )
    return PipelineResult(steps=steps, final_answer=final_answer)
