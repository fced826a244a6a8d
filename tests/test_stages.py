# =============================================================================
# Unit Tests — Stage Descriptors and Executor
# =============================================================================

from __future__ import annotations

import asyncio

import pytest

from app.agents.stages import (
    NO_ANSWER,
    NO_FINDINGS,
    STAGES,
    Stage,
    execute_stage,
)
from app.services.llm import UpstreamError


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _spec(stage: Stage):
    return next(spec for spec in STAGES if spec.stage is stage)


# ---------------------------------------------------------------------------
# Test: Stage Table
# ---------------------------------------------------------------------------


class TestStageTable:
    def test_fixed_order(self):
        assert [spec.stage for spec in STAGES] == [
            Stage.REFINE, Stage.SEARCH, Stage.SYNTHESIZE,
        ]

    def test_wire_agent_names(self):
        assert [spec.stage.value for spec in STAGES] == [
            "rephraser", "searcher", "generator",
        ]

    def test_temperatures_increase_through_pipeline(self):
        temps = [spec.temperature for spec in STAGES]
        assert temps == [0.3, 0.5, 0.7]

    def test_only_search_uses_corpus(self):
        assert [spec.uses_corpus for spec in STAGES] == [False, True, False]

    def test_status_messages_non_empty(self):
        assert all(spec.status_message for spec in STAGES)


# ---------------------------------------------------------------------------
# Test: Instructions and Inputs
# ---------------------------------------------------------------------------


class TestInstructions:
    def test_search_embeds_context_verbatim(self, corpus):
        system = _spec(Stage.SEARCH).instruction(corpus.text)
        assert corpus.text in system

    def test_refine_and_synthesize_ignore_context(self, corpus):
        for stage in (Stage.REFINE, Stage.SYNTHESIZE):
            assert corpus.text not in _spec(stage).instruction(corpus.text)

    def test_refine_input_is_raw_query(self):
        assert _spec(Stage.REFINE).build_input("raw q", {}) == "raw q"

    def test_search_input_is_refined_query(self):
        outputs = {"rephraser": "refined q"}
        assert _spec(Stage.SEARCH).build_input("raw q", outputs) == "refined q"

    def test_synthesize_input_combines_query_and_findings(self):
        outputs = {"rephraser": "refined q", "searcher": "some findings"}
        text = _spec(Stage.SYNTHESIZE).build_input("raw q", outputs)
        assert text == "Query: refined q\n\nSearch Results: some findings"


# ---------------------------------------------------------------------------
# Test: Executor
# ---------------------------------------------------------------------------


class TestExecuteStage:
    def test_one_call_with_stage_temperature(self, stub_llm_factory, corpus):
        llm = stub_llm_factory(replies=["found it"])
        spec = _spec(Stage.SEARCH)

        result = _run(execute_stage(spec, "q", corpus.text, llm, model="m"))

        assert result == "found it"
        assert len(llm.calls) == 1
        call = llm.calls[0]
        assert call["temperature"] == 0.5
        assert call["model"] == "m"
        assert call["messages"] == [{"role": "user", "content": "q"}]
        assert corpus.text in call["system"]

    def test_context_dropped_for_non_corpus_stage(self, stub_llm_factory, corpus):
        llm = stub_llm_factory(replies=["better q"])
        _run(execute_stage(_spec(Stage.REFINE), "q", corpus.text, llm))
        assert corpus.text not in llm.calls[0]["system"]

    def test_blank_refine_output_passes_query_through(self, stub_llm_factory):
        llm = stub_llm_factory(replies=["   "])
        result = _run(execute_stage(_spec(Stage.REFINE), "original q", None, llm))
        assert result == "original q"

    def test_blank_search_output_uses_fallback(self, stub_llm_factory, corpus):
        llm = stub_llm_factory(replies=[""])
        result = _run(execute_stage(_spec(Stage.SEARCH), "q", corpus.text, llm))
        assert result == NO_FINDINGS

    def test_blank_synthesize_output_uses_fallback(self, stub_llm_factory):
        llm = stub_llm_factory(replies=[""])
        result = _run(execute_stage(_spec(Stage.SYNTHESIZE), "q", None, llm))
        assert result == NO_ANSWER

    def test_upstream_error_propagates(self, stub_llm_factory):
        llm = stub_llm_factory(fail_on_call=1)
        with pytest.raises(UpstreamError):
            _run(execute_stage(_spec(Stage.REFINE), "q", None, llm))
        assert len(llm.calls) == 1
