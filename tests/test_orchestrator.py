# =============================================================================
# Unit Tests — Research Pipeline Orchestration
# =============================================================================
#
# Runs the compiled LangGraph graph end to end against StubLLM, checking
# stage order, what each stage's prompt contains, and failure handling.
# =============================================================================

from __future__ import annotations

import asyncio

from app.agents.orchestrator import PipelineResult, StepRecord, run_research
from app.agents.stages import Stage
from app.config import settings


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Test: Successful Runs
# ---------------------------------------------------------------------------


class TestRunResearch:
    def test_three_steps_in_order(self, echo_llm, corpus):
        result = _run(run_research("who does payroll?", corpus, echo_llm))

        assert isinstance(result, PipelineResult)
        assert result.ok
        assert result.failure is None
        assert [s.stage for s in result.steps] == [
            Stage.REFINE, Stage.SEARCH, Stage.SYNTHESIZE,
        ]
        assert all(isinstance(s, StepRecord) for s in result.steps)
        assert all(s.status for s in result.steps)

    def test_outputs_thread_forward(self, echo_llm, corpus):
        result = _run(run_research("who does payroll?", corpus, echo_llm))

        refined, findings, answer = (s.output for s in result.steps)
        assert refined == "refined: who does payroll?"
        assert findings == f"findings for: {refined}"
        assert answer == (
            f"answer from: Query: {refined}\n\nSearch Results: {findings}"
        )
        assert result.final_answer == answer

    def test_corpus_only_in_search_instruction(self, echo_llm, corpus):
        _run(run_research("anything", corpus, echo_llm))

        refine, search, synth = echo_llm.calls
        assert corpus.text in search["system"]
        for call in (refine, synth):
            assert corpus.text not in call["system"]
            assert corpus.text not in call["messages"][0]["content"]

    def test_synthesize_input_contains_refine_and_search_outputs(
        self, echo_llm, corpus,
    ):
        result = _run(run_research("anything", corpus, echo_llm))

        synth_input = echo_llm.calls[2]["messages"][0]["content"]
        assert result.steps[0].output in synth_input
        assert result.steps[1].output in synth_input

    def test_refine_receives_raw_query(self, echo_llm, corpus):
        _run(run_research("  raw Query?? ", corpus, echo_llm))
        assert echo_llm.calls[0]["messages"][0]["content"] == "  raw Query?? "

    def test_default_model_is_research_model(self, echo_llm, corpus):
        _run(run_research("anything", corpus, echo_llm))
        assert {c["model"] for c in echo_llm.calls} == {settings.research_model}

    def test_model_override(self, echo_llm, corpus):
        _run(run_research("anything", corpus, echo_llm, model="other"))
        assert {c["model"] for c in echo_llm.calls} == {"other"}

    def test_deterministic_under_deterministic_stub(
        self, stub_llm_factory, echo_llm, corpus,
    ):
        second_llm = stub_llm_factory(responder=echo_llm.responder)

        first = _run(run_research("same question", corpus, echo_llm))
        second = _run(run_research("same question", corpus, second_llm))

        assert first.final_answer == second.final_answer
        assert first.steps == second.steps

    def test_blank_stage_output_does_not_fail(self, stub_llm_factory, corpus):
        llm = stub_llm_factory(replies=["refined", "", ""])
        result = _run(run_research("q", corpus, llm))

        assert result.ok
        assert result.steps[1].output == "No relevant information found."
        assert result.final_answer == "Sorry, I could not generate a response."


# ---------------------------------------------------------------------------
# Test: Upstream Failures
# ---------------------------------------------------------------------------


class TestRunResearchFailures:
    def test_search_failure_skips_synthesize(self, stub_llm_factory, corpus):
        llm = stub_llm_factory(replies=["refined", "unused", "unused"],
                               fail_on_call=2)
        result = _run(run_research("q", corpus, llm))

        assert not result.ok
        assert result.final_answer is None
        assert result.failure.stage is Stage.SEARCH
        assert "secret diagnostic" in result.failure.diagnostic
        assert len(llm.calls) == 2
        # Only the completed refine step survives
        assert [s.stage for s in result.steps] == [Stage.REFINE]

    def test_refine_failure_runs_nothing_else(self, stub_llm_factory, corpus):
        llm = stub_llm_factory(fail_on_call=1)
        result = _run(run_research("q", corpus, llm))

        assert result.failure.stage is Stage.REFINE
        assert result.steps == []
        assert len(llm.calls) == 1

    def test_synthesize_failure(self, stub_llm_factory, corpus):
        llm = stub_llm_factory(replies=["a", "b"], fail_on_call=3)
        result = _run(run_research("q", corpus, llm))

        assert result.failure.stage is Stage.SYNTHESIZE
        assert len(result.steps) == 2


# ---------------------------------------------------------------------------
# Test: Fintech Scenario
# ---------------------------------------------------------------------------


class TestFintechScenario:
    """Search returns only the fintech entry; the answer is built from it."""

    @staticmethod
    def _responder(system: str, messages: list[dict[str, str]]) -> str:
        content = messages[-1]["content"]
        if system.startswith("You are a Query Rephraser"):
            return "Which companies in the batch are in the fintech industry?"
        if system.startswith("You are a Search Agent"):
            entries = system.split("\n## ")[1:]
            fintech = [e for e in entries if "Industry: Fintech" in e]
            return "\n\n".join("## " + e.split("\n\n")[0] for e in fintech)
        findings = content.split("Search Results: ", 1)[1]
        return f"# Fintech companies in the batch\n\n{findings}"

    def test_answer_built_from_fintech_entry(self, stub_llm_factory, corpus):
        llm = stub_llm_factory(responder=self._responder)
        result = _run(run_research(
            "List fintech companies in the batch", corpus, llm,
        ))

        findings = result.steps[1].output
        assert "Ledgerly" in findings
        assert "Botanica" not in findings

        assert result.final_answer
        assert result.final_answer.startswith("# ")
        assert findings in result.final_answer
        assert "Botanica" not in result.final_answer
