# =============================================================================
# Terminal Research Client
# =============================================================================
#
# USAGE:
#   python -m app.client "List fintech companies in the batch"
#   python -m app.client --url http://localhost:8000 --interval 0.5 "..."
# =============================================================================

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from app.client.progress import ClientRunState, ProgressReplay, RunPhase
from app.client.research_client import ResearchClient
from app.config import settings

AGENT_NAMES = {
    "rephraser": "Query Rephraser",
    "searcher": "Data Searcher",
    "generator": "Response Generator",
}


class TerminalView:
    """Prints each newly revealed step, the final answer, or the error."""

    def __init__(self, out=sys.stdout):
        self._out = out
        self._shown: list[tuple[str, str]] = []
        self._active: str | None = None

    def __call__(self, state: ClientRunState) -> None:
        if state.active_agent and state.active_agent != self._active:
            print(f"\n[{AGENT_NAMES[state.active_agent]}] working...", file=self._out)
        self._active = state.active_agent

        for step in state.revealed_steps:
            key = (step.agent, step.output)
            if step.output and key not in self._shown:
                self._shown.append(key)
                print(f"  {step.status}\n{step.output}", file=self._out)

        if state.phase is RunPhase.COMPLETED:
            print("\n=== Research Results ===\n", file=self._out)
            print(state.final_response, file=self._out)
        elif state.phase is RunPhase.ERRORED:
            print(f"\nError: {state.error}", file=self._out)


async def _run(query: str, url: str, interval: float) -> int:
    async with ResearchClient(url) as client:
        replay = ProgressReplay(
            client.research, interval=interval, on_change=TerminalView(),
        )
        completed = await replay.submit(query)
    return 0 if completed else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m app.client",
        description="Ask the research service a question and watch each stage.",
    )
    parser.add_argument("query", help="question to research")
    parser.add_argument("--url", default=settings.research_api_url)
    parser.add_argument(
        "--interval", type=float, default=settings.reveal_interval_seconds,
        help="seconds between revealed steps",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    if not args.query.strip():
        parser.error("query must not be blank")

    return asyncio.run(_run(args.query, args.url, args.interval))


if __name__ == "__main__":
    sys.exit(main())
