# =============================================================================
# Research Client — HTTP Client for POST /research
# =============================================================================
#
# Posts a query, parses the full ordered step list and turns any non-2xx
# reply into a ResearchRequestError carrying the server's `error` text.
# =============================================================================

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from app.models.responses import ResearchResponse

logger = logging.getLogger(__name__)


class ResearchRequestError(Exception):
    """A research request failed; the message is safe to show to the user."""


class ResearchClient:
    """Thin async wrapper around POST /research."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=None)
        self._owns_client = client is None

    async def research(self, query: str) -> ResearchResponse:
        try:
            response = await self._client.post("/research", json={"query": query})
        except httpx.HTTPError as e:
            logger.error("Research request to %s failed: %s", self.base_url, e)
            raise ResearchRequestError(f"Could not reach research service: {e}") from e

        if response.is_error:
            raise ResearchRequestError(_error_message(response))

        try:
            return ResearchResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Unexpected research response: %s", e)
            raise ResearchRequestError("Failed to get research results") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ResearchClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return "Failed to get research results"
