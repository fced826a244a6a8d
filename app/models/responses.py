# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming OUT of the API. They are
# also what the research client parses, so field aliases follow the wire
# format (`finalResponse`) while Python code uses snake_case.
# =============================================================================

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Response for GET /health — confirms the API is running."""

    status: str = "ok"
    version: str
    service: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str


class ResearchStep(BaseModel):
    """One stage of a research run as seen by the client."""

    agent: Literal["rephraser", "searcher", "generator"]
    status: str
    output: str = ""


class ResearchResponse(BaseModel):
    """
    Response for POST /research.

    `steps` always has three entries in stage order on success.
    """

    model_config = ConfigDict(populate_by_name=True)

    steps: list[ResearchStep] = Field(default_factory=list)
    final_response: str = Field(default="", alias="finalResponse")
