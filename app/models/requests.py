# =============================================================================
# API Request Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming INTO the API. Invalid
# bodies are rejected before any completion call is made; the handler in
# app/main.py turns validation errors into `{"error": ...}` with a 422.
# =============================================================================

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResearchRequest(BaseModel):
    """
    Request body for POST /research.

    Example:
        {"query": "List fintech companies in the batch"}
    """

    query: str = Field(
        ...,
        min_length=1,
        description="The question to research against the startup directory",
        examples=["List fintech companies in the batch"],
    )

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"query": "List fintech companies in the batch"},
                {"query": "Which startups are building developer tools?"},
            ]
        }
    )


class ChatMessage(BaseModel):
    """One turn of a chat conversation."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """
    Request body for POST /chat: the full conversation so far.

    Example:
        {"messages": [{"role": "user", "content": "Who is in the batch?"}]}
    """

    messages: list[ChatMessage] = Field(
        ...,
        min_length=1,
        description="Conversation history, oldest first",
    )
