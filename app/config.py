# =============================================================================
# Application Configuration — Pydantic Settings
# =============================================================================
#
# Settings are loaded in this priority order (highest first):
#   1. Environment variables (e.g., `OPENAI_API_KEY=...`)
#   2. Values from the .env file
#   3. Default values defined below
#
# USAGE:
#   from app.config import settings
#   print(settings.corpus_path)
# =============================================================================

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# (research_model, chat_model) used when the env does not name a model
DEFAULT_MODELS: dict[str, tuple[str, str]] = {
    "openai_compatible": ("gpt-4-turbo-preview", "gpt-4.1-mini"),
    "anthropic": ("claude-sonnet-4-6", "claude-sonnet-4-6"),
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The completion-service credential and the corpus file are the only
    things that must exist at startup; everything else has a default.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_name: str = "Startup Research Agent"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # API Keys — External Services
    # -------------------------------------------------------------------------
    # No defaults are provided. A missing key for the selected provider
    # aborts startup.
    # -------------------------------------------------------------------------
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # -------------------------------------------------------------------------
    # LLM Configuration — Multi-Provider
    # -------------------------------------------------------------------------
    #   - "openai_compatible": OpenAI or any OpenAI-compatible API
    #   - "anthropic": Claude via native Anthropic SDK
    #
    # research_model serves all three research stages; chat_model serves
    # the /chat passthrough. Left unset, both default to a model of the
    # selected provider (see DEFAULT_MODELS).
    # -------------------------------------------------------------------------
    llm_provider: str = "openai_compatible"  # "openai_compatible" or "anthropic"
    llm_base_url: str | None = None  # Only needed for openai_compatible
    llm_api_key: str | None = None   # Overrides provider-specific key if set
    research_model: str | None = None
    chat_model: str | None = None
    llm_max_tokens: int = 4096

    # None means the SDK default (no per-call bound is applied).
    llm_timeout_seconds: float | None = None
    # Stage calls are never retried; keep the SDK from retrying behind us.
    llm_max_retries: int = 0

    # -------------------------------------------------------------------------
    # Corpus
    # -------------------------------------------------------------------------
    # A single markdown/text file read once at startup and embedded
    # verbatim into the search stage and the chat system prompt.
    # -------------------------------------------------------------------------
    corpus_path: str = "internet.md"
    corpus_description: str = "Y Combinator startups"
    corpus_batch: str | None = "X25"

    # -------------------------------------------------------------------------
    # Research Client
    # -------------------------------------------------------------------------
    # Used by the terminal client (python -m app.client) only.
    # -------------------------------------------------------------------------
    research_api_url: str = "http://localhost:8000"
    reveal_interval_seconds: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def fill_provider_models(self) -> "Settings":
        """Default unset model names to ones the selected provider serves."""
        research, chat = DEFAULT_MODELS.get(
            self.llm_provider, DEFAULT_MODELS["openai_compatible"],
        )
        if not self.research_model:
            self.research_model = research
        if not self.chat_model:
            self.chat_model = chat
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Create and cache a Settings instance.

    In tests, override with FastAPI's dependency_overrides:
        app.dependency_overrides[get_settings] = lambda: Settings(debug=False)
    """
    return Settings()


settings = Settings()
