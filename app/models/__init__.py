# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
# Request/response schemas for the API. The research client reuses
# ResearchResponse to parse server replies.
# =============================================================================
