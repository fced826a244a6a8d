# =============================================================================
# Services Package — External Resources
# =============================================================================
#   - llm.py: Multi-provider completion client (OpenAI-compatible, Anthropic)
#   - corpus.py: Startup-loaded, read-only corpus text
# =============================================================================
