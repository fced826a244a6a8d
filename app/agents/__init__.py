# =============================================================================
# Agents Package — Research Pipeline and Chat
# =============================================================================
#   - stages.py: stage descriptors (role prompt, input builder, temperature,
#     fallback) and the single-call stage executor
#   - orchestrator.py: LangGraph graph: rephraser → searcher → generator,
#     collects ordered step records into a PipelineResult
#   - chat.py: corpus-grounded single-call chat passthrough
# =============================================================================
