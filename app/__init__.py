# =============================================================================
# Startup Research Agent
# =============================================================================
# Answers questions about a startup directory loaded at process start.
# A research request runs three chained completion calls (rephrase the
# query, search the directory, write the answer) orchestrated by LangGraph;
# clients replay the returned steps one at a time.
#
# Package structure:
#   app/
#   ├── api/          → FastAPI route handlers (research, chat)
#   ├── agents/       → Stage descriptors, LangGraph orchestrator, chat
#   ├── client/       → httpx research client and step-replay state machine
#   ├── models/       → Pydantic V2 request/response schemas
#   ├── services/     → LLM provider abstraction, corpus loading
#   ├── config.py     → pydantic-settings configuration
#   └── main.py       → FastAPI app and startup lifespan
# =============================================================================
