# =============================================================================
# Client Package — Research Client and Step Replay
# =============================================================================
#   - research_client.py: httpx client for POST /research
#   - progress.py: run-keyed state machine that reveals steps with pacing
#   - __main__.py: terminal front end (python -m app.client "question")
# =============================================================================
