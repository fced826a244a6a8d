# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
# Each module defines a FastAPI APIRouter for a specific feature:
#   - research.py: three-stage research endpoint (POST /research)
#   - chat.py: corpus-grounded chat passthrough (POST /chat)
#   - deps.py: provider and corpus dependencies
# =============================================================================
