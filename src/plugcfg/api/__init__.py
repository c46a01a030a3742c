"""API package exports.

Exposes:
- `router`: FastAPI APIRouter with all endpoints
- `initialize_api()`: wiring for the orchestrator
"""

from .routes import router, initialize_api

__all__ = ["router", "initialize_api"]
