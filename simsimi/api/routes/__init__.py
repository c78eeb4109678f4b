"""
API Routes module - Endpoint definitions.

- simsimi.py : ask, teach, search, stats and API health (rate limited)
- health.py  : liveness check
"""
from simsimi.api.routes.simsimi import router as simsimi_router
from simsimi.api.routes.health import router as health_router

__all__ = [
    "simsimi_router",
    "health_router",
]
