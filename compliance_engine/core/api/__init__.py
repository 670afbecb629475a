"""API module - FastAPI routes."""

from .routes_evaluate import router as evaluate_router
from .routes_rules import router as rules_router
from .routes_layout import router as layout_router
from .routes_conflicts import router as conflicts_router
from .routes_cache import router as cache_router

__all__ = [
    "evaluate_router",
    "rules_router",
    "layout_router",
    "conflicts_router",
    "cache_router",
]
