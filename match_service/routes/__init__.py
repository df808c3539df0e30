"""
Match service route modules.

Each module handles a specific area of functionality.
"""

from .history import router as history_router
from .missions import router as missions_router
from .search import router as search_router
from .sessions import router as sessions_router

__all__ = [
    "history_router",
    "missions_router",
    "search_router",
    "sessions_router",
]
