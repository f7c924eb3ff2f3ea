"""API routers package."""

from qualdesk.api.routers.qualifications import router as qualifications_router
from qualdesk.api.routers.assistant import router as assistant_router
from qualdesk.api.routers.cache import router as cache_router

__all__ = [
    "qualifications_router",
    "assistant_router",
    "cache_router",
]
