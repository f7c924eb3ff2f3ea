"""Dependency injection for FastAPI."""

from fastapi import Depends

from qualdesk.app_context import AppContext, get_app_context
from qualdesk.cache import CacheStore
from qualdesk.services import QualificationsSession


def get_context() -> AppContext:
    """Provide the application context."""
    return get_app_context()


def get_session(
    owner_id: str,
    context: AppContext = Depends(get_context),
) -> QualificationsSession:
    """Provide the working session for the owner in the path."""
    return context.session_for(owner_id)


def get_cache_store(context: AppContext = Depends(get_context)) -> CacheStore:
    """Provide the shared CacheStore."""
    return context.store
