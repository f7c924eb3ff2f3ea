"""Read-only context for the chat assistant."""

from typing import Any

from fastapi import APIRouter, Depends

from qualdesk.api.deps import get_session
from qualdesk.services import QualificationsSession

router = APIRouter(prefix="/assistant", tags=["assistant"])


@router.get("/{owner_id}/context")
async def get_context(session: QualificationsSession = Depends(get_session)) -> dict[str, Any]:
    """Rows of the current view (capped) and the owner's stats."""
    await session.load()
    await session.stats.read()
    return session.assistant.snapshot()
