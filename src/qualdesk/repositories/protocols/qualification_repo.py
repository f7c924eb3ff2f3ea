"""Qualification repository protocol."""

from typing import Protocol, Optional

from qualdesk.domain.models import Qualification


class QualificationRepository(Protocol):
    """Remote data source for qualification records."""

    async def list_by_owner(self, owner_id: str) -> list[Qualification]:
        """List every qualification owned by owner_id."""
        ...

    async def delete(self, qualification_id: str) -> None:
        """
        Delete one qualification.

        Raises NotFoundError, PermissionDeniedError or UnavailableError.
        """
        ...

    async def create(self, qualification: Qualification) -> Qualification:
        """Persist a new qualification."""
        ...

    async def get_by_id(self, qualification_id: str) -> Optional[Qualification]:
        """Retrieve a qualification by ID."""
        ...
