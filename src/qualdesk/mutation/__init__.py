"""Bulk mutation coordination."""

from qualdesk.mutation.coordinator import BulkMutationCoordinator

__all__ = ["BulkMutationCoordinator"]
