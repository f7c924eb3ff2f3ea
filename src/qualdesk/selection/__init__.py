"""Row selection."""

from qualdesk.selection.model import SelectionModel

__all__ = ["SelectionModel"]
