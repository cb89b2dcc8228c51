"""Note store interface consumed by the graph engine."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from ..models import NoteFilters, NoteRecord


class NoteStore(Protocol):
    """Persistence collaborator for notes and their link lists.

    Implementations raise ``FetchFailure`` when reads fail and ``MutationFailure``
    when writes fail.
    """

    def list_notes(self, user_id: str, filters: NoteFilters | None = None) -> list[NoteRecord]:
        """Notes owned by ``user_id``, newest first. ``filters`` may be ignored."""
        ...

    def get_linked_notes(self, user_id: str, note_id: str) -> list[str]:
        """Current persisted link list of one note."""
        ...

    def update_linked_notes(self, user_id: str, note_id: str, linked_notes: list[str], updated_at: str) -> None:
        """Replace a note's link list and bump its ``updated_at``."""
        ...


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
