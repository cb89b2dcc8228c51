"""Link mutation protocol: create or delete one directed edge at a time.

The store is written first; the in-memory graph changes only after the write
succeeds, so a failed mutation leaves the graph exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .audit_log import log_link_operation
from .errors import LinkConflict, SelfLink, UnknownNode
from .graph.builder import MindMapGraph
from .models import SessionContext
from .store.base import NoteStore, utc_timestamp

logger = logging.getLogger(__name__)


class LinkOutcome(str, Enum):
    CREATED = "created"
    DELETED = "deleted"
    ALREADY_ABSENT = "already_absent"


@dataclass(frozen=True)
class LinkResult:
    outcome: LinkOutcome
    source: str
    target: str
    store_written: bool


class LinkService:
    """Applies link mutations for one user against a note store."""

    def __init__(
        self,
        store: NoteStore,
        context: SessionContext,
        *,
        state_dir: Path | None = None,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self.store = store
        self.context = context
        self.state_dir = state_dir
        self._clock = clock

    def _check_endpoints(self, graph: MindMapGraph, source: str, target: str) -> None:
        if source == target:
            raise SelfLink(f"A note cannot link to itself: {source}")
        for node_id in (source, target):
            if node_id not in graph:
                raise UnknownNode(f"Note {node_id} is not in the current map")

    def _audit(self, operation: str, source: str, target: str, *, added: int = 0, removed: int = 0) -> None:
        if self.state_dir is None:
            return
        # Best effort: the store and graph already reflect the change.
        try:
            log_link_operation(
                self.state_dir,
                operation,
                source,
                target,
                self.context.user_id,
                edges_added=added,
                edges_removed=removed,
            )
        except OSError as e:
            logger.warning(f"Could not record {operation} {source} -> {target} in {self.state_dir}: {e}")

    # Each mutation runs in three steps: validate against the graph, persist to
    # the store, then apply to a graph. Only the persist step touches the store,
    # so callers on an event loop can run it in a worker thread.

    def check_create(self, graph: MindMapGraph, source: str, target: str) -> None:
        """Raises SelfLink, UnknownNode or LinkConflict; makes no store call."""
        self._check_endpoints(graph, source, target)
        if graph.has_edge(source, target):
            raise LinkConflict(source, target)

    def persist_create(self, source: str, target: str) -> bool:
        """Append ``target`` to ``source``'s stored link list. Returns True if a write was made."""
        linked = self.store.get_linked_notes(self.context.user_id, source)
        if target in linked:
            logger.info(f"{source} already lists {target}; adding edge without a write")
            return False
        self.store.update_linked_notes(self.context.user_id, source, [*linked, target], self._clock())
        return True

    def apply_create(self, graph: MindMapGraph, source: str, target: str, written: bool) -> LinkResult:
        # An endpoint may have left the graph while the store call was running.
        added = source in graph and target in graph and graph.add_edge(source, target)
        self._audit("link-create", source, target, added=int(added))
        return LinkResult(LinkOutcome.CREATED, source, target, written)

    def create_link(self, graph: MindMapGraph, source: str, target: str) -> LinkResult:
        """Persist ``target`` in ``source``'s link list, then add the edge.

        Raises:
            SelfLink, UnknownNode: invalid endpoints (no store call made)
            LinkConflict: the edge is already in ``graph`` (no store call made)
            FetchFailure, MutationFailure: the store read or write failed
        """
        self.check_create(graph, source, target)
        written = self.persist_create(source, target)
        return self.apply_create(graph, source, target, written)

    def check_delete(self, source: str, target: str) -> None:
        if source == target:
            raise SelfLink(f"A note cannot link to itself: {source}")

    def persist_delete(self, source: str, target: str) -> bool:
        """Remove ``target`` from ``source``'s stored link list. Returns True if a write was made."""
        linked = self.store.get_linked_notes(self.context.user_id, source)
        remaining = [n for n in linked if n != target]
        if len(remaining) == len(linked):
            return False
        self.store.update_linked_notes(self.context.user_id, source, remaining, self._clock())
        return True

    def apply_delete(self, graph: MindMapGraph, source: str, target: str, written: bool) -> LinkResult:
        removed = graph.remove_edge(source, target)
        if not written and not removed:
            return LinkResult(LinkOutcome.ALREADY_ABSENT, source, target, False)

        self._audit("link-delete", source, target, removed=int(removed))
        return LinkResult(LinkOutcome.DELETED, source, target, written)

    def delete_link(self, graph: MindMapGraph, source: str, target: str) -> LinkResult:
        """Drop ``target`` from ``source``'s link list, then remove the edge.

        Deleting a link that does not exist succeeds as ``ALREADY_ABSENT``.
        """
        self.check_delete(source, target)
        written = self.persist_delete(source, target)
        return self.apply_delete(graph, source, target, written)
