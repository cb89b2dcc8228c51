"""Mind-map session: ties the store, graph, layout, viewport and clicks together.

All state lives on one thread. Fetches are the only waits; each refresh takes a
ticket and only the newest ticket's response is applied, so a slow response to
an older search can never overwrite a newer one.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from .errors import LinkConflict, NoteStoreError, SelfLink, UnknownNode
from .graph.builder import MindMapGraph, build_graph
from .graph.layout import LayoutStrategy
from .links import LinkOutcome, LinkResult, LinkService
from .models import Bounds, NoteFilters, NoteRecord, Position, SessionContext
from .store.base import NoteStore
from .view.interaction import InteractionController
from .view.viewport import ViewportController

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


_LOG_LEVELS = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.WARNING: logging.WARNING,
    NoticeLevel.ERROR: logging.ERROR,
}


def log_notice(notice: Notice) -> None:
    logger.log(_LOG_LEVELS[notice.level], notice.message)


@dataclass(frozen=True)
class RefreshTicket:
    seq: int
    filters: NoteFilters


class MindMapSession:
    def __init__(
        self,
        store: NoteStore,
        context: SessionContext,
        *,
        strategy: LayoutStrategy = LayoutStrategy.RADIAL,
        bounds: Bounds = Bounds(1200, 800),
        links: LinkService | None = None,
        notify: Callable[[Notice], None] = log_notice,
    ) -> None:
        self.store = store
        self.context = context
        self.strategy = strategy
        self.bounds = bounds
        self.filters = NoteFilters()
        self.links = links or LinkService(store, context)
        self.notify = notify

        self.graph = MindMapGraph(strategy=strategy, bounds=bounds)
        self.viewport = ViewportController()
        self.interaction = InteractionController()

        self._notes: list[NoteRecord] = []
        self._latest_seq = 0
        # Link changes made while the latest refresh is in flight: (source, target, added).
        self._link_journal: list[tuple[str, str, bool]] = []
        self._refresh_pending = False
        self._dragging: str | None = None
        self._grab = Position(0.0, 0.0)

    # ------------------------------------------------------------------
    # Fetch + rebuild
    # ------------------------------------------------------------------

    def begin_refresh(self, search: str | None = None) -> RefreshTicket:
        """Record a new fetch request; any older in-flight request becomes stale."""
        if search is not None:
            self.filters = NoteFilters(search=search, tags=self.filters.tags)
        self._latest_seq += 1
        self._link_journal = []
        self._refresh_pending = True
        return RefreshTicket(self._latest_seq, self.filters)

    def is_current(self, ticket: RefreshTicket) -> bool:
        return ticket.seq == self._latest_seq

    def complete_refresh(self, ticket: RefreshTicket, notes: list[NoteRecord]) -> bool:
        """Apply a fetch result. Returns False if the ticket was superseded."""
        if not self.is_current(ticket):
            logger.debug(f"Discarding stale refresh #{ticket.seq} (latest #{self._latest_seq})")
            return False
        notes = list(notes)
        # The fetch may predate link changes made while it was in flight.
        for source, target, add in self._link_journal:
            _apply_link(notes, source, target, add=add)
        self._link_journal = []
        self._refresh_pending = False
        self._notes = notes
        self._rebuild()
        return True

    def fail_refresh(self, ticket: RefreshTicket, error: Exception) -> bool:
        """Apply a fetch failure: the map empties and the user is told."""
        if not self.is_current(ticket):
            logger.debug(f"Ignoring failure of stale refresh #{ticket.seq}: {error}")
            return False
        self._notes = []
        self._link_journal = []
        self._refresh_pending = False
        self._rebuild()
        self.notify(Notice(NoticeLevel.ERROR, f"Failed to load notes: {error}"))
        return True

    def refresh(self, search: str | None = None) -> bool:
        ticket = self.begin_refresh(search)
        try:
            notes = self.store.list_notes(self.context.user_id, ticket.filters)
        except NoteStoreError as e:
            return self.fail_refresh(ticket, e)
        return self.complete_refresh(ticket, notes)

    async def refresh_async(self, search: str | None = None) -> bool:
        """Like ``refresh``, with the blocking store call run in a worker thread."""
        ticket = self.begin_refresh(search)
        try:
            notes = await asyncio.to_thread(self.store.list_notes, self.context.user_id, ticket.filters)
        except NoteStoreError as e:
            return self.fail_refresh(ticket, e)
        return self.complete_refresh(ticket, notes)

    def set_tag_filter(self, tags: Iterable[str]) -> None:
        self.filters = NoteFilters(search=self.filters.search, tags=frozenset(tags))
        self._rebuild()

    def set_strategy(self, strategy: LayoutStrategy) -> None:
        if strategy == self.strategy:
            return
        self.strategy = strategy
        self._rebuild()
        self.viewport.recenter()

    def set_bounds(self, bounds: Bounds) -> None:
        self.bounds = bounds
        self._rebuild()

    def _rebuild(self) -> None:
        graph = build_graph(self._notes, filters=self.filters, strategy=self.strategy, bounds=self.bounds)

        # A node being dragged keeps the pointer's position over any relayout.
        if self._dragging is not None:
            old = self.graph.get(self._dragging)
            if old is not None and self._dragging in graph:
                graph.move_node(self._dragging, old.position)
            else:
                self._dragging = None

        self.graph = graph

    # ------------------------------------------------------------------
    # Pointer routing
    # ------------------------------------------------------------------

    @property
    def dragging(self) -> str | None:
        return self._dragging

    def begin_drag(self, node_id: str, pointer: Position) -> bool:
        node = self.graph.get(node_id)
        if node is None:
            return False
        self._dragging = node_id
        self._grab = self.viewport.state.to_world(pointer) - node.position
        return True

    def drag_to(self, pointer: Position) -> None:
        if self._dragging is None:
            return
        self.graph.move_node(self._dragging, self.viewport.state.to_world(pointer) - self._grab)

    def end_drag(self) -> None:
        self._dragging = None

    def pointer_down(self, pointer: Position, node_id: str | None = None) -> None:
        if node_id is not None:
            self.begin_drag(node_id, pointer)
        else:
            self.viewport.begin_pan(pointer, on_background=True)

    def pointer_move(self, pointer: Position) -> None:
        if self._dragging is not None:
            self.drag_to(pointer)
        else:
            self.viewport.update_pan(pointer)

    def pointer_up(self) -> None:
        self.end_drag()
        self.viewport.end_pan()

    # ------------------------------------------------------------------
    # Clicks and links
    # ------------------------------------------------------------------

    def click_node(self, node_id: str) -> bool | None:
        """Route a node click; returns the link outcome when the click completed a link."""
        edge = self.interaction.click(node_id)
        if edge is None:
            return None
        return self.create_link(edge.source, edge.target)

    async def click_node_async(self, node_id: str) -> bool | None:
        edge = self.interaction.click(node_id)
        if edge is None:
            return None
        return await self.create_link_async(edge.source, edge.target)

    def create_link(self, source: str, target: str) -> bool:
        try:
            self.links.create_link(self.graph, source, target)
        except (LinkConflict, SelfLink, UnknownNode, NoteStoreError) as e:
            return self._create_failed(e)
        return self._link_changed(source, target, add=True)

    async def create_link_async(self, source: str, target: str) -> bool:
        """Like ``create_link``, with the store round trip run in a worker thread."""
        try:
            self.links.check_create(self.graph, source, target)
            written = await asyncio.to_thread(self.links.persist_create, source, target)
        except (LinkConflict, SelfLink, UnknownNode, NoteStoreError) as e:
            return self._create_failed(e)
        # self.graph may have been rebuilt during the await; apply to the current one.
        self.links.apply_create(self.graph, source, target, written)
        return self._link_changed(source, target, add=True)

    def delete_link(self, source: str, target: str) -> bool:
        try:
            result = self.links.delete_link(self.graph, source, target)
        except (SelfLink, NoteStoreError) as e:
            return self._delete_failed(e)
        return self._link_changed(source, target, add=False, result=result)

    async def delete_link_async(self, source: str, target: str) -> bool:
        """Like ``delete_link``, with the store round trip run in a worker thread."""
        try:
            self.links.check_delete(source, target)
            written = await asyncio.to_thread(self.links.persist_delete, source, target)
        except (SelfLink, NoteStoreError) as e:
            return self._delete_failed(e)
        result = self.links.apply_delete(self.graph, source, target, written)
        return self._link_changed(source, target, add=False, result=result)

    def _create_failed(self, error: Exception) -> bool:
        if isinstance(error, LinkConflict):
            self.notify(Notice(NoticeLevel.WARNING, "Connection already exists"))
        elif isinstance(error, NoteStoreError):
            self.notify(Notice(NoticeLevel.ERROR, f"Failed to create connection: {error}"))
        else:
            self.notify(Notice(NoticeLevel.WARNING, str(error)))
        return False

    def _delete_failed(self, error: Exception) -> bool:
        if isinstance(error, NoteStoreError):
            self.notify(Notice(NoticeLevel.ERROR, f"Failed to delete connection: {error}"))
        else:
            self.notify(Notice(NoticeLevel.WARNING, str(error)))
        return False

    def _link_changed(self, source: str, target: str, *, add: bool, result: LinkResult | None = None) -> bool:
        # Keep the cached notes in step so a local rebuild keeps the change, and
        # journal it so a refresh already in flight does not undo it.
        _apply_link(self._notes, source, target, add=add)
        if self._refresh_pending:
            self._link_journal.append((source, target, add))

        if add:
            self.notify(Notice(NoticeLevel.SUCCESS, "Connection created"))
        else:
            if result is not None and result.outcome is LinkOutcome.ALREADY_ABSENT:
                logger.info(f"Link {source} -> {target} was already absent")
            self.notify(Notice(NoticeLevel.SUCCESS, "Connection deleted"))
        return True


def _apply_link(notes: list[NoteRecord], source: str, target: str, *, add: bool) -> None:
    for note in notes:
        if note.id != source:
            continue
        if add and target not in note.linked_notes:
            note.linked_notes = [*note.linked_notes, target]
        elif not add:
            note.linked_notes = [n for n in note.linked_notes if n != target]
