"""Mind-map graph construction from note records."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..models import UNTITLED_NOTE, Bounds, Edge, Node, NoteFilters, NoteRecord, Position
from .layout import LayoutStrategy, compute_position

PALETTE_SIZE = 6


@dataclass
class MindMapGraph:
    """One build's worth of nodes and edges.

    A rebuild produces a new instance; the only in-place changes allowed are node
    moves (``move_node``) and single-edge ``add_edge`` / ``remove_edge``.
    """

    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    strategy: LayoutStrategy | None = LayoutStrategy.RADIAL
    bounds: Bounds = Bounds(1200, 800)
    _by_id: dict[str, Node] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._by_id = {n.id: n for n in self.nodes}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, node_id: str) -> Node | None:
        return self._by_id.get(node_id)

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def has_edge(self, source: str, target: str) -> bool:
        return Edge(source, target) in self.edges

    def add_edge(self, source: str, target: str) -> bool:
        """Add an edge between two present nodes. Returns False if it already exists."""
        if source not in self._by_id or target not in self._by_id:
            raise KeyError(f"Edge {source} -> {target} references a node outside the graph")
        edge = Edge(source, target)
        if edge in self.edges:
            return False
        self.edges.append(edge)
        return True

    def remove_edge(self, source: str, target: str) -> bool:
        edge = Edge(source, target)
        if edge not in self.edges:
            return False
        self.edges.remove(edge)
        return True

    def move_node(self, node_id: str, position: Position) -> None:
        self._by_id[node_id].position = position

    def out_degree(self, node_id: str) -> int:
        return sum(1 for e in self.edges if e.source == node_id)

    def in_degree(self, node_id: str) -> int:
        return sum(1 for e in self.edges if e.target == node_id)

    def relayout(self, skip: Iterable[str] = ()) -> None:
        """Recompute every node position from its index, leaving ``skip`` untouched."""
        skipped = set(skip)
        total = len(self.nodes)
        for index, node in enumerate(self.nodes):
            if node.id in skipped:
                continue
            node.position = compute_position(index, total, self.strategy, self.bounds)


def matches_filters(note: NoteRecord, filters: NoteFilters) -> bool:
    """Case-insensitive search over title/content, intersected with the tag set."""
    term = filters.search.lower()
    if term and term not in note.title.lower() and term not in note.content.lower():
        return False
    if filters.tags and not filters.tags.intersection(note.tags):
        return False
    return True


def filter_notes(notes: Iterable[NoteRecord], filters: NoteFilters | None = None) -> list[NoteRecord]:
    filters = filters or NoteFilters()
    return [n for n in notes if matches_filters(n, filters)]


def build_edges(notes: list[NoteRecord]) -> list[Edge]:
    """One edge per (note, linked id) pair whose target survived filtering.

    Links to notes outside ``notes`` (deleted or filtered out) and links from a
    note to itself are dropped.
    """
    present = {n.id for n in notes}
    seen: set[Edge] = set()
    edges: list[Edge] = []
    for note in notes:
        for target in note.linked_notes:
            if target == note.id or target not in present:
                continue
            edge = Edge(note.id, target)
            if edge in seen:
                continue
            seen.add(edge)
            edges.append(edge)
    return edges


def build_graph(
    notes: Iterable[NoteRecord] | None,
    *,
    filters: NoteFilters | None = None,
    strategy: LayoutStrategy | None = LayoutStrategy.RADIAL,
    bounds: Bounds = Bounds(1200, 800),
) -> MindMapGraph:
    """Build a fresh graph snapshot. ``None`` notes (no data) yields an empty graph."""
    surviving = filter_notes(notes or [], filters)

    total = len(surviving)
    nodes: list[Node] = []
    for index, note in enumerate(surviving):
        nodes.append(
            Node(
                id=note.id,
                title=note.title or UNTITLED_NOTE,
                position=compute_position(index, total, strategy, bounds),
                tags=tuple(note.tags),
                color_index=index % PALETTE_SIZE,
            )
        )

    return MindMapGraph(nodes=nodes, edges=build_edges(surviving), strategy=strategy, bounds=bounds)
