"""Data models for notes and the mind-map graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

UNTITLED_NOTE = "Untitled note"


@dataclass(frozen=True)
class SessionContext:
    """Identity every store call is scoped to."""

    user_id: str


@dataclass
class NoteRecord:
    """A note as delivered by the note store."""

    id: str
    title: str = ""
    content: str = ""
    tags: list[str] = field(default_factory=list)
    linked_notes: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NoteRecord":
        """Create from a store row; missing or null list fields become empty."""
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            content=data.get("content") or "",
            tags=[str(t) for t in (data.get("tags") or [])],
            linked_notes=[str(n) for n in (data.get("linked_notes") or [])],
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "linked_notes": list(self.linked_notes),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class NoteFilters:
    """Search term and tag constraint applied when listing notes."""

    search: str = ""
    tags: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Position") -> "Position":
        return Position(self.x - other.x, self.y - other.y)


ORIGIN = Position(0.0, 0.0)


@dataclass(frozen=True)
class Bounds:
    """Size of the drawing surface, in graph-space units."""

    width: float
    height: float

    @property
    def center(self) -> Position:
        return Position(self.width / 2, self.height / 2)


@dataclass
class Node:
    """Visual representation of one note.

    Only ``position`` changes between rebuilds (drag, relayout); the other fields
    mirror the source note as of the last fetch.
    """

    id: str
    title: str
    position: Position
    tags: tuple[str, ...] = ()
    color_index: int = 0


@dataclass(frozen=True)
class Edge:
    """Directed link from ``source`` to ``target``."""

    source: str
    target: str
