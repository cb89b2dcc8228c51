"""Pytest configuration and fixtures."""

from __future__ import annotations

import copy
from pathlib import Path

import pytest

from notemap.errors import FetchFailure, MutationFailure
from notemap.models import NoteFilters, NoteRecord, SessionContext
from notemap.session import MindMapSession, Notice


class FakeStore:
    """In-memory note store that counts calls and can be told to fail."""

    def __init__(self, notes: list[NoteRecord]) -> None:
        self.notes = {n.id: copy.deepcopy(n) for n in notes}
        self.list_calls: list[NoteFilters | None] = []
        self.reads: list[str] = []
        self.writes: list[tuple[str, list[str], str]] = []
        self.fail_list = False
        self.fail_reads = False
        self.fail_writes = False

    def list_notes(self, user_id: str, filters: NoteFilters | None = None) -> list[NoteRecord]:
        self.list_calls.append(filters)
        if self.fail_list:
            raise FetchFailure("store offline")
        return [copy.deepcopy(n) for n in self.notes.values()]

    def get_linked_notes(self, user_id: str, note_id: str) -> list[str]:
        self.reads.append(note_id)
        if self.fail_reads:
            raise FetchFailure("read failed")
        return list(self.notes[note_id].linked_notes)

    def update_linked_notes(self, user_id: str, note_id: str, linked_notes: list[str], updated_at: str) -> None:
        if self.fail_writes:
            raise MutationFailure("write rejected")
        self.writes.append((note_id, list(linked_notes), updated_at))
        self.notes[note_id].linked_notes = list(linked_notes)
        self.notes[note_id].updated_at = updated_at


def make_note(note_id: str, title: str = "", *, content: str = "", tags=(), links=()) -> NoteRecord:
    return NoteRecord(
        id=note_id,
        title=title or note_id.upper(),
        content=content,
        tags=list(tags),
        linked_notes=list(links),
    )


@pytest.fixture
def context() -> SessionContext:
    return SessionContext(user_id="user-1")


@pytest.fixture
def sample_notes() -> list[NoteRecord]:
    """A -> B, C -> A, B has no links; C links to a deleted note."""
    return [
        make_note("a", "Alpha", content="first note", tags=["work"], links=["b"]),
        make_note("b", "Beta", content="second note", tags=["home"]),
        make_note("c", "Gamma", content="third note", tags=["work", "ideas"], links=["a", "gone"]),
    ]


@pytest.fixture
def store(sample_notes: list[NoteRecord]) -> FakeStore:
    return FakeStore(sample_notes)


@pytest.fixture
def notices() -> list[Notice]:
    return []


@pytest.fixture
def session(store: FakeStore, context: SessionContext, notices: list[Notice]) -> MindMapSession:
    s = MindMapSession(store, context, notify=notices.append)
    s.refresh()
    return s


def write_note(
    root: Path,
    name: str,
    *,
    title: str | None = None,
    links: list[str] | None = None,
    tags: list[str] | None = None,
    created_at: str = "2024-01-01T00:00:00+00:00",
    user_id: str | None = None,
    body: str = "Body text.",
) -> Path:
    lines = ["---", f"id: {name}"]
    if title is not None:
        lines.append(f"title: {title}")
    if user_id is not None:
        lines.append(f"user_id: {user_id}")
    lines.append(f"created_at: '{created_at}'")
    lines.append("tags:" if tags else "tags: []")
    for t in tags or []:
        lines.append(f"  - {t}")
    lines.append("linked_notes:" if links else "linked_notes: []")
    for link in links or []:
        lines.append(f"  - {link}")
    lines += ["---", "", f"# {name.title()}", "", body, ""]

    path = root / f"{name}.md"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


@pytest.fixture
def notes_dir(tmp_path: Path) -> Path:
    """Markdown notes: alpha -> beta, gamma -> alpha."""
    root = tmp_path / "notes"
    root.mkdir()
    write_note(root, "alpha", links=["beta"], tags=["work"], created_at="2024-01-03T00:00:00+00:00")
    write_note(root, "beta", tags=["home"], created_at="2024-01-02T00:00:00+00:00")
    write_note(root, "gamma", links=["alpha"], tags=["work"], created_at="2024-01-01T00:00:00+00:00")
    return root
