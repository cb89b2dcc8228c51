"""Note store backed by a directory of markdown files with YAML frontmatter.

Each ``*.md`` file is one note. Frontmatter keys: ``id`` (defaults to the file
stem), ``title`` (defaults to the first H1, then the stem), ``tags``,
``linked_notes``, ``user_id``, ``created_at``, ``updated_at``. Notes without a
``user_id`` are visible to every user.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import frontmatter

from ..errors import FetchFailure, MutationFailure
from ..models import NoteFilters, NoteRecord

logger = logging.getLogger(__name__)


def _string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value if v is not None]
    return [str(value)]


def _first_h1(content: str) -> str:
    for line in content.splitlines():
        if line.startswith("# "):
            return line[2:].strip()
    return ""


def _note_from_post(path: Path, post: frontmatter.Post) -> NoteRecord:
    fm = post.metadata
    return NoteRecord(
        id=str(fm.get("id") or path.stem),
        title=str(fm.get("title") or _first_h1(post.content) or path.stem),
        content=post.content,
        tags=_string_list(fm.get("tags")),
        linked_notes=_string_list(fm.get("linked_notes")),
        created_at=str(fm.get("created_at") or ""),
        updated_at=str(fm.get("updated_at") or ""),
    )


class MarkdownNoteStore:
    """Reads and writes notes under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _note_files(self) -> list[Path]:
        if not self.root.is_dir():
            raise FetchFailure(f"Notes directory not found: {self.root}")
        return sorted(
            p for p in self.root.rglob("*.md") if not any(part.startswith(".") for part in p.relative_to(self.root).parts)
        )

    def _owned(self, post: frontmatter.Post, user_id: str) -> bool:
        owner = post.metadata.get("user_id")
        return owner is None or str(owner) == user_id

    def _load(self) -> list[tuple[Path, frontmatter.Post]]:
        loaded = []
        for path in self._note_files():
            try:
                loaded.append((path, frontmatter.load(path)))
            except Exception as e:
                # One unreadable file should not hide the rest of the map.
                logger.warning(f"Skipping unreadable note {path}: {e}")
        return loaded

    def _find(self, user_id: str, note_id: str) -> tuple[Path, frontmatter.Post]:
        for path, post in self._load():
            if str(post.metadata.get("id") or path.stem) == note_id and self._owned(post, user_id):
                return path, post
        raise FetchFailure(f"Note not found: {note_id}")

    def list_notes(self, user_id: str, filters: NoteFilters | None = None) -> list[NoteRecord]:
        notes = [_note_from_post(path, post) for path, post in self._load() if self._owned(post, user_id)]
        notes.sort(key=lambda n: n.created_at, reverse=True)
        return notes

    def get_linked_notes(self, user_id: str, note_id: str) -> list[str]:
        _, post = self._find(user_id, note_id)
        return _string_list(post.metadata.get("linked_notes"))

    def update_linked_notes(self, user_id: str, note_id: str, linked_notes: list[str], updated_at: str) -> None:
        try:
            path, post = self._find(user_id, note_id)
        except FetchFailure as e:
            raise MutationFailure(str(e)) from e

        post.metadata["linked_notes"] = list(linked_notes)
        post.metadata["updated_at"] = updated_at
        try:
            path.write_text(frontmatter.dumps(post) + "\n", encoding="utf-8")
        except OSError as e:
            raise MutationFailure(f"Failed to write {path}: {e}") from e
