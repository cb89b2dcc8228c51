"""
Append-only log of link mutations.

Each successful create/delete is written as one JSON line recording what
changed, so link-list history survives last-write-wins races in the store.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

LINK_LOG_NAME = "links.log"


@dataclass
class LinkLogEntry:
    """A single link mutation."""
    timestamp: str
    operation: str  # link-create | link-delete
    source: str
    target: str
    user_id: str
    edges_added: int = 0
    edges_removed: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "source": self.source,
            "target": self.target,
            "user_id": self.user_id,
            "edges_added": self.edges_added,
            "edges_removed": self.edges_removed,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LinkLogEntry":
        return cls(
            timestamp=data["timestamp"],
            operation=data["operation"],
            source=data["source"],
            target=data["target"],
            user_id=data.get("user_id", ""),
            edges_added=data.get("edges_added", 0),
            edges_removed=data.get("edges_removed", 0),
            metadata=data.get("metadata", {}),
        )


def get_link_log_path(state_dir: Path) -> Path:
    return state_dir / LINK_LOG_NAME


def log_link_operation(
    state_dir: Path,
    operation: str,
    source: str,
    target: str,
    user_id: str,
    edges_added: int = 0,
    edges_removed: int = 0,
    metadata: dict[str, Any] | None = None,
) -> LinkLogEntry:
    """
    Append a link mutation to ``<state_dir>/links.log``.

    Args:
        state_dir: Directory holding notemap state (created if missing)
        operation: "link-create" or "link-delete"
        source: Note whose link list changed
        target: Linked note id
        user_id: Owner of the source note
        edges_added: Edges added to the in-memory graph
        edges_removed: Edges removed from the in-memory graph
        metadata: Additional context

    Returns:
        The written entry
    """
    entry = LinkLogEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        source=source,
        target=target,
        user_id=user_id,
        edges_added=edges_added,
        edges_removed=edges_removed,
        metadata=metadata or {},
    )

    log_path = get_link_log_path(state_dir)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_link_log(state_dir: Path, last_n: int | None = None) -> list[LinkLogEntry]:
    """Read logged link mutations, oldest first."""
    log_path = get_link_log_path(state_dir)
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(LinkLogEntry.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError):
                continue  # Skip malformed lines

    if last_n is not None:
        return entries[-last_n:]
    return entries


def format_link_entry(entry: LinkLogEntry) -> str:
    arrow = "->" if entry.operation == "link-create" else "-x"
    return f"[{entry.timestamp}] {entry.operation} {entry.source} {arrow} {entry.target} (user {entry.user_id})"
