"""Watch command - keep a rendered map in step with the notes directory."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..config import Settings
from ..watcher import run_watch_loop
from . import ConsoleNotifier, open_session
from .graph_cmd import render_session


def run_watch(settings: Settings, *, out: Path, search: str = "", fmt: str = "html") -> int:
    """
    Re-render the map to ``out`` whenever a note file changes.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(stderr=True)

    if settings.store.kind != "markdown" or settings.store.path is None:
        console.print("[red]watch needs the markdown store (--notes DIR)[/red]")
        return 1
    notes_path = settings.store.path

    notifier = ConsoleNotifier(console)
    session = open_session(settings, notifier)

    def render() -> None:
        session.refresh(search)
        out.write_text(render_session(session, fmt, title="Mind map"), encoding="utf-8")

    def on_change(changed: set[Path]) -> None:
        render()
        stamp = datetime.now().strftime("%H:%M:%S")
        console.print(
            f"[dim]{stamp}[/dim] {len(changed)} note file(s) changed; "
            f"{len(session.graph.nodes)} notes, {len(session.graph.edges)} links -> {out}"
        )

    render()
    console.print(f"[bold]Watching[/bold] {notes_path}")
    console.print(f"  Output: {out}")
    console.print()
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")

    run_watch_loop(notes_path, on_change)
    return 0
