"""Link commands - create, delete and review note links."""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table

from ..audit_log import format_link_entry, read_link_log
from ..config import Settings
from . import ConsoleNotifier, open_session


def run_link(settings: Settings, source: str, target: str, *, remove: bool = False) -> int:
    """Create (or remove) the link ``source -> target`` in the configured store."""
    console = Console(stderr=True)
    notifier = ConsoleNotifier(console)
    session = open_session(settings, notifier)

    session.refresh()
    if notifier.failed:
        return 1

    ok = session.delete_link(source, target) if remove else session.create_link(source, target)
    return 0 if ok else 1


def run_link_log(
    settings: Settings,
    *,
    last_n: int | None = None,
    output_json: bool = False,
    plain: bool = False,
) -> int:
    entries = read_link_log(settings.resolved_state_dir(), last_n=last_n)

    if output_json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
        return 0

    if plain:
        for e in entries:
            print(format_link_entry(e))
        return 0

    console = Console()
    if not entries:
        console.print("[dim]No link changes recorded[/dim]")
        return 0

    t = Table(show_header=True, header_style="bold")
    t.add_column("Time", style="dim", no_wrap=True)
    t.add_column("Operation")
    t.add_column("Source", style="cyan")
    t.add_column("Target", style="cyan")
    t.add_column("User")
    for e in entries:
        op_style = "green" if e.operation == "link-create" else "red"
        t.add_row(e.timestamp, f"[{op_style}]{e.operation}[/{op_style}]", e.source, e.target, e.user_id)
    console.print(t)
    return 0
