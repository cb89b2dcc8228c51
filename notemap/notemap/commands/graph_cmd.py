"""Graph command - render the mind map of the configured notes."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from rich.console import Console

from ..config import Settings
from ..graph.layout import LayoutStrategy
from ..render import print_rich, to_json, to_markdown, to_svg, wrap_html
from ..session import MindMapSession
from . import ConsoleNotifier, open_session


def render_session(session: MindMapSession, fmt: str, *, title: str) -> str:
    viewport = session.viewport.state
    if fmt == "json":
        return to_json(session.graph, viewport, title=title)
    if fmt == "svg":
        return to_svg(session.graph, viewport, session.interaction.state, title=title)
    if fmt == "html":
        return wrap_html(to_svg(session.graph, viewport, session.interaction.state, title=title), title=title)
    return to_markdown(session.graph, title=title)


def _title(search: str, tags: tuple[str, ...]) -> str:
    parts = ["Mind map"]
    if search:
        parts.append(f"search '{search}'")
    if tags:
        parts.append(f"tags {', '.join(tags)}")
    return " - ".join(parts)


def run_graph(
    settings: Settings,
    *,
    search: str = "",
    tags: tuple[str, ...] = (),
    layout: str | None = None,
    fmt: str = "md",
    out: Path | None = None,
    zoom: int = 0,
    width: float | None = None,
    height: float | None = None,
) -> int:
    """Fetch notes, build and lay out the graph, and render it."""
    console = Console(stderr=True)
    notifier = ConsoleNotifier(console)

    if layout is not None:
        settings = replace(settings, layout=LayoutStrategy.from_name(layout))
    if width is not None:
        settings = replace(settings, width=width)
    if height is not None:
        settings = replace(settings, height=height)

    session = open_session(settings, notifier)
    if tags:
        session.set_tag_filter(tags)
    session.refresh(search)
    session.viewport.zoom_by(zoom)

    title = _title(search, tags)
    exit_code = 1 if notifier.failed else 0

    if fmt == "rich":
        if out:
            rich_console = Console(record=True)
            print_rich(session.graph, console=rich_console, title=title)
            out.write_text(rich_console.export_text(), encoding="utf-8")
            console.print(f"Wrote graph output to {out}", style="green")
        else:
            print_rich(session.graph, console=Console(), title=title)
        return exit_code

    text = render_session(session, fmt, title=title)
    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote graph output to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")

    return exit_code
