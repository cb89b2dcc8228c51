"""CLI entrypoint for notemap."""

import sys
from dataclasses import replace
from pathlib import Path

import click

from . import __version__
from .config import load_settings
from .errors import ConfigError


@click.group()
@click.version_option(__version__, prog_name="notemap")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to notemap.yml (defaults to the nearest one above the working directory)",
)
@click.option(
    "--notes",
    "-n",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Use the markdown store in this directory (overrides the config file)",
)
@click.option("--user", "user_id", type=str, default=None, help="User id to scope notes to (or set NOTEMAP_USER_ID)")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, notes: Path | None, user_id: str | None) -> None:
    """notemap - mind map of your linked notes.

    Render the note graph, and create or remove links between notes.
    """
    ctx.ensure_object(dict)
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if notes is not None:
        if not notes.is_dir():
            raise click.BadParameter(f"Directory '{notes}' does not exist.", param_hint="--notes / -n")
        settings = replace(settings, store=replace(settings.store, kind="markdown", path=notes.resolve()))
    if user_id:
        settings = replace(settings, user_id=user_id)

    ctx.obj["settings"] = settings


@cli.command()
@click.option("--search", "-s", type=str, default="", help="Only notes whose title or content contains this text")
@click.option("--tag", "tags", multiple=True, help="Only notes carrying one of these tags. Repeatable.")
@click.option(
    "--layout",
    type=click.Choice(["radial", "tree", "grid", "force"]),
    default=None,
    help="Layout strategy (defaults to view.layout from the config, else radial)",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "md", "json", "svg", "html"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--width", type=float, default=None, help="Drawing surface width")
@click.option("--height", type=float, default=None, help="Drawing surface height")
@click.option("--zoom", type=int, default=0, show_default=True, help="Zoom steps from 100% (+/-, 10% each)")
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.pass_context
def graph(
    ctx: click.Context,
    search: str,
    tags: tuple[str, ...],
    layout: str | None,
    fmt: str,
    width: float | None,
    height: float | None,
    zoom: int,
    out: Path | None,
) -> None:
    """Render the mind map of your notes.

    Examples:

        notemap --notes ./notes graph --format html --out map.html

        notemap graph --layout grid --search python --tag research
    """
    from .commands.graph_cmd import run_graph

    try:
        exit_code = run_graph(
            ctx.obj["settings"],
            search=search,
            tags=tags,
            layout=layout,
            fmt=fmt,
            out=out,
            zoom=zoom,
            width=width,
            height=height,
        )
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.group()
def link() -> None:
    """Create, remove and review links between notes."""
    pass


@link.command("add")
@click.argument("source")
@click.argument("target")
@click.pass_context
def link_add(ctx: click.Context, source: str, target: str) -> None:
    """Link SOURCE to TARGET (appends TARGET to SOURCE's linked notes)."""
    from .commands.link_cmd import run_link

    try:
        exit_code = run_link(ctx.obj["settings"], source, target)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@link.command("remove")
@click.argument("source")
@click.argument("target")
@click.pass_context
def link_remove(ctx: click.Context, source: str, target: str) -> None:
    """Remove the link from SOURCE to TARGET. Removing a missing link succeeds."""
    from .commands.link_cmd import run_link

    try:
        exit_code = run_link(ctx.obj["settings"], source, target, remove=True)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@link.command("log")
@click.option("--last", "last_n", type=int, default=None, help="Show only the last N changes")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--plain", is_flag=True, help="One line per change, for piping")
@click.pass_context
def link_log(ctx: click.Context, last_n: int | None, output_json: bool, plain: bool) -> None:
    """Show recorded link changes."""
    from .commands.link_cmd import run_link_log

    sys.exit(run_link_log(ctx.obj["settings"], last_n=last_n, output_json=output_json, plain=plain))


@cli.command()
@click.option(
    "--out",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="File to keep up to date",
)
@click.option("--search", "-s", type=str, default="", help="Only notes whose title or content contains this text")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["html", "svg", "json", "md"]),
    default="html",
    show_default=True,
    help="Output format",
)
@click.pass_context
def watch(ctx: click.Context, out: Path, search: str, fmt: str) -> None:
    """Re-render the map whenever a note file changes.

    Runs until interrupted (Ctrl+C). Requires the markdown store.
    """
    from .commands.watch_cmd import run_watch

    sys.exit(run_watch(ctx.obj["settings"], out=out, search=search, fmt=fmt))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
