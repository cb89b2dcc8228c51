"""Command implementations behind the CLI."""

from __future__ import annotations

from rich.console import Console

from ..config import Settings
from ..links import LinkService
from ..session import MindMapSession, Notice, NoticeLevel
from ..store import open_store

NOTICE_STYLES = {
    NoticeLevel.INFO: "dim",
    NoticeLevel.SUCCESS: "green",
    NoticeLevel.WARNING: "yellow",
    NoticeLevel.ERROR: "red",
}


class ConsoleNotifier:
    """Prints session notices and remembers whether any were errors."""

    def __init__(self, console: Console) -> None:
        self.console = console
        self.notices: list[Notice] = []

    def __call__(self, notice: Notice) -> None:
        self.notices.append(notice)
        self.console.print(notice.message, style=NOTICE_STYLES[notice.level])

    @property
    def failed(self) -> bool:
        return any(n.level in (NoticeLevel.ERROR, NoticeLevel.WARNING) for n in self.notices)


def open_session(settings: Settings, notifier: ConsoleNotifier) -> MindMapSession:
    store = open_store(settings)
    links = LinkService(store, settings.context, state_dir=settings.resolved_state_dir())
    return MindMapSession(
        store,
        settings.context,
        strategy=settings.layout,
        bounds=settings.bounds,
        links=links,
        notify=notifier,
    )
