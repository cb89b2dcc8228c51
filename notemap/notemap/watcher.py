"""
File system watcher for the markdown note store.

Note edits arrive as bursts of events (editor save cycles, link-list writes),
so changes are collected and flushed once the directory has been quiet for
``DEBOUNCE_SECONDS``.
"""

import time
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


class NotesChangeHandler(FileSystemEventHandler):
    """
    Collects changed note paths and reports them after a quiet period.

    Key behaviors:
    - Only ``.md`` files count; hidden files and directories are ignored
    - Created, modified, deleted and moved notes are all treated as "changed"
    - ``flush_pending`` calls ``on_change`` at most once per quiet period
    """

    RELEVANT_EXTENSIONS = {".md"}
    DEBOUNCE_SECONDS = 0.5

    def __init__(self, notes_path: Path, on_change: Callable[[set[Path]], None]):
        super().__init__()
        self.notes_path = notes_path
        self.on_change = on_change
        self.pending: set[Path] = set()
        self.last_event_at: float = 0.0

    def _is_relevant(self, path: str) -> bool:
        p = Path(path)
        try:
            rel = p.relative_to(self.notes_path)
        except ValueError:
            rel = p
        if any(part.startswith(".") for part in rel.parts):
            return False
        return p.suffix.lower() in self.RELEVANT_EXTENSIONS

    def _track(self, path: str) -> None:
        if self._is_relevant(path):
            self.pending.add(Path(path))
            self.last_event_at = time.time()

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._track(str(event.src_path))
        dest = getattr(event, "dest_path", "")
        if dest:
            self._track(str(dest))

    def flush_pending(self, now: float | None = None) -> bool:
        """Report pending changes once the debounce window has passed."""
        now = time.time() if now is None else now
        if not self.pending or now - self.last_event_at < self.DEBOUNCE_SECONDS:
            return False
        changed, self.pending = self.pending, set()
        self.on_change(changed)
        return True


def watch_notes(
    notes_path: Path,
    on_change: Callable[[set[Path]], None],
    recursive: bool = True,
) -> tuple[Observer, NotesChangeHandler]:
    """
    Start watching a notes directory.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = NotesChangeHandler(notes_path, on_change)

    observer = Observer()
    observer.schedule(handler, str(notes_path), recursive=recursive)
    observer.start()

    return observer, handler


def run_watch_loop(notes_path: Path, on_change: Callable[[set[Path]], None]) -> None:
    """
    Run the watch loop until interrupted.

    This is a blocking function that flushes pending changes periodically.
    """
    observer, handler = watch_notes(notes_path, on_change)

    try:
        while True:
            time.sleep(0.25)
            handler.flush_pending()
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
