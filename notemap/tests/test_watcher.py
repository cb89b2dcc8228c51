from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from notemap.watcher import NotesChangeHandler


def _handler(tmp_path):
    calls = []
    return NotesChangeHandler(tmp_path, calls.append), calls


def test_markdown_changes_are_flushed_after_quiet_period(tmp_path) -> None:
    handler, calls = _handler(tmp_path)
    handler.on_any_event(FileModifiedEvent(str(tmp_path / "alpha.md")))
    handler.on_any_event(FileCreatedEvent(str(tmp_path / "beta.md")))
    last = handler.last_event_at

    assert not handler.flush_pending(now=last + 0.1)
    assert handler.flush_pending(now=last + 1.0)
    assert calls == [{tmp_path / "alpha.md", tmp_path / "beta.md"}]
    assert not handler.flush_pending(now=last + 2.0)


def test_irrelevant_events_are_ignored(tmp_path) -> None:
    handler, calls = _handler(tmp_path)
    handler.on_any_event(FileModifiedEvent(str(tmp_path / "image.png")))
    handler.on_any_event(FileModifiedEvent(str(tmp_path / ".obsidian" / "note.md")))
    handler.on_any_event(DirCreatedEvent(str(tmp_path / "sub")))

    assert handler.pending == set()
    assert not handler.flush_pending(now=handler.last_event_at + 10)
    assert calls == []


def test_moves_track_both_paths(tmp_path) -> None:
    handler, _ = _handler(tmp_path)
    handler.on_any_event(FileMovedEvent(str(tmp_path / "old.md"), str(tmp_path / "new.md")))
    assert handler.pending == {tmp_path / "old.md", tmp_path / "new.md"}
