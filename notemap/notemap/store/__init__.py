"""Note store implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import ConfigError
from .base import NoteStore
from .markdown import MarkdownNoteStore
from .rest import RestNoteStore, RestStoreConfig

if TYPE_CHECKING:
    from ..config import Settings


def open_store(settings: "Settings") -> NoteStore:
    """Instantiate the store described by ``settings``."""
    from ..config import resolve_secret

    cfg = settings.store
    if cfg.kind == "rest":
        if not cfg.url:
            raise ConfigError("store.url is required for the rest store")
        return RestNoteStore(
            RestStoreConfig(
                url=cfg.url,
                api_key=resolve_secret(cfg.api_key_ref),
                table=cfg.table,
                timeout_s=cfg.timeout_s,
            )
        )
    if cfg.path is None:
        raise ConfigError("store.path (or --notes) is required for the markdown store")
    return MarkdownNoteStore(cfg.path)


__all__ = ["NoteStore", "MarkdownNoteStore", "RestNoteStore", "RestStoreConfig", "open_store"]
