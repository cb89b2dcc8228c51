"""Configuration loading.

Settings come from ``notemap.yml`` (found by walking up from the working
directory), then environment overrides, then command-line flags. Secrets are
stored as references such as ``env:NOTEMAP_API_KEY`` and resolved at the last
moment, so the raw value never appears in the file or in logs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Protocol

import yaml

from .errors import ConfigError
from .graph.layout import LayoutStrategy
from .models import Bounds, SessionContext

CONFIG_NAME = "notemap.yml"
USER_ENV = "NOTEMAP_USER_ID"
DEFAULT_USER = "local"


class SecretsProvider(Protocol):
    def supports(self, ref: str) -> bool: ...

    def get(self, ref: str) -> str | None: ...


class EnvSecretsProvider:
    """Resolve ``env:VAR_NAME`` from the process environment."""

    PREFIX = "env:"

    def supports(self, ref: str) -> bool:
        return ref.startswith(self.PREFIX)

    def get(self, ref: str) -> str | None:
        if not self.supports(ref):
            return None
        return os.environ.get(ref[len(self.PREFIX) :])


def resolve_secret(ref: str, providers: list[SecretsProvider] | None = None) -> str:
    for provider in providers or [EnvSecretsProvider()]:
        if provider.supports(ref):
            value = provider.get(ref)
            if value is None:
                raise ConfigError(f"Secret reference {ref} is not set")
            return value
    raise ConfigError(f"Unsupported secret reference: {ref} (use env:VAR_NAME)")


@dataclass(frozen=True)
class StoreSettings:
    kind: str = "markdown"  # markdown | rest
    path: Path | None = None
    url: str = ""
    table: str = "notes"
    api_key_ref: str = "env:NOTEMAP_API_KEY"
    timeout_s: float = 10.0


@dataclass(frozen=True)
class Settings:
    user_id: str = DEFAULT_USER
    store: StoreSettings = field(default_factory=StoreSettings)
    width: float = 1200.0
    height: float = 800.0
    layout: LayoutStrategy = LayoutStrategy.RADIAL
    state_dir: Path | None = None
    source: Path | None = None  # config file the settings came from

    @property
    def bounds(self) -> Bounds:
        return Bounds(self.width, self.height)

    @property
    def context(self) -> SessionContext:
        return SessionContext(self.user_id)

    def resolved_state_dir(self) -> Path:
        if self.state_dir is not None:
            return self.state_dir
        if self.source is not None:
            return self.source.parent / ".notemap"
        if self.store.path is not None:
            return self.store.path.parent / ".notemap"
        return Path.cwd() / ".notemap"


def find_config(start: Path) -> Path | None:
    """Find ``notemap.yml`` in ``start`` or any parent."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def _number(section: dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"'{key}' must be a positive number")
    return float(value)


def _path(value: Any, base: Path) -> Path | None:
    if value is None:
        return None
    p = Path(str(value)).expanduser()
    return p if p.is_absolute() else (base / p).resolve()


def parse_settings(data: dict[str, Any], *, base: Path, source: Path | None = None) -> Settings:
    """Build settings from a parsed config mapping; relative paths resolve against ``base``."""
    store = _section(data, "store")
    view = _section(data, "view")

    kind = str(store.get("kind", "markdown")).lower()
    if kind not in ("markdown", "rest"):
        raise ConfigError(f"Unknown store kind '{kind}' (expected markdown or rest)")

    try:
        layout = LayoutStrategy.from_name(str(view.get("layout", "radial")))
    except ValueError as e:
        raise ConfigError(str(e)) from e

    return Settings(
        user_id=str(data.get("user_id") or DEFAULT_USER),
        store=StoreSettings(
            kind=kind,
            path=_path(store.get("path"), base),
            url=str(store.get("url") or ""),
            table=str(store.get("table") or "notes"),
            api_key_ref=str(store.get("api_key") or "env:NOTEMAP_API_KEY"),
            timeout_s=_number(store, "timeout_s", 10.0),
        ),
        width=_number(view, "width", 1200.0),
        height=_number(view, "height", 800.0),
        layout=layout,
        state_dir=_path(data.get("state_dir"), base),
        source=source,
    )


def load_settings(config_path: Path | None = None, *, cwd: Path | None = None) -> Settings:
    """Load settings from ``config_path`` (or the discovered file) plus env overrides."""
    cwd = cwd or Path.cwd()
    path = config_path or find_config(cwd)

    if path is None:
        settings = Settings()
    else:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")
        settings = parse_settings(data, base=path.parent, source=path.resolve())

    env_user = os.environ.get(USER_ENV)
    if env_user:
        settings = replace(settings, user_id=env_user)
    return settings
