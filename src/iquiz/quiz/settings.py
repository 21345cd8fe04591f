"""Persistence for the last successfully used topic source URL."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from iquiz.core import config as core_config

__all__ = [
    "DEFAULT_TOPICS_URL",
    "SETTINGS_FILENAME",
    "SettingsError",
    "SettingsStore",
    "TomlSettingsStore",
    "MemorySettingsStore",
]

DEFAULT_TOPICS_URL = "https://tednewardsandbox.site44.com/questions.json"
SETTINGS_FILENAME = "settings.toml"
_URL_KEY = "last_url"


class SettingsError(RuntimeError):
    """Raised when the settings file cannot be read or written."""


@runtime_checkable
class SettingsStore(Protocol):
    """Load/save capability for the remembered topic URL."""

    def load(self) -> Optional[str]:
        ...

    def save(self, url: str) -> None:
        ...


class TomlSettingsStore:
    """Keep ``last_url`` in a small TOML file under the workspace config dir."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = core_config.load_toml(self.path)
        except core_config.TomlConfigError as exc:
            raise SettingsError(str(exc)) from exc
        value = data.get(_URL_KEY)
        if value is None:
            return None
        if not isinstance(value, str):
            raise SettingsError(
                f"'{_URL_KEY}' in {self.path} must be a string."
            )
        return value.strip() or None

    def save(self, url: str) -> None:
        text = (
            "# Managed by iquiz; rewritten after every successful fetch.\n"
            f"{_URL_KEY} = {_toml_string(url)}\n"
        )
        try:
            core_config.write_toml_atomic(self.path, text)
        except core_config.TomlConfigError as exc:
            raise SettingsError(str(exc)) from exc


class MemorySettingsStore:
    """In-process store; ``saves`` records every write in order."""

    def __init__(self, url: Optional[str] = None) -> None:
        self.url = url
        self.saves: list[str] = []

    def load(self) -> Optional[str]:
        return self.url

    def save(self, url: str) -> None:
        self.url = url
        self.saves.append(url)


def _toml_string(value: str) -> str:
    # JSON string escapes are valid TOML basic-string escapes, except that
    # TOML also forbids a raw DEL character.
    return json.dumps(value, ensure_ascii=True).replace("\x7f", "\\u007F")
