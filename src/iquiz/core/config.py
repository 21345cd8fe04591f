"""Shared TOML configuration helpers for iquiz commands."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, MutableMapping

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - interpreter guard
    raise RuntimeError("Python 3.11+ is required for tomllib support.") from exc

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
    "write_toml_atomic",
]


class TomlConfigError(RuntimeError):
    """Raised when TOML config IO or validation fails."""


def load_toml(path: Path) -> Mapping[str, Any]:
    """Load a TOML document from ``path``.

    Errors are surfaced as :class:`TomlConfigError` instances so callers can
    translate them into domain-specific exceptions.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse config TOML: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Recursively merge ``override`` into ``base`` enforcing known keys."""

    for key, value in override.items():
        if key not in base:
            dotted = f"{path}{key}" if path else key
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        base_value = base[key]
        if isinstance(base_value, MutableMapping):
            if not isinstance(value, Mapping):
                dotted = f"{path}{key}" if path else key
                raise TomlConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted,
                        type(value).__name__,
                    )
                )
            merge_defaults(base_value, value, path=f"{path}{key}.")
            continue
        base[key] = value


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path`` honouring ``overwrite`` semantics."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as handle:
        handle.write(template)
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def write_toml_atomic(path: Path, text: str, *, mode: int = 0o600) -> Path:
    """Replace ``path`` with ``text`` via a temp file in the same directory.

    Readers never observe a half-written document.
    """

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
    except OSError as exc:
        raise TomlConfigError(f"Failed to write {path}: {exc}") from exc
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        try:
            tmp_path.chmod(mode)
        except PermissionError:  # pragma: no cover - depends on filesystem
            pass
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise TomlConfigError(f"Failed to write {path}: {exc}") from exc
    return path
