"""Workspace bootstrap helpers shared by the iquiz commands."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, MutableMapping


WORKSPACE_ENV = "IQUIZ_DATA_HOME"
DEFAULT_WORKSPACE = Path.home() / ".iquiz-data"

_SUBDIRS = {
    "config": "config",
    "logs": "logs",
}


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace paths and creation metadata."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise KeyError(f"Unknown workspace directory '{key}'.") from exc

    def items(self) -> tuple[tuple[str, Path], ...]:
        """Return a tuple of directory name/path pairs."""

        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    subdirs: Mapping[str, str] | None = None,
) -> WorkspaceLayout:
    """Ensure the workspace exists and return its layout.

    ``path`` wins over ``IQUIZ_DATA_HOME``, which wins over the default
    ``~/.iquiz-data``. When the default location is not writable a directory
    under the system temp dir is used instead.
    """

    env_map = _coerce_env(env)
    resolved_subdirs = dict(subdirs or _SUBDIRS)
    base, has_override = _resolve_base(env_map, override=path)

    candidates: list[Path] = [base]
    if not has_override:
        fallback = _fallback_base()
        if fallback != base:
            candidates.append(fallback)

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            return _materialize_layout(candidate, resolved_subdirs)
        except PermissionError as exc:
            last_error = exc
            continue

    raise WorkspaceError(
        "Unable to prepare workspace at {0}".format(base)
    ) from last_error


def _coerce_env(env: Mapping[str, str] | None) -> Mapping[str, str]:
    if env is None:
        return os.environ
    return env


def _resolve_base(
    env: Mapping[str, str], *, override: Path | None
) -> tuple[Path, bool]:
    if override is not None:
        target = override
        provided = True
    else:
        custom = env.get(WORKSPACE_ENV)
        if custom is not None:
            custom = custom.strip()
        if custom:
            target = Path(custom).expanduser()
            provided = True
        else:
            target = DEFAULT_WORKSPACE
            provided = False
    try:
        return target.expanduser().resolve(), provided
    except FileNotFoundError:
        return target.expanduser().absolute(), provided


def _fallback_base() -> Path:
    return Path(tempfile.gettempdir()) / "iquiz-data"


def _materialize_layout(
    base: Path, subdirs: Mapping[str, str]
) -> WorkspaceLayout:
    _validate_candidate(base)

    created: MutableMapping[str, bool] = {"home": _ensure_dir(base)}
    directories: MutableMapping[str, Path] = {}
    for key, relative in subdirs.items():
        candidate = base / relative
        created[key] = _ensure_dir(candidate)
        directories[key] = candidate

    return WorkspaceLayout(
        home=base,
        directories=MappingProxyType(dict(directories)),
        created=MappingProxyType(dict(created)),
    )


def _validate_candidate(path: Path) -> None:
    if path.exists() and not path.is_dir():
        message = (
            "Configured workspace exists and is not a directory: {0}"
        ).format(path)
        raise WorkspaceError(message)


def _ensure_dir(path: Path) -> bool:
    existed = path.exists()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except FileExistsError as exc:  # pragma: no cover - depends on platform
        message = (
            "Expected directory but found a non-directory entry: {0}"
        ).format(path)
        raise WorkspaceError(message) from exc
    _chmod_safe(path, 0o700)
    return not existed


def _chmod_safe(path: Path, mode: int) -> None:
    try:
        path.chmod(mode)
    except (PermissionError, NotImplementedError):
        return
