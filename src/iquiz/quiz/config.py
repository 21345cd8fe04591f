"""Configuration loader for the quiz commands."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

from iquiz.core import config as core_config
from iquiz.core import workspace as workspace_mod

from .settings import DEFAULT_TOPICS_URL, SETTINGS_FILENAME

CONFIG_FILENAME = "iquiz.toml"
CONFIG_ENV = "IQUIZ_CONFIG"
ENV_PREFIX = "IQUIZ_"

_DEFAULT_TIMEOUT = 10.0
_DEFAULT_LOG_LEVEL = "INFO"


class IQuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class IQuizConfig:
    """Fully resolved configuration for a quiz run."""

    default_url: str
    timeout_seconds: float
    log_level: str
    settings_path: Path
    log_dir: Path


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    default_url: Optional[str] = None
    timeout_seconds: Optional[float] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class ConfigLoadResult:
    """Resolved configuration plus the workspace it was read from."""

    config: IQuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> ConfigLoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise IQuizConfigError(str(exc)) from exc
    default_path = layout.path_for("config") / CONFIG_FILENAME

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=default_path,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
        try:
            parsed = core_config.load_toml(requested_path)
            core_config.merge_defaults(table, parsed)
        except core_config.TomlConfigError as exc:
            raise IQuizConfigError(str(exc)) from exc
    elif config_path is not None or env_map.get(CONFIG_ENV, "").strip():
        raise IQuizConfigError(f"Config file not found: {requested_path}")

    default_url = _resolve_url(
        _pick_first(
            overrides.default_url,
            _parse_env_string(env_map, "DEFAULT_URL"),
            table["source"]["default_url"],
        )
    )
    timeout = _resolve_timeout(
        _pick_first(
            overrides.timeout_seconds,
            _parse_env_string(env_map, "TIMEOUT"),
            table["network"]["timeout_seconds"],
        )
    )
    log_level = _resolve_log_level(
        _pick_first(
            overrides.log_level,
            _parse_env_string(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        )
    )

    config = IQuizConfig(
        default_url=default_url,
        timeout_seconds=timeout,
        log_level=log_level,
        settings_path=layout.path_for("config") / SETTINGS_FILENAME,
        log_dir=layout.path_for("logs"),
    )
    return ConfigLoadResult(
        config=config, layout=layout, config_path=loaded_path
    )


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "source": {"default_url": DEFAULT_TOPICS_URL},
        "network": {"timeout_seconds": _DEFAULT_TIMEOUT},
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = env_map.get(CONFIG_ENV, "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _resolve_url(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise IQuizConfigError(
            "source.default_url must be a non-empty string."
        )
    return value.strip()


def _resolve_timeout(value: object) -> float:
    if isinstance(value, bool):
        raise IQuizConfigError("network.timeout_seconds must be a number.")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise IQuizConfigError(
            "network.timeout_seconds must be a number."
        ) from exc
    if not math.isfinite(number):
        raise IQuizConfigError("network.timeout_seconds must be finite.")
    if number <= 0:
        raise IQuizConfigError("network.timeout_seconds must be positive.")
    return number


def _resolve_log_level(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise IQuizConfigError("logging.level must be a non-empty string.")
    return value.strip().upper()


def _parse_env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
