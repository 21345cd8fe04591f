"""Core shared helpers for iquiz subcommands."""

from __future__ import annotations

from .config import (
    TomlConfigError,
    load_toml,
    merge_defaults,
    write_toml_atomic,
    write_toml_template,
)
from .config_templates import (
    ConfigTemplate,
    ConfigTemplateError,
    get_template,
    iter_templates,
)
from .logging import JsonLogFormatter, close_logger, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "write_toml_atomic",
    "write_toml_template",
    "ConfigTemplate",
    "ConfigTemplateError",
    "get_template",
    "iter_templates",
    "configure_logger",
    "close_logger",
    "JsonLogFormatter",
    "ensure_workspace",
    "WorkspaceLayout",
    "WorkspaceError",
    "WORKSPACE_ENV",
]
