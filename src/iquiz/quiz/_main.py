import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from iquiz.core import config_templates
from iquiz.core import workspace as workspace_mod
from iquiz.core.config_templates import ConfigTemplateError
from iquiz.core.logging import close_logger, configure_logger

from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    IQuizConfig,
    IQuizConfigError,
    load_config,
)
from .console import render_topics, run_console_quiz
from .models import Topic
from .repository import TopicRepository
from .settings import TomlSettingsStore


def _build_repository(config: IQuizConfig) -> TopicRepository:
    return TopicRepository(
        TomlSettingsStore(config.settings_path),
        timeout=config.timeout_seconds,
        fallback_url=config.default_url,
    )


def _load_or_report(
    repository: TopicRepository, url: str, console: Console
) -> Optional[tuple[Topic, ...]]:
    with console.status(f"Loading topics from {url}"):
        result = repository.load(url)
    if not result.ok:
        console.print(f"[bold red]Error:[/] {result.message}")
        return None
    return result.topics


def _cmd_topics(
    args: argparse.Namespace, repository: TopicRepository, console: Console
) -> int:
    url = args.url or repository.default_url
    topics = _load_or_report(repository, url, console)
    if topics is None:
        return 1
    if not topics:
        console.print("No topics found.")
        return 1
    render_topics(console, topics)
    return 0


def _cmd_start(
    args: argparse.Namespace, repository: TopicRepository, console: Console
) -> int:
    if args.tui:
        from .view import QuizApp

        app = QuizApp(repository=repository, url=args.url)
        app.run()
        return 0

    url = args.url or repository.default_url
    topics = _load_or_report(repository, url, console)
    if topics is None:
        return 1
    result = run_console_quiz(
        topics,
        console,
        lambda: console.input("> "),
        topic_number=args.topic,
    )
    if result.exit_action == "empty":
        return 1
    return 0


def _cmd_url(
    args: argparse.Namespace, repository: TopicRepository, console: Console
) -> int:
    if args.action == "show":
        console.print(repository.default_url)
        return 0
    topics = _load_or_report(repository, args.value, console)
    if topics is None:
        return 1
    target = args.value.strip()
    if repository.default_url != target:
        console.print(
            f"[bold yellow]Warning:[/] loaded {len(topics)} topic(s) from "
            f"{target} but could not save it"
        )
        return 1
    console.print(f"Saved topic URL {target} ({len(topics)} topic(s))")
    return 0


def _cmd_config_init(args: argparse.Namespace) -> int:
    target = args.path
    if target is None:
        try:
            layout = workspace_mod.ensure_workspace(path=args.workspace)
        except workspace_mod.WorkspaceError as exc:
            sys.stderr.write(str(exc) + "\n")
            return 1
        target = layout.path_for("config") / CONFIG_FILENAME
    template = config_templates.get_template("quiz")
    try:
        written = template.write(target, overwrite=args.force)
    except ConfigTemplateError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1
    sys.stdout.write(f"Wrote iquiz config to {written}\n")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="iquiz quiz",
        description="Fetch quiz topics from a JSON endpoint and take a quiz",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (defaults to IQUIZ_DATA_HOME)",
    )
    p.add_argument(
        "--config",
        type=Path,
        help=f"Path to a TOML config file (defaults to {CONFIG_FILENAME})",
    )
    p.add_argument("--log-level", help="Logging level for the run")
    p.add_argument(
        "--timeout", type=float, help="Seconds to wait for the topic endpoint"
    )
    p.add_argument(
        "--verbose", action="store_true", help="Echo log records to stderr"
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_topics = sub.add_parser("topics", help="List topics from the source")
    sp_topics.add_argument("--url", help="Topic source URL")

    sp_start = sub.add_parser("start", help="Start a quiz session")
    sp_start.add_argument("--url", help="Topic source URL")
    sp_start.add_argument(
        "--topic", type=int, help="Topic number to start without prompting"
    )
    sp_start.add_argument(
        "--tui", action="store_true", help="Use the Textual interface"
    )

    sp_url = sub.add_parser("url", help="Inspect or set the remembered URL")
    url_sub = sp_url.add_subparsers(dest="action", required=True)
    url_sub.add_parser("show", help="Print the URL used on the next start")
    sp_url_set = url_sub.add_parser(
        "set", help="Load topics from a URL and remember it on success"
    )
    sp_url_set.add_argument("value")

    sp_cfg = sub.add_parser("config", help="Manage the config file")
    cfg_sub = sp_cfg.add_subparsers(dest="action", required=True)
    sp_cfg_init = cfg_sub.add_parser(
        "init", help=f"Write the default {CONFIG_FILENAME} template"
    )
    sp_cfg_init.add_argument("--path", type=Path)
    sp_cfg_init.add_argument("--force", action="store_true")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "config":
        return _cmd_config_init(args)

    overrides = ConfigOverrides(
        timeout_seconds=args.timeout,
        log_level=args.log_level,
    )
    try:
        loaded = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except IQuizConfigError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    config = loaded.config
    logger, _ = configure_logger(
        "iquiz",
        log_dir=config.log_dir,
        level=config.log_level,
        verbose=args.verbose,
    )
    logger.debug("quiz command invoked", extra={"command": args.command})
    console = Console()
    try:
        with _build_repository(config) as repository:
            if args.command == "topics":
                return _cmd_topics(args, repository, console)
            if args.command == "start":
                return _cmd_start(args, repository, console)
            if args.command == "url":
                return _cmd_url(args, repository, console)
    finally:
        close_logger(logger)
    parser.print_help()  # pragma: no cover - argparse enforces commands
    return 2
