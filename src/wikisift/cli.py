"""CLI entry point for WikiSift."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import webbrowser
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt

from wikisift.config.profiles import ProfileStore
from wikisift.config.settings import Settings
from wikisift.exceptions import ConfigurationError, InvalidQueryError
from wikisift.models.result import SearchResult
from wikisift.observability.logging import setup_logging
from wikisift.ui.formatters import (
    OUTPUT_FORMATS,
    build_result_details,
    build_results_table,
    build_status_table,
    format_json,
    format_plain,
)

logger = logging.getLogger(__name__)

LOCAL_CONFIG_PATH = Path("wikisift.yaml")
ISEARCH_LIMIT = 10
DETAIL_ACTIONS = ("o", "c", "s", "b", "q")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="wikisift",
        description="WikiSift — Search Wikipedia and JSON APIs from the terminal",
        epilog=(
            "examples:\n"
            '  wikisift search "Leonardo da Vinci"\n'
            '  wikisift search "Roma" --source wikipedia --limit 5\n'
            '  wikisift isearch "Galileo"\n'
            '  wikisift config enable "Wikipedia EN"\n'
            "  wikisift config create-profile work"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help=(
            f"Path to a YAML or JSON config file "
            f"(default: ./{LOCAL_CONFIG_PATH} if present, else the active profile)"
        ),
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error", "critical"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"WikiSift {_get_version()}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search the configured sources")
    search.add_argument("query", help="Text to search for")
    search.add_argument("--source", "-s", default=None, help="Only query sources whose name contains this text")
    search.add_argument("--limit", "-l", type=int, default=None, help="Maximum number of results")
    search.add_argument("--format", "-f", choices=OUTPUT_FORMATS, default=None, help="Output format")
    search.add_argument("--detailed", "-d", action="store_true", help="Show URL, relevance and full summaries")

    isearch = commands.add_parser("isearch", help="Search, then browse the results interactively")
    isearch.add_argument("query", help="Text to search for")
    isearch.add_argument("--source", "-s", default=None, help="Only query sources whose name contains this text")

    commands.add_parser("status", help="Check which sources are reachable")
    commands.add_parser("sources", help="List configured sources")

    config = commands.add_parser("config", help="Manage configuration files and profiles")
    config_commands = config.add_subparsers(dest="config_command", required=True)
    config_commands.add_parser("show", help="Show the current configuration")
    init = config_commands.add_parser("init", help="Write the default configuration")
    init.add_argument("--force", action="store_true", help="Overwrite an existing file")
    enable = config_commands.add_parser("enable", help="Enable a source")
    enable.add_argument("name", help="Exact source name (case-insensitive)")
    disable = config_commands.add_parser("disable", help="Disable a source")
    disable.add_argument("name", help="Exact source name (case-insensitive)")
    config_commands.add_parser("list-profiles", help="List the profiles in the config directory")
    create = config_commands.add_parser("create-profile", help="Create a profile holding the defaults")
    create.add_argument("name", help="Profile name")
    set_file = config_commands.add_parser("set-file", help="Make a profile the active one")
    set_file.add_argument("name", help="Profile name")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    profiles = ProfileStore()

    try:
        config_path = resolve_config_path(args.config, profiles)
        settings = _load_settings(config_path, explicit=args.config is not None)
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.log_level:
        settings.app.log_level = args.log_level
    setup_logging(settings.app.log_level, settings.app.log_format)

    console = Console()
    try:
        if args.command == "search":
            return _search(console, settings, args)
        if args.command == "isearch":
            return _isearch(console, settings, args)
        if args.command == "status":
            return asyncio.run(_status(console, settings))
        if args.command == "sources":
            return _sources(console, settings)
        return _config(console, settings, config_path, profiles, args)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130


def resolve_config_path(explicit: Path | None, profiles: ProfileStore) -> Path:
    """Pick the config file: --config, then ./wikisift.yaml, then the active profile."""
    if explicit is not None:
        return explicit
    if LOCAL_CONFIG_PATH.exists():
        return LOCAL_CONFIG_PATH
    return profiles.current_path()


def _load_settings(path: Path, explicit: bool) -> Settings:
    if path.exists():
        return Settings.from_file(path)
    if explicit:
        raise FileNotFoundError(f"Config file not found: {path}")
    return Settings()


async def _run_search(settings: Settings, query: str, source: str | None, limit: int | None) -> list[SearchResult]:
    from wikisift.core.engine import SearchEngine

    engine = SearchEngine(settings)
    await engine.initialize()
    try:
        return await engine.search(query, source=source, limit=limit)
    finally:
        await engine.shutdown()


def _search(console: Console, settings: Settings, args: argparse.Namespace) -> int:
    try:
        results = asyncio.run(_run_search(settings, args.query, args.source, args.limit))
    except InvalidQueryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output_format = args.format or settings.app.output_format
    if output_format == "json":
        sys.stdout.write(format_json(results) + "\n")
    elif not results:
        console.print("No results found.")
    elif output_format == "plain":
        sys.stdout.write(format_plain(results, detailed=args.detailed) + "\n")
    else:
        console.print(build_results_table(results, detailed=args.detailed))
    return 0


# ── Interactive search ───────────────────────────────────────────────────────


def _isearch(console: Console, settings: Settings, args: argparse.Namespace) -> int:
    query: str | None = args.query
    while query is not None:
        console.print(f'Searching for "{query}"...', markup=False)
        try:
            results = asyncio.run(_run_search(settings, query, args.source, ISEARCH_LIMIT))
        except InvalidQueryError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if not results:
            console.print("No results found.")
            return 0
        try:
            query = _browse_results(console, results)
        except EOFError:
            query = None
    console.print("Goodbye.")
    return 0


def _browse_results(console: Console, results: list[SearchResult]) -> str | None:
    """Let the user pick results to inspect.

    Returns:
        A new query when the user asks for a related search, None to quit.
    """
    while True:
        console.print(build_results_table(results))
        choice = Prompt.ask(f"Select a result (1-{len(results)}) or 'q' to quit", console=console).strip().lower()
        if choice == "q":
            return None
        if not choice.isdigit() or not 1 <= int(choice) <= len(results):
            console.print(f"Invalid selection, enter a number from 1 to {len(results)} or 'q'.", markup=False)
            continue

        action, query = _inspect_result(console, results[int(choice) - 1])
        if action == "q":
            return None
        if action == "s":
            return query


def _inspect_result(console: Console, result: SearchResult) -> tuple[str, str | None]:
    """Show one result and run the actions picked for it.

    Returns:
        The closing action ("b", "q" or "s") and, for "s", the new query.
    """
    console.print(build_result_details(result))
    console.print("o: open URL  c: copy URL  s: search related  b: back  q: quit", markup=False)
    while True:
        action = Prompt.ask("Action", choices=list(DETAIL_ACTIONS), default="b", console=console)
        if action == "o":
            _open_url(console, result.url)
        elif action == "c":
            _copy_url(console, result.url)
        elif action == "s":
            return action, _ask_related_query(console, result)
        else:
            return action, None


def _open_url(console: Console, url: str | None) -> None:
    if not url:
        console.print("URL not available.")
        return
    if webbrowser.open(url):
        console.print(f"Opened {url}", markup=False)
    else:
        console.print(f"Could not open a browser, visit {url}", markup=False)


def _copy_url(console: Console, url: str | None) -> None:
    if not url:
        console.print("URL not available.")
        return
    console.print("Copy the URL below:")
    console.print(url, markup=False, highlight=False, soft_wrap=True)


def _ask_related_query(console: Console, result: SearchResult) -> str:
    keywords = [word.strip(".,;:()[]\"'") for word in result.title.split()]
    keywords = [word for word in keywords if len(word) > 3]
    if keywords:
        console.print(f"Keywords: {', '.join(keywords)}", markup=False)
    return Prompt.ask("New search", default=result.title, console=console)


# ── Other commands ───────────────────────────────────────────────────────────


async def _status(console: Console, settings: Settings) -> int:
    from wikisift.core.engine import SearchEngine

    engine = SearchEngine(settings)
    await engine.initialize()
    try:
        status = await engine.source_status()
    finally:
        await engine.shutdown()

    console.print(build_status_table(status))
    return 0


def _sources(console: Console, settings: Settings) -> int:
    for source in settings.sources:
        state = "enabled" if source.enabled else "disabled"
        console.print(f"{source.name} [{source.language}] {source.type.value}: {state}", markup=False)
    for custom in settings.custom_api_sources:
        state = "enabled" if custom.enabled else "disabled"
        console.print(f"{custom.name} [{custom.language}] custom api: {state}", markup=False)
    return 0


def _config(
    console: Console,
    settings: Settings,
    path: Path,
    profiles: ProfileStore,
    args: argparse.Namespace,
) -> int:
    if args.config_command in ("list-profiles", "create-profile", "set-file"):
        return _profiles(console, profiles, args)

    if args.config_command == "show":
        app = settings.app
        console.print(f"Config file: {path if path.exists() else '(defaults)'}", markup=False, soft_wrap=True)
        console.print(f"Profile: {profiles.current_profile()} (in {profiles.directory})", markup=False, soft_wrap=True)
        console.print(
            f"max_results={app.max_results} timeout={app.timeout_seconds}s "
            f"caching={'on' if app.enable_caching else 'off'} log_level={app.log_level} "
            f"output_format={app.output_format}",
            markup=False,
        )
        return _sources(console, settings)

    if args.config_command == "init":
        if path.exists() and not args.force:
            print(f"Error: {path} already exists (use --force to overwrite)", file=sys.stderr)
            return 1
        Settings(_env_file=None).to_file(path)  # type: ignore[call-arg]
        console.print(f"Default configuration written to {path}", markup=False, soft_wrap=True)
        return 0

    enabled = args.config_command == "enable"
    if not settings.set_source_enabled(args.name, enabled):
        print(f"Error: source '{args.name}' not found", file=sys.stderr)
        return 1
    settings.to_file(path)
    console.print(f"Source '{args.name}' {'enabled' if enabled else 'disabled'} in {path}", markup=False, soft_wrap=True)
    return 0


def _profiles(console: Console, profiles: ProfileStore, args: argparse.Namespace) -> int:
    try:
        if args.config_command == "create-profile":
            path = profiles.create_profile(args.name)
            console.print(f"Profile '{args.name}' created at {path}", markup=False, soft_wrap=True)
        elif args.config_command == "set-file":
            path = profiles.set_current(args.name)
            console.print(f"Active profile: {args.name} ({path})", markup=False, soft_wrap=True)
        else:
            names = profiles.list_profiles()
            if not names:
                console.print(f"No profiles in {profiles.directory}", markup=False, soft_wrap=True)
                return 0
            current = profiles.current_profile()
            console.print(f"Profiles in {profiles.directory}:", markup=False, soft_wrap=True)
            for name in names:
                marker = "*" if name == current else " "
                console.print(f"{marker} {name}", markup=False)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def _get_version() -> str:
    """Get the package version."""
    from wikisift import __version__

    return __version__


if __name__ == "__main__":
    sys.exit(main())
