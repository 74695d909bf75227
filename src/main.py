# src/main.py - v2
"""CLI entry point: run, keys commands.

Usage:
    cachedirs [run] [options]
    cachedirs keys [options]

Inputs come from ``INPUT_*`` environment variables (as set by the CI runner)
and may be overridden with flags. Tool settings come from ``CACHEDIRS_*``
variables.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from cachedirs.version import __version__

logger = logging.getLogger(__name__)


_COMMANDS = ("run", "keys")
_TOP_LEVEL_FLAGS = ("-h", "--help", "--version")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(_with_default_command(sys.argv[1:] if argv is None else argv))

    try:
        from cachedirs.config.settings import load_settings

        settings = load_settings()
    except Exception as exc:
        _setup_logging("DEBUG" if args.verbose else "INFO", "github")
        logger.error("Invalid settings: %s", exc)
        return 1

    _setup_logging("DEBUG" if args.verbose else settings.log_level, settings.log_format)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("%s", exc, exc_info=args.verbose)
        return 1


def _with_default_command(argv: list[str]) -> list[str]:
    """Insert the default 'run' command when none is given."""
    if any(arg in _COMMANDS or arg in _TOP_LEVEL_FLAGS for arg in argv):
        return argv
    return ["run", *argv]


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="cachedirs",
        description=f"cachedirs v{__version__} - content-addressed directory cache for CI",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- run ---
    p_run = subparsers.add_parser(
        "run", help="Restore cached paths, saving them on a miss (default)",
    )
    _add_input_arguments(p_run)
    p_run.set_defaults(func=_cmd_run)

    # --- keys ---
    p_keys = subparsers.add_parser(
        "keys", help="Print the cache key of every path without touching the cache",
    )
    _add_input_arguments(p_keys)
    p_keys.set_defaults(func=_cmd_keys)

    return parser


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=argparse.SUPPRESS,
        help="Enable debug logging",
    )
    parser.add_argument(
        "--cache-paths", default=None,
        help="';'-separated paths to cache (input cache-paths)",
    )
    parser.add_argument(
        "--key-template", default=None,
        help="Key template with {name} placeholders (input key-template)",
    )
    parser.add_argument(
        "--invalidation-pattern", default=None,
        help="Trigger file pattern (input cache-invalidation-pattern)",
    )
    parser.add_argument(
        "--key", dest="keys", action="append", default=[], metavar="NAME=VALUE",
        help="Value for placeholder {NAME} (input key-NAME); repeatable",
    )


def _collect_overrides(args: argparse.Namespace) -> dict[str, str]:
    """Translate CLI flags into input overrides."""
    from cachedirs.config.settings import ConfigurationError

    overrides: dict[str, str] = {}
    if args.cache_paths is not None:
        overrides["cache-paths"] = args.cache_paths
    if args.key_template is not None:
        overrides["key-template"] = args.key_template
    if args.invalidation_pattern is not None:
        overrides["cache-invalidation-pattern"] = args.invalidation_pattern
    for item in args.keys:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise ConfigurationError(f"--key expects NAME=VALUE, got {item!r}")
        overrides[f"key-{name.strip()}"] = value
    return overrides


def _build_orchestrator(args: argparse.Namespace, settings):
    from cachedirs.cache.cache_factory import create_cache_store
    from cachedirs.config.inputs import ActionInputs, load_cache_configuration
    from cachedirs.pipeline.orchestrator import CacheOrchestrator

    config = load_cache_configuration(ActionInputs(overrides=_collect_overrides(args)))
    return CacheOrchestrator(create_cache_store(settings), settings), config


async def _cmd_run(args: argparse.Namespace, settings) -> int:
    """Restore or save every configured cache path."""
    orchestrator, config = _build_orchestrator(args, settings)
    report = await orchestrator.run(config)
    if not report.skipped:
        hits = sum(1 for o in report.outcomes if o.status == "hit")
        logger.debug("%d hit(s), %d save(s)", hits, len(report.outcomes) - hits)
    return 0


async def _cmd_keys(args: argparse.Namespace, settings) -> int:
    """Print the key of every cache path."""
    orchestrator, config = _build_orchestrator(args, settings)
    for path, key in (await orchestrator.plan(config)).items():
        print(f"{path}\t{key}")
    return 0


def _setup_logging(level: str, log_format: str) -> None:
    """Configure logging for CLI usage."""
    from cachedirs.logging.logger import setup_logging

    setup_logging(level=level, log_format=log_format)
    # Quiet noisy libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)


def run_cli() -> None:  # pragma: no cover
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    run_cli()
