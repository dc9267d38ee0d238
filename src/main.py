# src/main.py - v1
"""CLI entry point: analyze and clear-cache commands.

Usage:
    labeliq analyze <image> [--profile profile.json] [-o result.json]
    labeliq clear-cache
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from labeliq.config.settings import ConfigurationError
from labeliq.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
    except (ValidationError, ConfigurationError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="labeliq",
        description=f"LabelIQ v{__version__} - ingredient label analyzer",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--env-file", type=Path, default=None,
        help="Settings file (default: .env in the working directory)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- analyze ---
    p_analyze = subparsers.add_parser("analyze", help="Analyze one label photo")
    p_analyze.add_argument("image", type=Path, help="Path to the label image")
    p_analyze.add_argument(
        "-p", "--profile", type=Path, default=None,
        help="JSON user profile (allergies, dietaryRestrictions, healthGoals, sensitivityLevel)",
    )
    p_analyze.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write the result JSON here instead of stdout",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- clear-cache ---
    p_clear = subparsers.add_parser(
        "clear-cache", help="Remove every persisted provider response",
    )
    p_clear.set_defaults(func=_cmd_clear_cache)

    return parser


def _load_settings(args: argparse.Namespace):
    from labeliq.config.settings import Settings

    if args.env_file is not None:
        return Settings(_env_file=args.env_file)  # type: ignore[call-arg]
    return Settings()


def _setup_logging(settings, verbose: bool) -> None:
    from labeliq.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format="text" if settings.log_format == "text" or verbose else "json",
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


async def _cmd_analyze(args: argparse.Namespace, settings) -> int:
    """Run the pipeline on one image and print the result."""
    from labeliq.api.facade import analyze
    from labeliq.core.errors import NoTextFound, ProviderError
    from labeliq.core.models import UserProfile

    if not args.image.is_file():
        logger.error("Image not found: %s", args.image)
        return 1

    profile = UserProfile()
    if args.profile is not None:
        profile = UserProfile.model_validate_json(args.profile.read_text(encoding="utf-8"))

    try:
        result = await analyze(args.image.read_bytes(), profile, settings=settings)
    except NoTextFound:
        logger.error("No ingredient text found in %s", args.image)
        return 3
    except ProviderError as exc:
        logger.error("Analysis failed in stage %s: %s", exc.stage, exc)
        return 4

    payload = result.model_dump_json(by_alias=True, indent=2)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload, encoding="utf-8")
        logger.info("Result written to %s", args.output)
    else:
        print(payload)
    return 0


async def _cmd_clear_cache(args: argparse.Namespace, settings) -> int:
    """Empty the configured cache backend."""
    from labeliq.cache.cache_factory import create_cache_store

    store = create_cache_store(settings)
    before = store.size()
    await store.clear()
    print(json.dumps({"backend": settings.cache_backend, "removed": before}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
