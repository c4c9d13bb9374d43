"""
keyrotator CLI — entry point for manual and cron-driven rotation.

Usage:
    keyrotator rotate <object-id>   # Rotate one application identity
    keyrotator rotate-all           # Rotate every identity tagged in the vault
    keyrotator version              # Show version
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from keyrotator.errors import ConfigurationError, VaultError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="keyrotator",
        description="Rotate application identity passwords and republish them to the vault.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # rotate
    rotate_parser = subparsers.add_parser("rotate", help="Rotate one application identity")
    rotate_parser.add_argument("object_id", help="Object id of the application identity")

    # rotate-all
    subparsers.add_parser("rotate-all", help="Rotate every identity tagged in the vault")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from keyrotator import __version__

        print(f"keyrotator {__version__}")
        return 0

    if args.command == "rotate":
        return _cmd_rotate(args)
    elif args.command == "rotate-all":
        return _cmd_rotate_all(args)
    else:
        parser.print_help()
        return 0


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _cmd_rotate(args: argparse.Namespace) -> int:
    object_id = args.object_id.strip()
    if not object_id:
        print("Error: an application object id is required")
        return 2
    _configure_logging(args.verbose)
    try:
        outcome = asyncio.run(_run(lambda engine: engine.rotate(object_id)))
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 2
    print(outcome)
    return 0 if outcome.ok else 1


def _cmd_rotate_all(args: argparse.Namespace) -> int:
    _configure_logging(args.verbose)
    try:
        summary = asyncio.run(_run(lambda engine: engine.rotate_all()))
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 2
    except VaultError as e:
        print(f"Error: {e.message}")
        return 1
    for outcome in summary.outcomes.values():
        print(outcome)
    print(
        f"{len(summary.completed)} completed, {len(summary.skipped)} skipped, "
        f"{len(summary.failed)} failed"
    )
    return 0 if summary.ok else 1


async def _run(action):
    from keyrotator.config import get_config
    from keyrotator.engine import build_engine

    engine, clients = build_engine(get_config(), logger=logging.getLogger("keyrotator"))
    try:
        return await action(engine)
    finally:
        for client in clients:
            await client.close()
