"""Command line entry point.

Usage:
    hr-admin serve
    hr-admin create-schema
    hr-admin reconcile-counts
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Callable

import uvicorn

from hr_admin.config import get_settings
from hr_admin.database import create_schema, dispose_db, get_session
from hr_admin.services.cascade import CascadeOutcome, DepartmentCountCascade

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hr-admin",
        description="HR admin engine operational tools",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, help="Bind address (default: HOST)")
    serve.add_argument("--port", type=int, help="Bind port (default: PORT)")

    subparsers.add_parser("create-schema", help="Create missing database tables")
    subparsers.add_parser(
        "reconcile-counts",
        help="Recompute every department's active employee count",
    )
    return parser


def _cmd_serve(args: argparse.Namespace) -> int:
    settings = get_settings()
    uvicorn.run(
        "hr_admin.api.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
    return 0


async def _create_schema() -> None:
    try:
        await create_schema()
    finally:
        await dispose_db()


def _cmd_create_schema(args: argparse.Namespace) -> int:
    asyncio.run(_create_schema())
    print("Schema created")
    return 0


async def _reconcile() -> CascadeOutcome:
    try:
        async with get_session() as session:
            return await DepartmentCountCascade(session).reconcile_all()
    finally:
        await dispose_db()


def _cmd_reconcile_counts(args: argparse.Namespace) -> int:
    outcome = asyncio.run(_reconcile())
    for department_id, count in outcome.counts.items():
        print(f"{department_id}: {count}")
    for warning in outcome.warnings:
        print(f"WARNING: {warning}", file=sys.stderr)
    return 0 if outcome.ok else 2


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = _build_parser()
    parsed = parser.parse_args(argv)
    if not parsed.command:
        parser.print_help()
        return 1

    handlers: dict[str, Callable[[argparse.Namespace], int]] = {
        "serve": _cmd_serve,
        "create-schema": _cmd_create_schema,
        "reconcile-counts": _cmd_reconcile_counts,
    }
    return handlers[parsed.command](parsed)


if __name__ == "__main__":
    sys.exit(main())
