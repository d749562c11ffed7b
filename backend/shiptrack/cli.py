"""Management CLI.

Usage:
    python -m shiptrack.cli create-tables                 # Create tables from the models (dev only; use Alembic elsewhere)
    python -m shiptrack.cli issue-token <subject> [--role admin] [--minutes 60]
    python -m shiptrack.cli new-tracking-number           # Print a candidate tracking number
"""

import argparse
import asyncio
import sys
from datetime import timedelta

from shiptrack.auth.jwt import create_access_token
from shiptrack.config import settings
from shiptrack.database import Base, engine
from shiptrack.models import *  # noqa: F401,F403  register every table on Base.metadata
from shiptrack.utils.tracking_number import generate_tracking_number


async def _create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


def create_tables(_args: argparse.Namespace) -> None:
    asyncio.run(_create_tables())
    print(f"Created: {', '.join(sorted(Base.metadata.tables))}")


def issue_token(args: argparse.Namespace) -> None:
    token = create_access_token(
        subject=args.subject,
        role=args.role,
        expires_delta=timedelta(minutes=args.minutes),
    )
    print(token)


def new_tracking_number(_args: argparse.Namespace) -> None:
    print(generate_tracking_number(settings.tracking_prefix))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shiptrack")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("create-tables").set_defaults(func=create_tables)

    token = sub.add_parser("issue-token", help="Mint a development access token")
    token.add_argument("subject")
    token.add_argument("--role", default="admin")
    token.add_argument("--minutes", type=int, default=settings.access_token_expire_minutes)
    token.set_defaults(func=issue_token)

    sub.add_parser("new-tracking-number").set_defaults(func=new_tracking_number)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    args.func(args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
