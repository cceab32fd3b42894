"""Utility script to produce notification digests outside the API process."""

from __future__ import annotations

import argparse
import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from digest_api.application.scheduler import SummaryPassReport, build_summary_scheduler
from digest_api.application.use_cases.notifications import SummaryError, compose_summary
from digest_api.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the digest runner."""

    parser = argparse.ArgumentParser(
        description="Compose a digest for one user or run a single scheduler pass.",
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--user",
        dest="username",
        help="Username to summarize immediately, ignoring the daily schedule",
    )
    group.add_argument(
        "--pass",
        dest="run_pass",
        action="store_true",
        help=(
            "Run one scheduler pass for every due subscriber. This takes over the "
            "day's delivery, so the API scheduler skips those users until tomorrow. "
            "Clients get these digests in the unread list on their next websocket "
            "connect instead of as a live push"
        ),
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


def _summarize_user(username: str) -> None:
    session = SessionLocal()
    try:
        outcome = compose_summary(session, username)
    except (SummaryError, SQLAlchemyError) as exc:
        raise SystemExit(f"Could not summarize {username}: {exc}") from exc
    finally:
        session.close()

    if outcome.notification is not None:
        print(f"Created notification {outcome.notification.id}: {outcome.notification.message}")
    else:
        print(f"No digest created for {username}: {outcome.status.value}")


async def _pass_and_drain() -> SummaryPassReport:
    # No websocket connections live in this process, so pushes reach nobody.
    scheduler = build_summary_scheduler()
    report = await scheduler.run_pass()
    await scheduler.drain()
    return report


def _run_pass() -> None:
    report = asyncio.run(_pass_and_drain())
    if report.skipped:
        raise SystemExit("Database unavailable, pass skipped")
    print(
        f"Due: {report.due}, sent: {len(report.sent)}, empty: {len(report.empty)}, "
        f"failed: {len(report.failed)}, timed out: {len(report.timed_out)}"
    )


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    initialize_database()
    if args.username:
        _summarize_user(args.username)
    else:
        _run_pass()


if __name__ == "__main__":
    main()
