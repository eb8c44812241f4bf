"""
Module: cli.py
Description: Operator commands for the persisted action log queue.

Inspects, replays, or resets the offline queue stored in the configured
queue directory, and can record a one-off action for smoke testing.

Usage:
    actionlog-queue status
    actionlog-queue record --user user@example.com --action page_visit --extra '{"page": "/events"}'
    actionlog-queue drain
    actionlog-queue clear --yes
"""

import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

from actionlog.config.settings import settings
from actionlog.delivery.queue import DeliveryQueue
from actionlog.storage.local import FileStorage
from actionlog.utils.logger import get_logger

logger = get_logger(__name__)


def build_queue(args: argparse.Namespace) -> DeliveryQueue:
    return DeliveryQueue(
        args.endpoint or settings.log_endpoint,
        args.fallback or settings.fallback_endpoint,
        storage=FileStorage(args.queue_dir or settings.queue_dir),
        storage_key=settings.queue_key
    )


async def cmd_status(args: argparse.Namespace) -> int:
    queue = build_queue(args)
    try:
        print(json.dumps(queue.get_status().model_dump(), indent=2))
        if args.verbose:
            for entry in queue.entries:
                print(json.dumps(entry.to_wire()))
    finally:
        await queue.close()
    return 0


async def cmd_record(args: argparse.Namespace) -> int:
    try:
        extra = json.loads(args.extra) if args.extra else {}
    except json.JSONDecodeError as e:
        print(f"ERROR: --extra is not valid JSON: {e}")
        return 2

    queue = build_queue(args)
    try:
        result = await queue.record(args.user, args.action, extra)
    finally:
        await queue.close()

    print(json.dumps(result.model_dump(exclude={'entry'})))
    return 0 if result.delivered else 1


async def cmd_drain(args: argparse.Namespace) -> int:
    queue = build_queue(args)
    try:
        report = await queue.drain_queue()
    finally:
        await queue.close()

    if report is None:
        print("Nothing to drain")
        return 0
    print(json.dumps(report.model_dump()))
    return 0 if report.still_failed == 0 else 1


async def cmd_clear(args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear the queue without --yes")
        return 2

    queue = build_queue(args)
    try:
        dropped = queue.get_status().queued_count
        queue.clear_queue()
    finally:
        await queue.close()

    logger.warning("Operator cleared log queue", dropped=dropped)
    print(f"Cleared {dropped} queued entries")
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the offline action log queue")
    parser.add_argument("--endpoint", help="Primary collector URL (default: LOG_ENDPOINT)")
    parser.add_argument("--fallback", help="Fallback collector URL (default: FALLBACK_ENDPOINT)")
    parser.add_argument("--queue-dir", help="Queue directory (default: QUEUE_DIR)")

    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="Show queue status")
    status.add_argument("-v", "--verbose", action="store_true", help="Also print queued entries")
    status.set_defaults(func=cmd_status)

    record = sub.add_parser("record", help="Record one action")
    record.add_argument("--user", default=None, help="User identity (default: anonymous)")
    record.add_argument("--action", required=True, help="Action tag")
    record.add_argument("--extra", default=None, help="JSON payload")
    record.set_defaults(func=cmd_record)

    drain = sub.add_parser("drain", help="Replay queued entries now")
    drain.set_defaults(func=cmd_drain)

    clear = sub.add_parser("clear", help="Drop every queued entry")
    clear.add_argument("--yes", action="store_true", help="Confirm the reset")
    clear.set_defaults(func=cmd_clear)

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    return asyncio.run(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
