"""Command-line front end for the tracking client.

Usage:
    python -m usertrack init
    python -m usertrack track flight_search --vertical flight
    python -m usertrack track ad_click --attr gclid=abc --attr campaign_id=42
    python -m usertrack info
    python -m usertrack clear
"""

import argparse
import asyncio
import json
import sys

from usertrack.config import get_settings
from usertrack.logging import setup_logging
from usertrack.manager import SessionManager, build_session_manager
from usertrack.models import EventType, ManagerState, Vertical


def _parse_attr(value: str) -> tuple[str, str]:
    key, sep, item = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    return key, item


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="usertrack", description="Install identity and event tracking"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create or resume the user and report an app launch")

    track = sub.add_parser("track", help="Report an event for the current user")
    track.add_argument("event", choices=[e.value for e in EventType])
    track.add_argument(
        "--vertical", choices=[v.value for v in Vertical], default=Vertical.FLIGHT.value
    )
    track.add_argument("--tag", type=str, help="Override the default tag")
    track.add_argument(
        "--attr",
        type=_parse_attr,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Attribution field (repeatable)",
    )

    sub.add_parser("info", help="Show stored user and app details")
    sub.add_parser("clear", help="Forget the user; device identifiers are kept")
    return parser


async def run(manager: SessionManager, args: argparse.Namespace) -> int:
    if args.command == "init":
        state = await manager.initialize()
        await manager.wait_for_pending()
        print(json.dumps({"state": state.value, "user_id": manager.user_id}))
        return 0 if state == ManagerState.USER_READY else 1

    if args.command == "track":
        result = await manager.create_session(
            EventType(args.event),
            Vertical(args.vertical),
            tag=args.tag,
            attribution=dict(args.attr) or None,
        )
        if not result.success:
            print(json.dumps(result.error.to_dict()), file=sys.stderr)
            return 1
        print(json.dumps(result.value.model_dump()))
        return 0

    if args.command == "info":
        info = manager.app_info()
        install_date = manager.install_date
        info.update(
            {
                "user_id": manager.user_id,
                "is_valid_user": manager.is_valid_user,
                "install_date": install_date.isoformat() if install_date else None,
            }
        )
        print(json.dumps(info, indent=2))
        return 0

    manager.clear_user_data()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings)
    manager = build_session_manager(settings)
    return asyncio.run(run(manager, args))
