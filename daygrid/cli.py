import argparse
import asyncio
import sys
from datetime import date

from daygrid.config import settings
from daygrid.day_view import DayScheduleView
from daygrid.logging_config import setup_logging
from daygrid.store import HttpScheduleStore


def _parse_day(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {raw}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="daygrid", description="Print the salon day grid")
    parser.add_argument("--day", type=_parse_day, default=date.today(), help="YYYY-MM-DD (default: today)")
    parser.add_argument("--api", default=settings.API_BASE_URL, help="salon store base URL")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    return parser


async def _show(day: date, api: str) -> int:
    async with HttpScheduleStore(base_url=api) as store:
        view = DayScheduleView(store, day=day)
        ok = await view.enter()
        for note in view.pop_notifications():
            print(f"[{note.level}] {note.message}", file=sys.stderr)
        print(view.render())
        view.close()
        return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level.upper())
    return asyncio.run(_show(args.day, args.api))
