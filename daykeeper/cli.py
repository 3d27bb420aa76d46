"""
Command line entry point

    daykeeper add today 9 write report
    daykeeper mark today 9
    daykeeper show count 3
    daykeeper render today ~/wallpaper.png --set-wallpaper
"""
import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from . import __version__
from .config import get_data_dir, load_settings, tasks_file
from .dates import DateKey, looks_like_date, parse_hour, parse_slot
from .display import GREEN, RED, YELLOW, color, color_enabled, format_days
from .errors import InvalidArguments, KeeperError
from .logging_setup import setup_logging
from .storage import TaskStore
from .wallpaper_generator import default_output_path, generate_wallpaper, prune_renders
from .wallpaper_setter import set_wallpaper

logger = logging.getLogger(__name__)

DATE_FORMS = "(dd-mm-yy|today|tomorrow|yesterday)"


def help_text(colors: bool = False) -> str:
    def y(text):
        return color(text, YELLOW, colors)

    def g(text):
        return color(text, GREEN, colors)

    return f"""\
daykeeper {__version__}
{y("help")}:
    daykeeper help
{y("add")}:
    daykeeper add {g(DATE_FORMS)} hour desc...
{y("mark")}:
    daykeeper mark {g(DATE_FORMS)} {g("(hour.index|hour)")}
{y("change")}:
    daykeeper change {g(DATE_FORMS)} {g("(hour.index|hour)")} new-hour
{y("show")}:
    daykeeper show {g(DATE_FORMS)}
    daykeeper show count N
    daykeeper show
{y("render")}:
    daykeeper render {g(DATE_FORMS)} [output.png] [--set-wallpaper]
    daykeeper render count N [output.png] [--set-wallpaper]
    daykeeper render

A bare hour means index 0 of that hour. show and render default to today."""


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad input"""

    def error(self, message):
        raise InvalidArguments(message)


@dataclass
class Context:
    store: TaskStore
    settings: Dict
    data_dir: Path
    now: datetime


# ============================================================================
# ARGUMENT HELPERS
# ============================================================================

def _parse_count(text: str) -> int:
    try:
        count = int(text)
    except ValueError:
        raise InvalidArguments(f"count must be a number, got [{text}]") from None
    if count < 1:
        raise InvalidArguments(f"count must be at least 1, got [{count}]")
    return count


def parse_show_args(args: List[str], now: datetime) -> Tuple[DateKey, int]:
    """
    show arguments to (start, count)

    Nothing means today; `count N` and a bare number N mean N days from today.
    """
    today = DateKey.from_date(now)
    if not args:
        return today, 1
    if args[0] == "count":
        if len(args) != 2:
            raise InvalidArguments("expecting: show count N")
        return today, _parse_count(args[1])
    if len(args) != 1:
        raise InvalidArguments(f"too many arguments to show: {' '.join(args)}")
    if args[0].isdigit():
        return today, _parse_count(args[0])
    return DateKey.parse(args[0], now), 1


def parse_render_args(args: List[str], now: datetime) -> Tuple[DateKey, int, Optional[Path]]:
    """
    render arguments to (start, count, output path or None)

    The date defaults to today and the path to a fresh file in the output
    directory.
    """
    today = DateKey.from_date(now)
    rest = list(args)
    start, count = today, 1

    if rest and rest[0] == "count":
        if len(rest) < 2:
            raise InvalidArguments("expecting: render count N [output.png]")
        count = _parse_count(rest[1])
        rest = rest[2:]
    elif rest and looks_like_date(rest[0]):
        start = DateKey.parse(rest[0], now)
        rest = rest[1:]

    if len(rest) > 1:
        raise InvalidArguments(f"too many arguments to render: {' '.join(args)}")
    output = Path(rest[0]).expanduser() if rest else None
    return start, count, output


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_help(args, ctx: Context) -> int:
    print(help_text(color_enabled(sys.stdout)))
    return 0


def cmd_add(args, ctx: Context) -> int:
    date = DateKey.parse(args.date, ctx.now)
    hour = parse_hour(args.hour)
    description = " ".join(args.description).strip()
    if not description:
        raise InvalidArguments("no desc provided to add")

    ctx.store.add(date, hour, description, now=ctx.now)
    index = len(ctx.store.slot(date, hour)) - 1
    print(f"Added {date} {hour:02d}.{index}: {description}")
    return 0


def cmd_mark(args, ctx: Context) -> int:
    date = DateKey.parse(args.date, ctx.now)
    hour, index = parse_slot(args.slot)
    task = ctx.store.mark(date, hour, index)
    print(f"Marked {date} {hour:02d}.{index} complete: {task.description}")
    return 0


def cmd_change(args, ctx: Context) -> int:
    date = DateKey.parse(args.date, ctx.now)
    hour, index = parse_slot(args.slot)
    new_hour = parse_hour(args.new_hour)
    task = ctx.store.change(date, hour, index, new_hour)
    new_index = len(ctx.store.slot(date, new_hour)) - 1
    print(f"Moved {date} {hour:02d}.{index} to {new_hour:02d}.{new_index}: {task.description}")
    return 0


def cmd_show(args, ctx: Context) -> int:
    start, count = parse_show_args(args.args, ctx.now)
    days = ctx.store.tasks_for_range(start, count)
    print(format_days(days, ctx.now, colors=color_enabled(sys.stdout)))
    return 0


def cmd_render(args, ctx: Context) -> int:
    start, count, output = parse_render_args(args.args, ctx.now)
    default_path = output is None
    if default_path:
        output = default_output_path(ctx.data_dir, ctx.now, ctx.settings)

    written = generate_wallpaper(ctx.store, start, count, ctx.now, output, ctx.settings)
    logger.info("Rendered %d day(s) from %s to %s", count, start, written)
    print(written)

    if args.set_wallpaper and not set_wallpaper(str(written)):
        raise KeeperError(f"rendered {written} but could not set it as the wallpaper")

    if default_path:
        prune_renders(ctx.data_dir, written, ctx.settings)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="daykeeper", add_help=False,
                     description="Hour-by-hour task tracking with a wallpaper view.")
    parser.add_argument("--data-dir", default=None,
                        help="where tasks, settings and renders live (default $DAYKEEPER_HOME)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress to stderr")
    parser.set_defaults(func=cmd_help)

    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("help")
    p.set_defaults(func=cmd_help)

    p = sub.add_parser("add")
    p.add_argument("date")
    p.add_argument("hour")
    p.add_argument("description", nargs=argparse.REMAINDER)
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("mark")
    p.add_argument("date")
    p.add_argument("slot")
    p.set_defaults(func=cmd_mark)

    p = sub.add_parser("change")
    p.add_argument("date")
    p.add_argument("slot")
    p.add_argument("new_hour")
    p.set_defaults(func=cmd_change)

    p = sub.add_parser("show")
    p.add_argument("args", nargs="*")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("render")
    p.add_argument("args", nargs="*")
    p.add_argument("--set-wallpaper", action="store_true",
                   help="make the rendered image the desktop background")
    p.set_defaults(func=cmd_render)

    return parser


def _report(error: KeeperError) -> None:
    label = color("ERROR", RED, color_enabled(sys.stderr))
    print(f"{label} {error}", file=sys.stderr)


def main(argv: Optional[List[str]] = None, now: Optional[datetime] = None) -> int:
    try:
        args = build_parser().parse_args(argv)
    except KeeperError as e:
        _report(e)
        return e.exit_code

    data_dir = get_data_dir(args.data_dir)
    setup_logging(log_dir=data_dir, console_level=logging.INFO if args.verbose else logging.WARNING)

    try:
        settings = load_settings(data_dir)
        ctx = Context(
            store=TaskStore(tasks_file(data_dir), git_history=bool(settings["git_history"])),
            settings=settings,
            data_dir=data_dir,
            now=now or datetime.now(),
        )
        return args.func(args, ctx)
    except KeeperError as e:
        logger.debug("%s failed", args.command, exc_info=True)
        _report(e)
        return e.exit_code


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
