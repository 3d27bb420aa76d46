"""
Terminal output for the show command

Colors are used only on a TTY; NO_COLOR disables them and FORCE_COLOR=1
turns them on for pipes.
"""
import os
import sys
from datetime import datetime
from typing import List, Optional, Sequence, TextIO, Tuple

from .dates import DateKey
from .models import Task
from .status import DisplayStatus, resolve
from .storage import group_by_hour

RESET = "\033[0m"
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[0;33m"

STATUS_STYLE = {
    DisplayStatus.COMPLETE: (GREEN, "[x]"),
    DisplayStatus.OVERDUE: (RED, "[!]"),
    DisplayStatus.PENDING: (YELLOW, "[ ]"),
}


def color_enabled(stream: Optional[TextIO] = None) -> bool:
    """Whether ANSI colors should be written to stream"""
    if os.environ.get("NO_COLOR") is not None:
        return False
    if os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}:
        return True
    stream = stream or sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


def color(text: str, style: str, enabled: bool) -> str:
    if not enabled:
        return text
    return style + text + RESET


def format_day(date: DateKey, tasks: Sequence[Task], now: datetime, colors: bool = False) -> str:
    """
    One day as text: a heading, then a line per task

        15 Jun 2024
          09.0 [x] write report
    """
    lines = [date.label()]
    if not tasks:
        lines.append("Empty")
        return "\n".join(lines)

    for hour, slot in group_by_hour(tasks).items():
        for index, task in enumerate(slot):
            style, marker = STATUS_STYLE[resolve(task, now)]
            lines.append(f"  {color(f'{hour:02d}.{index}', style, colors)} "
                         f"{color(marker, style, colors)} {task.description}")
    return "\n".join(lines)


def format_days(days: Sequence[Tuple[DateKey, Sequence[Task]]], now: datetime,
                colors: bool = False) -> str:
    """Several days separated by a blank line"""
    blocks: List[str] = [format_day(date, tasks, now, colors) for date, tasks in days]
    return "\n\n".join(blocks)
