"""
Display status of tasks relative to the wall clock

Status is never stored. It is worked out from the task and the time passed
in, so a task turns overdue on the next show or render after its hour ends.
"""
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .dates import DateKey
from .models import Task


class DisplayStatus(str, Enum):
    OVERDUE = "overdue"
    COMPLETE = "complete"
    PENDING = "pending"


def current_slot(now: datetime) -> Tuple[DateKey, int]:
    """The (date, hour) slot containing now"""
    return DateKey.from_date(now), now.hour


def resolve(task: Task, now: datetime) -> DisplayStatus:
    """
    Work out how a task should be displayed

    A task due in the current hour is still pending; it becomes overdue
    once the hour is over.
    """
    if task.done:
        return DisplayStatus.COMPLETE
    if (task.date, task.hour) < current_slot(now):
        return DisplayStatus.OVERDUE
    return DisplayStatus.PENDING


def slot_status(tasks: Iterable[Task], now: datetime) -> Optional[DisplayStatus]:
    """
    Combined status of the tasks sharing one slot

    Any overdue task makes the slot overdue; a slot is complete only when
    every task in it is. Empty slots have no status.
    """
    statuses: List[DisplayStatus] = [resolve(task, now) for task in tasks]
    if not statuses:
        return None
    if DisplayStatus.OVERDUE in statuses:
        return DisplayStatus.OVERDUE
    if all(s is DisplayStatus.COMPLETE for s in statuses):
        return DisplayStatus.COMPLETE
    return DisplayStatus.PENDING
