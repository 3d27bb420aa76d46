"""
Task storage and management module

Tasks live in one JSON file as a flat list. The order of that list is the
insertion order, so a task's index inside its (date, hour) slot is its
position among the tasks sharing that slot.
"""
import json
import logging
import os
import subprocess
import tempfile
from collections import OrderedDict
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from .dates import DateKey, check_hour, date_range
from .errors import InvalidDate, InvalidHour, NotFound, StorageFailure
from .models import Task

logger = logging.getLogger(__name__)


def load_tasks(path: Path) -> List[Task]:
    """Load all tasks from JSON file"""
    if not path.exists():
        return []

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return [Task.from_dict(raw) for raw in data.get("tasks", [])]
    except (json.JSONDecodeError, OSError) as e:
        raise StorageFailure(f"failed to read tasks from {path}: {e}") from e
    except (KeyError, ValueError, TypeError, AttributeError, InvalidDate, InvalidHour) as e:
        raise StorageFailure(f"malformed task data in {path}: {e}") from e


def save_tasks(path: Path, tasks: List[Task]) -> None:
    """Save tasks to JSON file, replacing the old file in one rename"""
    payload = {"tasks": [task.to_dict() for task in tasks]}
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="utf-8", delete=False,
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        ) as tmp:
            tmp_name = tmp.name
            json.dump(payload, tmp, indent=2, ensure_ascii=False)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise StorageFailure(f"failed to write tasks to {path}: {e}") from e


def group_by_hour(tasks: List[Task]) -> "OrderedDict[int, List[Task]]":
    """Group an hour-ordered task list into slots, keeping index order"""
    slots: "OrderedDict[int, List[Task]]" = OrderedDict()
    for task in tasks:
        slots.setdefault(task.hour, []).append(task)
    return slots


class TaskStore:
    """
    File-backed task collection

    Every mutation reads the file, applies the change and writes the whole
    file back before returning. A failed write leaves the old file in place.
    """

    def __init__(self, path: Path, git_history: bool = False):
        self.path = Path(path)
        self.git_history = git_history

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def load(self) -> List[Task]:
        return load_tasks(self.path)

    def tasks_for(self, date: DateKey) -> List[Task]:
        """All tasks on a date, ordered by hour then slot index"""
        day = [t for t in self.load() if t.date == date]
        # sort is stable, so insertion order survives within an hour
        day.sort(key=lambda t: t.hour)
        return day

    def tasks_for_range(self, start: DateKey, count: int) -> List[Tuple[DateKey, List[Task]]]:
        """Tasks for count consecutive dates starting at start"""
        tasks = self.load()
        result = []
        for date in date_range(start, count):
            day = sorted((t for t in tasks if t.date == date), key=lambda t: t.hour)
            result.append((date, day))
        return result

    def slot(self, date: DateKey, hour: int) -> List[Task]:
        """Tasks in one (date, hour) slot in index order"""
        check_hour(hour)
        return [t for t in self.load() if t.date == date and t.hour == hour]

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    def add(self, date: DateKey, hour: int, description: str,
            now: Optional[datetime] = None) -> str:
        """
        Add a new task at the end of its slot

        Args:
            now: Creation time recorded on the task, left blank when None

        Returns:
            The new task's ID
        """
        check_hour(hour)
        tasks = self.load()
        created_at = now.isoformat(timespec="seconds") if now else ""
        task = Task(date=date, hour=hour, description=description, created_at=created_at)
        tasks.append(task)
        self._commit(tasks, f"add {date} {hour} {description}")
        logger.info("Added task %s at %s %02d:00", task.id, date, hour)
        return task.id

    def mark(self, date: DateKey, hour: int, index: int) -> Task:
        """Mark a task complete. Marking a complete task again changes nothing."""
        tasks = self.load()
        task = self._find(tasks, date, hour, index)
        if task.done:
            logger.info("Task %s already complete", task.id)
            return task

        task.done = True
        self._commit(tasks, f"mark {date} {hour}.{index}")
        logger.info("Marked task %s complete", task.id)
        return task

    def change(self, date: DateKey, hour: int, index: int, new_hour: int) -> Task:
        """
        Move a task to another hour on the same date

        The task goes to the end of the destination slot; tasks left behind
        in the old slot close up so indices stay contiguous.
        """
        check_hour(new_hour)
        tasks = self.load()
        task = self._find(tasks, date, hour, index)

        tasks.remove(task)
        task.hour = new_hour
        tasks.append(task)

        self._commit(tasks, f"change {date} {hour}.{index} {new_hour}")
        logger.info("Moved task %s from %02d:00 to %02d:00", task.id, hour, new_hour)
        return task

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    @staticmethod
    def _find(tasks: List[Task], date: DateKey, hour: int, index: int) -> Task:
        check_hour(hour)
        slot = [t for t in tasks if t.date == date and t.hour == hour]
        if not slot:
            raise NotFound(f"no tasks at {date} hour {hour}")
        if not 0 <= index < len(slot):
            raise NotFound(
                f"no task {hour}.{index} on {date} (slot has {len(slot)} task(s))"
            )
        return slot[index]

    def _commit(self, tasks: List[Task], message: str) -> None:
        save_tasks(self.path, tasks)
        if self.git_history:
            commit_history(self.path, message)


def _git(data_dir: Path, *args: str) -> Optional[subprocess.CompletedProcess]:
    try:
        return subprocess.run(
            ["git", "-C", str(data_dir), *args],
            stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, check=False
        )
    except OSError as e:
        logger.warning("Could not run git: %s", e)
        return None


def commit_history(path: Path, message: str) -> bool:
    """
    Record the task file in a git repository inside the data directory

    The task file is already saved when this runs, so git problems are
    logged and reported through the return value only.

    Returns:
        True if a commit was made
    """
    data_dir = path.parent
    if not (data_dir / ".git").exists():
        init = _git(data_dir, "init", "--quiet")
        if init is None or init.returncode != 0:
            logger.warning("git init failed in %s", data_dir)
            return False

    for args in (("add", path.name), ("commit", "--quiet", "-m", message)):
        result = _git(data_dir, *args)
        if result is None:
            return False
        if result.returncode != 0:
            logger.warning("git %s failed: %s", args[0], result.stderr.strip())
            return False

    logger.debug("Committed history: %s", message)
    return True
