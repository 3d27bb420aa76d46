"""
Task record
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict

from .dates import DateKey, check_hour


def _generate_id() -> str:
    """Generate unique task ID"""
    return str(uuid.uuid4())[:8]


@dataclass
class Task:
    date: DateKey
    hour: int
    description: str
    done: bool = False
    id: str = field(default_factory=_generate_id)
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.iso(),
            "hour": self.hour,
            "description": self.description,
            "done": self.done,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Task":
        hour = int(raw["hour"])
        check_hour(hour)
        return cls(
            date=DateKey.from_iso(raw["date"]),
            hour=hour,
            description=str(raw.get("description", "")),
            done=bool(raw.get("done", False)),
            id=str(raw.get("id") or _generate_id()),
            created_at=str(raw.get("created_at", "")),
        )
