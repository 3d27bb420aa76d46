"""
Calendar date keys used to group tasks

Dates are written dd-mm-yy on the command line. Two-digit years always
land in 2000-2099.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Union

from .errors import InvalidArguments, InvalidDate, InvalidHour


CENTURY = 2000

RELATIVE_TERMS = {
    "yesterday": -1,
    "today": 0,
    "tomorrow": 1,
}

_DATE_RE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{2}|\d{4})$")


@dataclass(frozen=True, order=True)
class DateKey:
    """A calendar day. Field order gives chronological ordering."""
    year: int
    month: int
    day: int

    def __post_init__(self):
        try:
            date(self.year, self.month, self.day)
        except (ValueError, TypeError) as e:
            raise InvalidDate(
                f"{self.day}-{self.month}-{self.year} is not a calendar date: {e}"
            ) from e

    @classmethod
    def from_date(cls, value: Union[date, datetime]) -> "DateKey":
        return cls(value.year, value.month, value.day)

    @classmethod
    def parse(cls, text: str, now: Union[date, datetime]) -> "DateKey":
        """
        Parse a command line date

        Args:
            text: today, tomorrow, yesterday, dd-mm-yy or dd-mm-yyyy
            now: Current wall clock time used to resolve relative terms

        Returns:
            The parsed DateKey
        """
        term = text.strip().lower()
        if term in RELATIVE_TERMS:
            return cls.from_date(now).successor(RELATIVE_TERMS[term])

        match = _DATE_RE.match(term)
        if not match:
            raise InvalidDate(
                f"failed to parse date [{text}]: expected dd-mm-yy, today, tomorrow or yesterday"
            )

        day, month, year = (int(part) for part in match.groups())
        if len(match.group(3)) == 2:
            year += CENTURY
        return cls(year, month, day)

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def successor(self, n: int = 1) -> "DateKey":
        """Date n calendar days later (earlier for negative n)"""
        try:
            return DateKey.from_date(self.to_date() + timedelta(days=n))
        except OverflowError as e:
            raise InvalidDate(f"{self.format()} shifted by {n} days is out of range") from e

    def format(self) -> str:
        return f"{self.day:02d}-{self.month:02d}-{self.year % 100:02d}"

    def iso(self) -> str:
        """YYYY-MM-DD, the form stored on disk"""
        return self.to_date().isoformat()

    @classmethod
    def from_iso(cls, text: str) -> "DateKey":
        try:
            return cls.from_date(date.fromisoformat(text))
        except (ValueError, TypeError) as e:
            raise InvalidDate(f"bad stored date [{text}]") from e

    def label(self) -> str:
        """Human readable heading, e.g. 15 Jun 2024"""
        return self.to_date().strftime("%d %b %Y")

    def __str__(self):
        return self.format()


def date_range(start: DateKey, count: int) -> List[DateKey]:
    """count consecutive dates beginning at start"""
    return [start.successor(i) for i in range(max(count, 0))]


def parse_hour(text: Union[str, int]) -> int:
    """Parse an hour of day in 0..23"""
    try:
        hour = int(text)
    except (ValueError, TypeError):
        raise InvalidHour(f"failed to parse hour [{text}]") from None
    check_hour(hour)
    return hour


def check_hour(hour: int) -> None:
    if not 0 <= hour <= 23:
        raise InvalidHour(f"hour [{hour}] is not in 0..23")


def parse_slot(text: str):
    """
    Parse hour.index or a bare hour (index 0)

    Returns:
        (hour, index) tuple
    """
    hour_text, sep, index_text = text.partition(".")
    hour = parse_hour(hour_text)
    if not sep:
        return hour, 0

    try:
        index = int(index_text)
    except ValueError:
        raise InvalidArguments(f"failed to parse index from format [hour.index]: [{text}]") from None
    if index < 0:
        raise InvalidArguments(f"index [{index}] must not be negative")
    return hour, index


def looks_like_date(text: str) -> bool:
    """True for anything parse would treat as a date rather than reject outright"""
    term = text.strip().lower()
    return term in RELATIVE_TERMS or bool(_DATE_RE.match(term))
