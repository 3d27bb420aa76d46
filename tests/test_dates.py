# tests/test_dates.py

from datetime import datetime

import pytest

from daykeeper.dates import DateKey, check_hour, date_range, looks_like_date, parse_hour, parse_slot
from daykeeper.errors import InvalidArguments, InvalidDate, InvalidHour


@pytest.mark.parametrize("text", ["15-06-24", "01-01-00", "29-02-24", "31-12-99", "28-02-25"])
def test_parse_then_format_is_identity(text: str, now: datetime) -> None:
    assert DateKey.parse(text, now).format() == text


def test_two_digit_year_maps_to_2000s(now: datetime) -> None:
    assert DateKey.parse("15-06-24", now) == DateKey(2024, 6, 15)
    assert DateKey.parse("01-01-99", now).year == 2099


def test_four_digit_year_is_accepted(now: datetime) -> None:
    assert DateKey.parse("15-06-2024", now) == DateKey(2024, 6, 15)


def test_relative_terms_resolve_against_now(now: datetime) -> None:
    assert DateKey.parse("today", now) == DateKey(2024, 6, 15)
    assert DateKey.parse("Tomorrow", now) == DateKey(2024, 6, 16)
    assert DateKey.parse("yesterday", now) == DateKey(2024, 6, 14)


def test_relative_terms_cross_year_boundary() -> None:
    new_years_eve = datetime(2024, 12, 31, 23, 59)
    assert DateKey.parse("tomorrow", new_years_eve) == DateKey(2025, 1, 1)


@pytest.mark.parametrize("text", ["31-04-24", "29-02-23", "00-01-24", "15-13-24", "15/06/24", "someday", ""])
def test_rejects_bad_dates(text: str, now: datetime) -> None:
    with pytest.raises(InvalidDate):
        DateKey.parse(text, now)


def test_constructor_rejects_impossible_date() -> None:
    with pytest.raises(InvalidDate):
        DateKey(2023, 2, 29)


def test_ordering_is_chronological() -> None:
    dates = [DateKey(2025, 1, 1), DateKey(2024, 12, 31), DateKey(2024, 2, 29), DateKey(2024, 11, 1)]
    assert sorted(dates) == [
        DateKey(2024, 2, 29),
        DateKey(2024, 11, 1),
        DateKey(2024, 12, 31),
        DateKey(2025, 1, 1),
    ]


def test_successor_crosses_year_boundary() -> None:
    assert DateKey(2024, 12, 31).successor(1) == DateKey(2025, 1, 1)
    assert DateKey(2025, 1, 1).successor(-1) == DateKey(2024, 12, 31)


def test_successor_handles_leap_days() -> None:
    assert DateKey(2024, 2, 28).successor(1) == DateKey(2024, 2, 29)
    assert DateKey(2023, 2, 28).successor(1) == DateKey(2023, 3, 1)
    # 2025 is not a leap year: 365 days lands on 28 Feb, 366 on 1 Mar
    assert DateKey(2024, 2, 29).successor(365) == DateKey(2025, 2, 28)
    assert DateKey(2024, 2, 29).successor(366) == DateKey(2025, 3, 1)


@pytest.mark.parametrize("n", [0, 1, -1, 30, -59, 366, 1461, -10000])
def test_successor_inverse(n: int) -> None:
    for start in (DateKey(2024, 2, 29), DateKey(2024, 12, 31), DateKey(2000, 3, 1)):
        assert start.successor(n).successor(-n) == start


def test_successor_out_of_range() -> None:
    with pytest.raises(InvalidDate):
        DateKey(9999, 12, 31).successor(1)


def test_date_range() -> None:
    days = date_range(DateKey(2024, 2, 28), 3)
    assert days == [DateKey(2024, 2, 28), DateKey(2024, 2, 29), DateKey(2024, 3, 1)]
    assert date_range(DateKey(2024, 2, 28), 0) == []


def test_iso_round_trip() -> None:
    key = DateKey(2024, 6, 5)
    assert key.iso() == "2024-06-05"
    assert DateKey.from_iso("2024-06-05") == key
    assert key.label() == "05 Jun 2024"


def test_parse_hour() -> None:
    assert parse_hour("0") == 0
    assert parse_hour("23") == 23
    for bad in ("24", "-1", "nine", "9.5"):
        with pytest.raises(InvalidHour):
            parse_hour(bad)


def test_hour_error_names_valid_range() -> None:
    with pytest.raises(InvalidHour, match=r"hour \[24\] is not in 0\.\.23"):
        check_hour(24)


def test_parse_slot() -> None:
    assert parse_slot("9") == (9, 0)
    assert parse_slot("9.2") == (9, 2)
    with pytest.raises(InvalidHour):
        parse_slot("25.0")
    with pytest.raises(InvalidArguments):
        parse_slot("9.x")
    with pytest.raises(InvalidArguments):
        parse_slot("9.-1")


def test_looks_like_date() -> None:
    assert looks_like_date("today")
    assert looks_like_date("31-02-24")
    assert not looks_like_date("out.png")
