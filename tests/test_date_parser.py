from __future__ import annotations

from datetime import datetime, time, timezone
from zoneinfo import ZoneInfo

import pytest

from tori_scrape.parsers.common import (
    ArithmeticProblem,
    InvalidDay,
    InvalidHighLevelStructure,
    InvalidMonth,
    InvalidTime,
)
from tori_scrape.parsers.date_parser import (
    MONTHS_SHORT,
    AbsoluteToken,
    DateParser,
    RelativeToken,
    parse_day,
    parse_hh_mm,
    parse_month_short,
    tokenize_posted_at,
)

HELSINKI = ZoneInfo("Europe/Helsinki")


def _fetch_time() -> datetime:
    return datetime(2023, 3, 25, 10, 52, 1, tzinfo=HELSINKI)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_parse_month_short() -> None:
    assert parse_month_short("tam") == 1
    assert parse_month_short("jou") == 12
    assert parse_month_short("Huh") == 4
    assert parse_month_short("foo") == InvalidMonth("foo")


def test_month_table_covers_the_year() -> None:
    assert sorted(MONTHS_SHORT.values()) == list(range(1, 13))
    for name, number in MONTHS_SHORT.items():
        assert parse_month_short(name) == number


def test_parse_hh_mm() -> None:
    assert parse_hh_mm("01:23") == time(1, 23)
    assert parse_hh_mm("00:00") == time(0, 0)
    assert parse_hh_mm("23:59") == time(23, 59)
    assert parse_hh_mm("01:60") == InvalidTime("01:60")
    assert parse_hh_mm("25:24") == InvalidTime("25:24")
    assert parse_hh_mm("24:00") == InvalidTime("24:00")
    assert parse_hh_mm("ab:cd") == InvalidTime("ab:cd")


@pytest.mark.parametrize("hour", [0, 7, 12, 23])
@pytest.mark.parametrize("minute", [0, 30, 59])
def test_parse_hh_mm_round_trips(hour: int, minute: int) -> None:
    parsed = parse_hh_mm(f"{hour:02d}:{minute:02d}")
    assert parsed == time(hour, minute)


def test_parse_day() -> None:
    assert parse_day("1") == 1
    assert parse_day("31") == 31
    assert parse_day("0") == InvalidDay("0")
    assert parse_day("32") == InvalidDay("32")
    assert parse_day("x") == InvalidDay("x")


def test_tokenize_posted_at() -> None:
    assert tokenize_posted_at("tänään 01:23") == RelativeToken(relday="tänään", hhmm="01:23")
    assert tokenize_posted_at("  eilen   15:59 ") == RelativeToken(relday="eilen", hhmm="15:59")
    assert tokenize_posted_at("21 huh 19:52") == AbsoluteToken(day="21", month="huh", hhmm="19:52")
    assert tokenize_posted_at("huomenna 12:00") == InvalidHighLevelStructure("huomenna 12:00")
    assert tokenize_posted_at("21 huh") == InvalidHighLevelStructure("21 huh")
    assert tokenize_posted_at("ilmoitus tänään 01:23") == InvalidHighLevelStructure(
        "ilmoitus tänään 01:23"
    )


def test_parse_ts_relative() -> None:
    parser = DateParser(_fetch_time())

    # Helsinki is UTC+2 before the March DST switch.
    assert parser.parse_posted_at("tänään 01:23") == _utc(2023, 3, 24, 23, 23)
    assert parser.parse_posted_at("eilen 15:59") == _utc(2023, 3, 24, 13, 59)
    assert parser.parse_posted_at("tänään 25:48") == InvalidTime("25:48")


def test_parse_ts_relative_uses_local_calendar_day() -> None:
    # 22:30 UTC is already the next day in Helsinki.
    parser = DateParser(_utc(2023, 3, 24, 22, 30), HELSINKI)

    assert parser.user_today.isoformat() == "2023-03-25"
    assert parser.parse_posted_at("tänään 00:10") == _utc(2023, 3, 24, 22, 10)
    assert parser.parse_posted_at("eilen 23:00") == _utc(2023, 3, 24, 21, 0)


def test_parse_ts_absolute() -> None:
    parser = DateParser(_fetch_time())

    result = parser.parse_posted_at("21 huh 19:52")
    assert result == datetime(2022, 4, 21, 19, 52, tzinfo=HELSINKI).astimezone(timezone.utc)
    assert result == _utc(2022, 4, 21, 16, 52)

    assert parser.parse_posted_at("3 maa 08:00") == _utc(2023, 3, 3, 6, 0)
    assert parser.parse_posted_at("32 tam 01:32") == InvalidDay("32")
    assert parser.parse_posted_at("0 tam 01:32") == InvalidDay("0")


def test_parse_ts_absolute_same_day_later_time_rolls_back() -> None:
    parser = DateParser(_fetch_time())

    assert parser.parse_posted_at("25 maa 10:52") == _utc(2023, 3, 25, 8, 52)
    assert parser.parse_posted_at("25 maa 10:53") == _utc(2022, 3, 25, 8, 53)


def test_parse_ts_absolute_reports_first_bad_token() -> None:
    parser = DateParser(_fetch_time())

    assert parser.parse_posted_at("32 xyz 99:99") == InvalidDay("32")
    assert parser.parse_posted_at("12 xyz 99:99") == InvalidMonth("xyz")
    assert parser.parse_posted_at("12 tam 99:99") == InvalidTime("99:99")


def test_parse_ts_impossible_calendar_date() -> None:
    parser = DateParser(_fetch_time())

    assert parser.parse_posted_at("30 hel 12:00") == ArithmeticProblem()


def test_parse_ts_leap_day_rollback() -> None:
    # 29 Feb 2024 lies after the anchor and 2023 has no leap day.
    parser = DateParser(datetime(2024, 2, 10, 12, 0, tzinfo=HELSINKI))

    assert parser.parse_posted_at("29 hel 12:00") == ArithmeticProblem()


def test_parse_ts_dst_gap_and_fold() -> None:
    # Helsinki skips 03:00-04:00 on 2023-03-26 and repeats it on 2023-10-29.
    parser = DateParser(datetime(2023, 11, 1, 12, 0, tzinfo=HELSINKI))
    assert parser.parse_posted_at("26 maa 03:30") == ArithmeticProblem()
    assert parser.parse_posted_at("29 lok 03:30") == ArithmeticProblem()
    assert parser.parse_posted_at("29 lok 05:30") == _utc(2023, 10, 29, 3, 30)

    parser = DateParser(datetime(2023, 3, 26, 12, 0, tzinfo=HELSINKI))
    assert parser.parse_posted_at("tänään 03:30") == ArithmeticProblem()
    assert parser.parse_posted_at("tänään 04:30") == _utc(2023, 3, 26, 1, 30)


def test_parse_ts_unknown_structure() -> None:
    parser = DateParser(_fetch_time())

    assert parser.parse_posted_at("") == InvalidHighLevelStructure("")
    assert parser.parse_posted_at("eilen") == InvalidHighLevelStructure("eilen")


def test_date_parser_requires_aware_fetch_time() -> None:
    with pytest.raises(ValueError):
        DateParser(datetime(2023, 3, 25, 10, 52, 1))
