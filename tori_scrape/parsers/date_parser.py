"""Resolves the "posted at" timestamps of tori.fi listings into absolute UTC instants.

The results page shows timestamps in two shapes, both in the visitor's local
timezone and without a year:

* relative: ``tänään 12:34`` (today) and ``eilen 12:34`` (yesterday)
* absolute: ``21 huh 19:52`` (day, Finnish three-letter month, time)

Both are resolved against the moment the page was fetched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Final, Union

from tori_scrape.parsers.common import (
    ArithmeticProblem,
    DateParseError,
    InvalidDay,
    InvalidHighLevelStructure,
    InvalidMonth,
    InvalidRelativeDay,
    InvalidTime,
)

TODAY: Final = "tänään"
YESTERDAY: Final = "eilen"

MONTHS_SHORT: Final[dict[str, int]] = {
    "tam": 1,
    "hel": 2,
    "maa": 3,
    "huh": 4,
    "tou": 5,
    "kes": 6,
    "hei": 7,
    "elo": 8,
    "syy": 9,
    "lok": 10,
    "mar": 11,
    "jou": 12,
}

REL_TIME = re.compile(rf"\s*({TODAY}|{YESTERDAY})\s+(\d{{2}}:\d{{2}})\s*")
ABS_TIME = re.compile(r"\s*([0-9]{1,2})\s+([^\W\d_]{3})\s+(\d{2}:\d{2})\s*")
HH_MM = re.compile(r"([0-9]{2}):([0-9]{2})")


@dataclass(frozen=True, slots=True)
class RelativeToken:
    relday: str
    hhmm: str


@dataclass(frozen=True, slots=True)
class AbsoluteToken:
    day: str
    month: str
    hhmm: str


PostedAtToken = Union[RelativeToken, AbsoluteToken]


def parse_month_short(month_short_name: str) -> int | InvalidMonth:
    """Map a Finnish three-letter month abbreviation to its 1-12 ordinal."""
    month = MONTHS_SHORT.get(month_short_name.lower())
    if month is None:
        return InvalidMonth(month_short_name)
    return month


def parse_hh_mm(value: str) -> time | InvalidTime:
    match = HH_MM.fullmatch(value)
    if match is None:
        return InvalidTime(value)
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return InvalidTime(value)
    return time(hour, minute)


def parse_day(value: str) -> int | InvalidDay:
    """Parse a day of month; only the 1-31 range is checked here."""
    try:
        day = int(value)
    except ValueError:
        return InvalidDay(value)
    if 1 <= day <= 31:
        return day
    return InvalidDay(value)


def tokenize_posted_at(raw: str) -> PostedAtToken | InvalidHighLevelStructure:
    """Split a raw timestamp into exactly one grammar token.

    A string matching neither grammar, or both, is rejected
    instead of being resolved by whichever pattern is tried first.
    """
    tokens: list[PostedAtToken] = []
    rel = REL_TIME.fullmatch(raw)
    if rel is not None:
        tokens.append(RelativeToken(relday=rel.group(1), hhmm=rel.group(2)))
    abs_ = ABS_TIME.fullmatch(raw)
    if abs_ is not None:
        tokens.append(AbsoluteToken(day=abs_.group(1), month=abs_.group(2), hhmm=abs_.group(3)))
    if len(tokens) != 1:
        return InvalidHighLevelStructure(raw)
    return tokens[0]


def localize(naive: datetime, tz: tzinfo) -> datetime | ArithmeticProblem:
    """Attach ``tz`` to a wall-clock value, rejecting DST folds and gaps."""
    earlier = naive.replace(tzinfo=tz, fold=0)
    later = naive.replace(tzinfo=tz, fold=1)
    if earlier.utcoffset() != later.utcoffset():
        return ArithmeticProblem()
    return earlier


class DateParser:
    """Resolves posted-at timestamps relative to one fetch time.

    The user's "today" and "yesterday" are fixed when the parser is built, so
    every timestamp on a page resolves against the same anchor. Create a new
    parser for each fetched page.
    """

    def __init__(self, fetch_time: datetime, user_tz: tzinfo | None = None) -> None:
        if fetch_time.tzinfo is None or fetch_time.utcoffset() is None:
            raise ValueError("fetch_time must be timezone-aware")
        if user_tz is not None:
            fetch_time = fetch_time.astimezone(user_tz)
        self.user_tz: tzinfo = fetch_time.tzinfo
        self.fetch_time = fetch_time
        self.user_today: date = fetch_time.date()
        self.user_yesterday: date = self.user_today - timedelta(days=1)

    def _parse_rel_time(self, token: RelativeToken) -> datetime | DateParseError:
        hhmm = parse_hh_mm(token.hhmm)
        if isinstance(hhmm, InvalidTime):
            return hhmm

        if token.relday == TODAY:
            day = self.user_today
        elif token.relday == YESTERDAY:
            day = self.user_yesterday
        else:
            return InvalidRelativeDay(token.relday)

        local = localize(datetime.combine(day, hhmm), self.user_tz)
        if isinstance(local, ArithmeticProblem):
            return local
        return local.astimezone(timezone.utc)

    def _parse_abs_time(self, token: AbsoluteToken) -> datetime | DateParseError:
        day = parse_day(token.day)
        if isinstance(day, InvalidDay):
            return day
        month = parse_month_short(token.month)
        if isinstance(month, InvalidMonth):
            return month
        hhmm = parse_hh_mm(token.hhmm)
        if isinstance(hhmm, InvalidTime):
            return hhmm

        resolved = self._at_year(self.user_today.year, month, day, hhmm)
        if isinstance(resolved, ArithmeticProblem):
            return resolved

        # The page never shows a year, so a timestamp in the future belongs to
        # last year. Listings older than one year resolve to the wrong year.
        if resolved.astimezone(timezone.utc) > self.fetch_time.astimezone(timezone.utc):
            resolved = self._at_year(self.user_today.year - 1, month, day, hhmm)
            if isinstance(resolved, ArithmeticProblem):
                return resolved

        return resolved.astimezone(timezone.utc)

    def _at_year(self, year: int, month: int, day: int, hhmm: time) -> datetime | ArithmeticProblem:
        try:
            naive = datetime(year, month, day, hhmm.hour, hhmm.minute)
        except ValueError:
            return ArithmeticProblem()
        return localize(naive, self.user_tz)

    def parse_posted_at(self, raw: str) -> datetime | DateParseError:
        """Resolve ``tänään 12:34``, ``eilen 12:34`` or ``15 huh 12:45`` to a UTC datetime."""
        token = tokenize_posted_at(raw)
        if isinstance(token, RelativeToken):
            return self._parse_rel_time(token)
        if isinstance(token, AbsoluteToken):
            return self._parse_abs_time(token)
        return token
