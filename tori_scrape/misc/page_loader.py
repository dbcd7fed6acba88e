"""Reads saved result pages from disk and resolves encoding and timezone labels."""

from __future__ import annotations

import codecs
import re
from datetime import datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DUMP_NAME_FORMAT = "%Y-%m-%d-%H%M%S"
DUMP_NAME_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2}-\d{6})-dump\.html?")


def encoding_lookup(name: str) -> str:
    """Return the codec name for a label such as "ISO_8859_15"; unknown labels mean UTF-8."""
    try:
        return codecs.lookup(name.strip().replace("_", "-")).name
    except LookupError:
        return "utf-8"


def timezone_lookup(name: str) -> ZoneInfo:
    """Look up an IANA timezone such as "Europe/Helsinki"."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown timezone: {name!r}") from exc


def decode_to_string(path: str | Path, encoding: str) -> str:
    """Read a page saved in ``encoding`` and transcode it to text."""
    raw = Path(path).read_bytes()
    if not raw:
        raise ValueError(f"empty page: {path}")
    return raw.decode(encoding)


def dump_file_name(fetched_at: datetime) -> str:
    """File name for a saved page, e.g. "2023-03-25-105201-dump.html"."""
    return f"{fetched_at.strftime(DUMP_NAME_FORMAT)}-dump.html"


def fetch_time_from_dump_name(path: str | Path, tz: tzinfo) -> datetime | None:
    """Recover the fetch time encoded in a dump file name, read as local time in ``tz``."""
    match = DUMP_NAME_PATTERN.fullmatch(Path(path).name)
    if match is None:
        return None
    try:
        naive = datetime.strptime(match.group(1), DUMP_NAME_FORMAT)
    except ValueError:
        return None
    return naive.replace(tzinfo=tz)
