"""Parses a saved tori.fi results page and prints the extracted listings."""

from __future__ import annotations

import argparse
import json
import sys
import time
from datetime import datetime, timezone, tzinfo
from pathlib import Path

from tori_scrape.misc.config_loader import (
    DEFAULT_CONFIG_PATH,
    dump_json,
    load_cached_config_section,
    parser_settings,
)
from tori_scrape.misc.logger import setup_logging
from tori_scrape.misc.page_loader import (
    decode_to_string,
    encoding_lookup,
    fetch_time_from_dump_name,
    timezone_lookup,
)
from tori_scrape.parsers.common import ItemParseError, item_to_dict
from tori_scrape.parsers.item_parser import ItemParser


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("page", help="saved results page (HTML)")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="JSON config file")
    parser.add_argument("--timezone", help="IANA timezone of the visitor, e.g. Europe/Helsinki")
    parser.add_argument("--encoding", help="encoding of the saved page, e.g. ISO_8859_15")
    parser.add_argument(
        "--fetch-time",
        help="ISO-8601 time the page was fetched; defaults to the dump file name, then now",
    )
    parser.add_argument("--json", action="store_true", help="print one JSON object per item")
    parser.add_argument("--output", help="also write the parsed items to this file as a JSON array")
    return parser


def _resolve_fetch_time(raw: str | None, page: Path, tz: tzinfo) -> datetime:
    if raw:
        parsed = datetime.fromisoformat(raw)
        return parsed.replace(tzinfo=tz) if parsed.tzinfo is None else parsed.astimezone(tz)
    from_name = fetch_time_from_dump_name(page, tz)
    if from_name is not None:
        return from_name
    return datetime.now(timezone.utc).astimezone(tz)


def main(argv: list[str] | None = None) -> int:
    """Executes main logic."""
    args = _build_arg_parser().parse_args(argv)
    logging_cfg = load_cached_config_section("logging", config_path=args.config)
    setup_logging(
        level=str(logging_cfg.get("level", "INFO")),
        json_logs=bool(logging_cfg.get("json_logs", False)),
    )
    settings = parser_settings(args.config)

    tz = timezone_lookup(args.timezone or settings["timezone"])
    encoding = encoding_lookup(args.encoding or settings["encoding"])
    page = Path(args.page)
    fetch_time = _resolve_fetch_time(args.fetch_time, page, tz)

    parser = ItemParser(fetch_time, listing_id_prefix=settings["listing_id_prefix"])
    buf = decode_to_string(page, encoding)

    start = time.perf_counter()
    result = parser.parse_from_string(buf)
    duration = time.perf_counter() - start

    if isinstance(result, ItemParseError):
        print(f"could not parse items: {result}")
        print(f"took: {duration:.3f}s", file=sys.stderr)
        return 1

    for item in result:
        if args.json:
            print(json.dumps(item_to_dict(item), ensure_ascii=False))
        else:
            print(item)
    if args.output:
        dump_json(args.output, [item_to_dict(item) for item in result])
    print(f"took: {duration:.3f}s", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
