from __future__ import annotations

import argparse
from pathlib import Path

from tori_scrape.misc.config_loader import load_cached_config_section, parser_settings
from tori_scrape.misc.http_client import HttpClient
from tori_scrape.misc.logger import setup_logging
from tori_scrape.misc.page_loader import dump_file_name, encoding_lookup, timezone_lookup
from tori_scrape.parsers.common import ItemParseError
from tori_scrape.parsers.item_parser import ItemParser


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("url", help="results page URL to fetch")
    parser.add_argument("--save-dir", help="directory to store the fetched page as a dump file")
    args = parser.parse_args()

    setup_logging(level=str(load_cached_config_section("logging").get("level", "INFO")))
    settings = parser_settings()
    tz = timezone_lookup(settings["timezone"])

    result = HttpClient(load_cached_config_section("http")).get(args.url)
    print("status=", result.status_code, "final=", result.final_url, "elapsed_ms=", result.elapsed_ms)
    if not result.ok:
        print("error=", result.error)
        return

    fetched_at = result.fetched_at.astimezone(tz)
    if args.save_dir:
        target = Path(args.save_dir) / dump_file_name(fetched_at)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.content)
        print("saved=", target)

    html = result.content.decode(encoding_lookup(settings["encoding"]))
    parsed = ItemParser(fetched_at, listing_id_prefix=settings["listing_id_prefix"]).parse_from_string(html)
    if isinstance(parsed, ItemParseError):
        print("parse error=", parsed)
        return
    print("items=", len(parsed))
    for item in parsed[:5]:
        print(item.item_id, item.posted_at.isoformat(), item.title)


if __name__ == "__main__":
    main()
