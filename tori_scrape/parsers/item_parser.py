"""Extracts listings from a tori.fi search results page."""

from __future__ import annotations

import time
from datetime import datetime, tzinfo

from bs4 import BeautifulSoup, Tag

from tori_scrape.misc.logger import get_logger
from tori_scrape.parsers.common import (
    DateParseError,
    InvalidDate,
    InvalidPrice,
    Item,
    ItemAttribute,
    ItemParseError,
    ItemParseErrorKind,
    MissingAttribute,
    UnexpectedValue,
    bs4_text,
    normalize_ws,
)
from tori_scrape.parsers.date_parser import DateParser
from tori_scrape.parsers.price_parser import parse_price

DEFAULT_LISTING_ID_PREFIX = "item_"

ROW_SELECTOR = "a[data-row]"
TITLE_SELECTOR = "div .li-title"
PRICE_SELECTOR = "p .list_price, .ineuros"
IMAGE_SELECTOR = "div .item_image[src]"
POSTED_AT_SELECTOR = "div .date_image"
COMBINED_SELECTOR = "div .cat_geo > p"

COMPANY_AD_VALUES = {"0": False, "1": True}


class _ListingError(Exception):
    """Aborts parsing of a single listing; never leaves this module."""

    def __init__(self, item_id: str | None, kind: ItemParseErrorKind) -> None:
        super().__init__(str(kind))
        self.item_id = item_id
        self.kind = kind


def _attr(node: Tag, name: str) -> str | None:
    value = node.get(name)
    if value is None:
        return None
    # bs4 hands multi-valued attributes (class, rel) back as lists.
    return " ".join(value) if isinstance(value, list) else str(value)


class ItemParser:
    """Parses a search results page into Items.

    The ``fetch_time`` is needed to decode relative and year-less timestamps
    (see :meth:`parse_posted_at`), so build a separate parser for each
    fetched page.

    Parsing is all-or-nothing: the first listing with a missing or malformed
    required field aborts the page and is reported as an ItemParseError.
    """

    def __init__(
        self,
        fetch_time: datetime,
        user_tz: tzinfo | None = None,
        listing_id_prefix: str = DEFAULT_LISTING_ID_PREFIX,
    ) -> None:
        self.date_parser = DateParser(fetch_time, user_tz)
        self.listing_id_prefix = listing_id_prefix
        self.logger = get_logger("item_parser")

    def parse_posted_at(self, raw: str) -> datetime | DateParseError:
        """Resolve a posted-at timestamp against this parser's fetch time."""
        return self.date_parser.parse_posted_at(raw)

    def parse_document(self, soup: BeautifulSoup) -> list[Item] | ItemParseError:
        """Parse every listing in document order."""
        start = time.perf_counter()
        items: list[Item] = []
        for index, row in enumerate(soup.select(ROW_SELECTOR)):
            try:
                items.append(self._parse_row(row))
            except _ListingError as exc:
                error = ItemParseError(item_index=index, item_id=exc.item_id, kind=exc.kind)
                self.logger.warning(
                    "item parse failed index=%s item_id=%s error=%s", index, exc.item_id, exc.kind
                )
                return error

        self.logger.debug(
            "parsed items=%s elapsed_ms=%s",
            len(items),
            int((time.perf_counter() - start) * 1000),
        )
        return items

    def parse_from_string(self, html: str) -> list[Item] | ItemParseError:
        """Convenience wrapper that builds the document and calls parse_document."""
        return self.parse_document(BeautifulSoup(html, "lxml"))

    def _parse_item_id(self, row: Tag) -> str:
        raw = _attr(row, "id")
        if raw is None:
            raise _ListingError(None, MissingAttribute(ItemAttribute.ID))
        item_id = raw.removeprefix(self.listing_id_prefix)
        if item_id == raw or not item_id:
            raise _ListingError(None, UnexpectedValue(ItemAttribute.ID, raw))
        return item_id

    def _parse_row(self, row: Tag) -> Item:
        item_id = self._parse_item_id(row)

        def fail(kind: ItemParseErrorKind) -> _ListingError:
            return _ListingError(item_id, kind)

        company_ad_raw = _attr(row, "data-company-ad")
        if company_ad_raw is None:
            raise fail(MissingAttribute(ItemAttribute.COMPANY_AD))
        if company_ad_raw not in COMPANY_AD_VALUES:
            raise fail(UnexpectedValue(ItemAttribute.COMPANY_AD, company_ad_raw))
        is_company_ad = COMPANY_AD_VALUES[company_ad_raw]

        href = _attr(row, "href")
        if href is None:
            raise fail(MissingAttribute(ItemAttribute.HREF))

        # Three cases: no price text at all, a valid price, or an unparsable one.
        price = None
        price_node = row.select_one(PRICE_SELECTOR)
        price_text = bs4_text(price_node) if price_node is not None else ""
        if price_text:
            price = parse_price(price_text)
            if isinstance(price, InvalidPrice):
                raise fail(price)

        image_node = row.select_one(IMAGE_SELECTOR)
        thumbnail_url = _attr(image_node, "src") if image_node is not None else None

        title_node = row.select_one(TITLE_SELECTOR)
        if title_node is None:
            raise fail(MissingAttribute(ItemAttribute.TITLE))
        title = bs4_text(title_node).strip()

        posted_at_node = row.select_one(POSTED_AT_SELECTOR)
        if posted_at_node is None:
            raise fail(MissingAttribute(ItemAttribute.POSTED_AT))
        posted_at_raw = normalize_ws(bs4_text(posted_at_node))
        posted_at = self.date_parser.parse_posted_at(posted_at_raw)
        if isinstance(posted_at, DateParseError):
            raise fail(InvalidDate(posted_at))

        combined = [normalize_ws(bs4_text(node)) for node in row.select(COMBINED_SELECTOR)]
        if len(combined) < 1:
            raise fail(MissingAttribute(ItemAttribute.LOCATION))
        if len(combined) < 2:
            raise fail(MissingAttribute(ItemAttribute.DIRECTION))
        location, direction, *rest = combined
        seller = " ".join(rest) if rest else None

        return Item(
            item_id=item_id,
            title=title,
            href=href,
            is_company_ad=is_company_ad,
            thumbnail_url=thumbnail_url,
            price=price,
            posted_at_raw=posted_at_raw,
            posted_at=posted_at,
            location=location,
            direction=direction,
            seller=seller,
        )
