"""Defines the listing data structures and the error values shared by the parsers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Union


def normalize_ws(text: str) -> str:
    """Collapse every whitespace run to a single space and trim the ends."""
    return " ".join(text.split())


def bs4_text(node: object, separator: str = "") -> str:
    """Extract text from a BeautifulSoup node."""
    return str(node.get_text(separator)) if hasattr(node, "get_text") else ""


class ItemAttribute(Enum):
    """Listing fields that can be reported as missing or malformed."""

    ID = "id"
    TITLE = "title"
    HREF = "href"
    COMPANY_AD = "company_ad"
    IMG = "img"
    POSTED_AT = "posted_at"
    LOCATION = "location"
    DIRECTION = "direction"


@dataclass(frozen=True, slots=True)
class Price:
    """Item price; the unit is usually "€"."""

    value: int
    unit: str


# Date resolution errors.


@dataclass(frozen=True, slots=True)
class DateParseError:
    def __str__(self) -> str:
        return type(self).__name__


@dataclass(frozen=True, slots=True)
class InvalidHighLevelStructure(DateParseError):
    raw: str

    def __str__(self) -> str:
        return f"unrecognized timestamp {self.raw!r}"


@dataclass(frozen=True, slots=True)
class InvalidDay(DateParseError):
    raw: str

    def __str__(self) -> str:
        return f"invalid day {self.raw!r}"


@dataclass(frozen=True, slots=True)
class InvalidMonth(DateParseError):
    raw: str

    def __str__(self) -> str:
        return f"invalid month {self.raw!r}"


@dataclass(frozen=True, slots=True)
class InvalidTime(DateParseError):
    raw: str

    def __str__(self) -> str:
        return f"invalid time {self.raw!r}"


@dataclass(frozen=True, slots=True)
class InvalidRelativeDay(DateParseError):
    raw: str

    def __str__(self) -> str:
        return f"invalid relative day {self.raw!r}"


@dataclass(frozen=True, slots=True)
class ArithmeticProblem(DateParseError):
    """The local wall-clock value does not name exactly one instant."""

    def __str__(self) -> str:
        return "timestamp does not map to a single point in time"


# Listing errors.


@dataclass(frozen=True, slots=True)
class MissingAttribute:
    field: ItemAttribute

    def __str__(self) -> str:
        return f"missing {self.field.value}"


@dataclass(frozen=True, slots=True)
class UnexpectedValue:
    field: ItemAttribute
    raw: str

    def __str__(self) -> str:
        return f"unexpected {self.field.value} {self.raw!r}"


@dataclass(frozen=True, slots=True)
class InvalidPrice:
    raw: str

    def __str__(self) -> str:
        return f"invalid price {self.raw!r}"


@dataclass(frozen=True, slots=True)
class InvalidDate:
    error: DateParseError

    def __str__(self) -> str:
        return f"invalid posted_at: {self.error}"


ItemParseErrorKind = Union[MissingAttribute, UnexpectedValue, InvalidPrice, InvalidDate]


@dataclass(frozen=True, slots=True)
class ItemParseError:
    """Identifies the first listing on a page that could not be parsed."""

    item_index: int
    item_id: str | None
    kind: ItemParseErrorKind

    def __str__(self) -> str:
        ident = self.item_id if self.item_id is not None else "?"
        return f"item #{self.item_index} (id={ident}): {self.kind}"


@dataclass(slots=True)
class Item:
    """Represents one listing on a search results page."""

    item_id: str
    title: str
    href: str
    is_company_ad: bool
    thumbnail_url: str | None
    price: Price | None
    posted_at_raw: str
    posted_at: datetime
    location: str
    direction: str
    seller: str | None = None


def item_to_dict(item: Item) -> dict[str, Any]:
    """Convert an Item into a JSON-serializable dict."""
    return {
        "item_id": item.item_id,
        "title": item.title,
        "href": item.href,
        "is_company_ad": item.is_company_ad,
        "thumbnail_url": item.thumbnail_url,
        "price": {"value": item.price.value, "unit": item.price.unit} if item.price else None,
        "posted_at_raw": item.posted_at_raw,
        "posted_at": item.posted_at.isoformat(),
        "location": item.location,
        "direction": item.direction,
        "seller": item.seller,
    }
