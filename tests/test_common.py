from __future__ import annotations

from datetime import datetime, timezone

import pytest

from tori_scrape.parsers.common import (
    ArithmeticProblem,
    InvalidDate,
    InvalidDay,
    Item,
    ItemAttribute,
    ItemParseError,
    MissingAttribute,
    Price,
    item_to_dict,
    normalize_ws,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("   foo      bar baz  ", "foo bar baz"),
        ("tänään\n\t 12:34", "tänään 12:34"),
        ("", ""),
        ("  \n ", ""),
        ("single", "single"),
    ],
)
def test_normalize_ws(raw: str, expected: str) -> None:
    assert normalize_ws(raw) == expected
    assert normalize_ws(normalize_ws(raw)) == normalize_ws(raw)


def test_error_values_compare_by_kind_and_payload() -> None:
    assert ArithmeticProblem() == ArithmeticProblem()
    assert InvalidDay("32") == InvalidDay("32")
    assert InvalidDay("32") != InvalidDay("33")
    assert InvalidDate(InvalidDay("32")) != InvalidDate(ArithmeticProblem())


def test_item_parse_error_str() -> None:
    error = ItemParseError(item_index=3, item_id="123", kind=MissingAttribute(ItemAttribute.TITLE))
    assert str(error) == "item #3 (id=123): missing title"

    error = ItemParseError(item_index=0, item_id=None, kind=InvalidDate(InvalidDay("32")))
    assert str(error) == "item #0 (id=?): invalid posted_at: invalid day '32'"


def test_item_to_dict() -> None:
    item = Item(
        item_id="111",
        title="Polkupyörä",
        href="/uusimaa/polkupyora_111.htm",
        is_company_ad=False,
        thumbnail_url=None,
        price=Price(value=120, unit="€"),
        posted_at_raw="tänään 09:15",
        posted_at=datetime(2023, 3, 25, 7, 15, tzinfo=timezone.utc),
        location="Helsinki",
        direction="Myydään",
    )

    payload = item_to_dict(item)
    assert payload["price"] == {"value": 120, "unit": "€"}
    assert payload["posted_at"] == "2023-03-25T07:15:00+00:00"
    assert payload["seller"] is None
    assert payload["thumbnail_url"] is None
