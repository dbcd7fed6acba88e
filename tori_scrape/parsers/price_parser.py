"""Parses localized listing prices such as "1 599 €"."""

from __future__ import annotations

import re

from tori_scrape.parsers.common import InvalidPrice, Price

# Whole string: digit groups separated by (non-breaking) spaces, then the currency.
PRICE_PATTERN = re.compile(r"\s*([0-9][0-9\s]*?)\s*(€|EUR)\s*")


def parse_price(text: str) -> Price | InvalidPrice:
    """Parse a price string into its integer value and unit."""
    match = PRICE_PATTERN.fullmatch(text)
    if match is None:
        return InvalidPrice(text)
    digits = "".join(match.group(1).split())
    return Price(value=int(digits), unit=match.group(2))
