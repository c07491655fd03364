"""
JSON shapes for the Book resource.

Inbound parsing is structural only: it checks that each known field has
the right JSON type and fills zero values for missing ones. Whether a
title is empty or a price negative is left to the store.
"""
import math
from datetime import timezone

from .errors import BadRequestError

_STRING_FIELDS = ("title", "author", "isbn")

# Range of the INTEGER year column
_YEAR_MIN, _YEAR_MAX = -(2 ** 31), 2 ** 31 - 1


def parse_book_payload(data):
    if not isinstance(data, dict):
        raise BadRequestError("request body must be a JSON object")

    fields = {}
    for name in _STRING_FIELDS:
        value = data.get(name, "")
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise BadRequestError(f"field '{name}' must be a string")
        fields[name] = value

    year = data.get("year", 0)
    if year is None:
        year = 0
    # bool is an int subclass; reject it explicitly
    if isinstance(year, bool) or not isinstance(year, int):
        raise BadRequestError("field 'year' must be an integer")
    if not _YEAR_MIN <= year <= _YEAR_MAX:
        raise BadRequestError("field 'year' is out of range")
    fields["year"] = year

    price = data.get("price", 0)
    if price is None:
        price = 0
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise BadRequestError("field 'price' must be a number")
    try:
        price = float(price)
    except OverflowError as e:
        raise BadRequestError("field 'price' must be a number") from e
    # json accepts NaN / Infinity literals
    if not math.isfinite(price):
        raise BadRequestError("field 'price' must be a number")
    fields["price"] = price

    return fields


def _iso(value):
    # stored naive, always UTC
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def book_to_dict(book):
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "year": book.year,
        "price": float(book.price) if book.price is not None else None,
        "created_at": _iso(book.created_at),
        "updated_at": _iso(book.updated_at),
    }


def matches_search(book, term):
    """Case-insensitive substring match against title or author."""
    needle = term.lower()
    return needle in (book.title or "").lower() or needle in (book.author or "").lower()
