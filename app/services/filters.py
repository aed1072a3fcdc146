"""
Book Query Translation

Turns the query string of GET /books into SQLAlchemy clauses.

    GET /books?genre=Fantasy&published_year[gte]=1990&sort=-average_rating,title&select=title,author

Rules:
- `select`, `sort`, `page` and `limit` are reserved; every other parameter
  is a filter.
- `field=value` is an equality filter, `field[op]=value` a comparison with
  op in {gt, gte, lt, lte, in}; `in` takes a comma-separated list.
- Only the fields in FILTERABLE_FIELDS can be filtered, and each value is
  converted to the column's Python type before it reaches the query, so a
  client can never smuggle an operator or a raw expression into SQL.
- Each parameter adds one predicate; all predicates are ANDed.

Anything that can't be translated raises BadRequestError.
"""

import math
import operator
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement

from app.exceptions import BadRequestError
from app.models.book import Book
from app.schemas.book import BOOK_FIELDS

RESERVED_PARAMS = frozenset({"select", "sort", "page", "limit"})

FILTER_KEY = re.compile(r"^(?P<field>[a-z_]+)(?:\[(?P<op>[a-z]+)\])?$")


def finite_float(raw: str) -> float:
    """float() that refuses nan and infinities."""
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"non-finite number: {raw}")
    return value


# field name -> (column, converter from the raw query-string value)
FILTERABLE_FIELDS: dict[str, tuple[Any, Callable[[str], Any]]] = {
    "title": (Book.title, str),
    "author": (Book.author, str),
    "genre": (Book.genre, str),
    "published_year": (Book.published_year, int),
    "average_rating": (Book.average_rating, finite_float),
    "user_id": (Book.user_id, int),
    "created_at": (Book.created_at, datetime.fromisoformat),
}

COMPARISONS: dict[str, Callable[[Any, Any], ColumnElement[bool]]] = {
    "eq": operator.eq,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}

DEFAULT_ORDER = (Book.created_at.desc(), Book.id.desc())


@dataclass
class BookQuery:
    """Parsed list-books query: WHERE predicates, projection and ORDER BY."""

    filters: list[ColumnElement[bool]] = field(default_factory=list)
    fields: set[str] | None = None
    order_by: list[Any] = field(default_factory=lambda: list(DEFAULT_ORDER))


def _convert(name: str, converter: Callable[[str], Any], raw: str) -> Any:
    try:
        return converter(raw.strip())
    except ValueError:
        raise BadRequestError(f"Invalid value '{raw}' for filter '{name}'")


def build_filter(key: str, raw: str) -> ColumnElement[bool]:
    """
    Translate one query parameter into a predicate.

    Examples:
        build_filter("genre", "Fantasy")             -> books.genre = 'Fantasy'
        build_filter("published_year[gte]", "1990")  -> books.published_year >= 1990
        build_filter("genre[in]", "Fantasy,Mystery") -> books.genre IN (...)
    """
    match = FILTER_KEY.match(key)
    if match is None:
        raise BadRequestError(f"Malformed filter parameter '{key}'")

    name, op = match.group("field"), match.group("op") or "eq"
    if name not in FILTERABLE_FIELDS:
        raise BadRequestError(f"Cannot filter on field '{name}'")
    column, converter = FILTERABLE_FIELDS[name]

    if op == "in":
        values = [_convert(name, converter, part) for part in raw.split(",") if part.strip()]
        return column.in_(values)

    if op not in COMPARISONS:
        raise BadRequestError(f"Unsupported filter operator '{op}'")
    return COMPARISONS[op](column, _convert(name, converter, raw))


def parse_select(raw: str | None) -> set[str] | None:
    """Comma-separated projection; the id is always included."""
    if raw is None or not raw.strip():
        return None

    fields = {part.strip() for part in raw.split(",") if part.strip()}
    unknown = fields - BOOK_FIELDS
    if unknown:
        raise BadRequestError(f"Cannot select unknown fields: {', '.join(sorted(unknown))}")
    return fields | {"id"}


def parse_sort(raw: str | None) -> list[Any]:
    """Comma-separated sort keys, '-' prefix for descending, id as tie-breaker."""
    if raw is None or not raw.strip():
        return list(DEFAULT_ORDER)

    order_by = []
    seen = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        descending = part.startswith("-")
        name = part[1:] if descending else part
        if name not in BOOK_FIELDS:
            raise BadRequestError(f"Cannot sort on field '{name}'")
        column = getattr(Book, name)
        order_by.append(column.desc() if descending else column.asc())
        seen.add(name)

    if "id" not in seen:
        order_by.append(Book.id.asc())
    return order_by


def parse_book_query(params: Iterable[tuple[str, str]]) -> BookQuery:
    """
    Parse the raw (key, value) pairs of a list-books request.

    Repeated `select`/`sort` parameters: the last one wins.
    """
    query = BookQuery()
    select_raw = sort_raw = None

    for key, value in params:
        if key == "select":
            select_raw = value
        elif key == "sort":
            sort_raw = value
        elif key in RESERVED_PARAMS:
            continue
        else:
            query.filters.append(build_filter(key, value))

    query.fields = parse_select(select_raw)
    query.order_by = parse_sort(sort_raw)
    return query
