"""
Tests for Book Query Translation

Unit tests for app.services.filters: query-string pairs in, SQLAlchemy
clauses out. No database needed.
"""

import pytest

from app.exceptions import BadRequestError
from app.services.filters import (
    DEFAULT_ORDER,
    build_filter,
    parse_book_query,
    parse_select,
    parse_sort,
)


class TestBuildFilter:

    def test_equality_by_default(self):
        clause = build_filter("genre", "Fantasy")

        assert str(clause) == "books.genre = :genre_1"
        assert clause.right.value == "Fantasy"

    @pytest.mark.parametrize(
        "op,sql",
        [
            ("gt", ">"),
            ("gte", ">="),
            ("lt", "<"),
            ("lte", "<="),
        ],
    )
    def test_comparison_operators(self, op, sql):
        clause = build_filter(f"published_year[{op}]", "1990")

        assert str(clause) == f"books.published_year {sql} :published_year_1"
        assert clause.right.value == 1990

    def test_values_are_converted_to_column_type(self):
        assert build_filter("average_rating[gt]", "3.5").right.value == 3.5
        assert build_filter("user_id", "7").right.value == 7

    def test_in_operator_splits_values(self):
        clause = build_filter("genre[in]", "Fantasy, Mystery")

        assert "IN" in str(clause)
        assert clause.right.value == ["Fantasy", "Mystery"]

    @pytest.mark.parametrize(
        "key,value",
        [
            ("password", "x"),                 # Not a filterable field
            ("genre[regex]", "F.*"),           # Unknown operator
            ("published_year[gte", "1990"),    # Malformed key
            ("published_year", "1990; DROP"),  # Not an integer
            ("average_rating[in]", "4,high"),  # One bad list element
            ("average_rating", "nan"),
            ("average_rating[gt]", "inf"),
            ("average_rating[in]", "3,-Infinity"),
        ],
    )
    def test_rejected_parameters(self, key, value):
        with pytest.raises(BadRequestError):
            build_filter(key, value)


class TestParseSelect:

    def test_none_means_all_fields(self):
        assert parse_select(None) is None
        assert parse_select("") is None

    def test_id_always_included(self):
        assert parse_select("title, author") == {"id", "title", "author"}

    def test_unknown_field(self):
        with pytest.raises(BadRequestError) as exc_info:
            parse_select("title,hashed_password")

        assert "hashed_password" in exc_info.value.message


class TestParseSort:

    def test_default_order(self):
        assert parse_sort(None) == list(DEFAULT_ORDER)

    def test_descending_prefix_and_tiebreak(self):
        order = [str(clause) for clause in parse_sort("-average_rating,title")]

        assert order == [
            "books.average_rating DESC",
            "books.title ASC",
            "books.id ASC",
        ]

    def test_explicit_id_not_duplicated(self):
        assert len(parse_sort("-id")) == 1

    def test_unknown_field(self):
        with pytest.raises(BadRequestError):
            parse_sort("price")

    @pytest.mark.parametrize("raw", ["--title", "-", "title,-"])
    def test_malformed_descending_prefix(self, raw):
        with pytest.raises(BadRequestError):
            parse_sort(raw)


class TestParseBookQuery:

    def test_reserved_params_are_not_filters(self):
        query = parse_book_query(
            [("page", "2"), ("limit", "5"), ("select", "title"), ("sort", "title")]
        )

        assert query.filters == []
        assert query.fields == {"id", "title"}

    def test_each_filter_param_adds_a_predicate(self):
        query = parse_book_query(
            [("genre", "Fantasy"), ("published_year[gte]", "1990"), ("published_year[lt]", "2000")]
        )

        assert len(query.filters) == 3

    def test_last_select_wins(self):
        query = parse_book_query([("select", "title"), ("select", "author")])

        assert query.fields == {"id", "author"}
