import pytest

from mediashelf.models import MediaType
from mediashelf.query_builder import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_SQL_INT,
    SearchParams,
    escape_like,
    parse_int,
    parse_types,
    split_csv,
)


def test_defaults():
    params = SearchParams.from_query({})
    assert params.q == ""
    assert params.types is None
    assert params.genres is None
    assert params.year_min is None and params.year_max is None
    assert params.sort_by == "title"
    assert params.sort_dir == "desc"
    assert params.page == 1
    assert params.limit == DEFAULT_PAGE_SIZE
    assert params.offset == 0


def test_offset_from_page_and_limit():
    params = SearchParams.from_query({"page": "3", "limit": "10"})
    assert params.offset == 20


def test_page_and_limit_are_clamped():
    params = SearchParams.from_query({"page": "-4", "limit": "100000"})
    assert params.page == 1
    assert params.limit == MAX_PAGE_SIZE

    params = SearchParams.from_query({"page": "x", "limit": "0"})
    assert params.page == 1
    assert params.limit == DEFAULT_PAGE_SIZE


@pytest.mark.parametrize("raw", ["0", "-5", "abc", ""])
def test_non_positive_limit_uses_default(raw):
    assert SearchParams.from_query({"limit": raw}).limit == DEFAULT_PAGE_SIZE


def test_huge_page_keeps_offset_in_integer_range():
    params = SearchParams.from_query({"page": "99999999999999999999", "limit": "10"})
    assert params.page > 1
    assert params.offset <= MAX_SQL_INT


def test_out_of_range_year_is_ignored():
    params = SearchParams.from_query({"yearMin": "99999999999999999999", "yearMax": "2000"})
    assert params.year_min is None
    assert params.year_max == 2000


def test_parse_int():
    assert parse_int("2001") == 2001
    assert parse_int(" 7 ") == 7
    assert parse_int("20x") is None
    assert parse_int("") is None
    assert parse_int(None) is None


def test_split_csv():
    assert split_csv("a, b,,c ") == ["a", "b", "c"]
    assert split_csv("") is None
    assert split_csv(None) is None


def test_parse_types_drops_unknown():
    assert parse_types("movie,BOOK,VINYL") == [MediaType.MOVIE, MediaType.BOOK]
    assert parse_types("VINYL") == []
    assert parse_types(None) is None


def test_sort_dir_and_field_validation():
    params = SearchParams.from_query({"sortBy": "createdAt", "sortDir": "ASC"})
    assert params.sort_by == "createdAt"
    assert params.sort_dir == "asc"

    params = SearchParams.from_query({"sortBy": "popularity", "sortDir": "sideways"})
    assert params.sort_by == "title"
    assert params.sort_dir == "desc"


def test_escape_like():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
