import math

import pytest
from sqlalchemy.exc import OperationalError

from mediashelf.models import MediaType
from mediashelf.routers import search


@pytest.fixture()
def library(make_media):
    make_media("The Matrix", MediaType.MOVIE, genre="Sci-Fi", year=1999, rating=8.7)
    make_media("Matrix Reloaded", MediaType.MOVIE, genre="Sci-Fi", year=2003, rating=7.2)
    make_media("Memento", MediaType.MOVIE, genre="Thriller", year=2000, rating=8.4)
    make_media("The Wire", MediaType.TV_SHOW, genre="Crime", year=2002, rating=9.3)
    make_media("Dune", MediaType.BOOK, genre="Sci-Fi, Adventure", year=1965)
    make_media("Untold", MediaType.BOOK, genre="Sci-Fi")


def _titles(res):
    return [m["title"] for m in res.json()["items"]]


def test_title_search_is_case_insensitive(client, library):
    res = client.get("/api/search?q=matrix&sortBy=title&sortDir=asc")
    assert res.status_code == 200
    assert _titles(res) == ["Matrix Reloaded", "The Matrix"]


def test_wildcards_in_query_are_literal(client, library):
    res = client.get("/api/search", params={"q": "%"})
    assert res.json()["total"] == 0


def test_year_bounds_inclusive_and_exclude_null(client, library):
    res = client.get("/api/search?yearMin=2000&yearMax=2010&limit=50")
    body = res.json()
    assert sorted(_titles(res)) == ["Matrix Reloaded", "Memento", "The Wire"]
    assert all(2000 <= m["year"] <= 2010 for m in body["items"])


def test_single_year_bound(client, library):
    res = client.get("/api/search?yearMax=1999")
    assert sorted(_titles(res)) == ["Dune", "The Matrix"]


def test_malformed_year_is_ignored(client, library):
    res = client.get("/api/search?yearMin=abc")
    assert res.status_code == 200
    assert res.json()["total"] == 6


def test_type_filter_set(client, library):
    res = client.get("/api/search?type=BOOK,TV_SHOW")
    assert sorted(_titles(res)) == ["Dune", "The Wire", "Untold"]


def test_unknown_type_matches_nothing(client, library):
    res = client.get("/api/search?type=VINYL")
    assert res.json()["total"] == 0


def test_genre_filter_is_exact_match(client, library):
    res = client.get("/api/search?genre=Sci-Fi")
    # "Sci-Fi, Adventure"는 완전일치가 아니므로 제외
    assert sorted(_titles(res)) == ["Matrix Reloaded", "The Matrix", "Untold"]


def test_sort_by_rating_desc(client, library):
    res = client.get("/api/search?type=MOVIE,TV_SHOW&sortBy=rating&sortDir=desc")
    assert _titles(res) == ["The Wire", "The Matrix", "Memento", "Matrix Reloaded"]


def test_unknown_sort_field_falls_back_to_title(client, library):
    res = client.get("/api/search?sortBy=bogus&sortDir=asc")
    assert _titles(res)[0] == "Dune"


@pytest.mark.parametrize("limit", [1, 2, 4, 6, 7])
def test_pagination_shape(client, library, limit):
    body = client.get(f"/api/search?limit={limit}&page=1").json()
    assert body["total"] == 6
    assert body["limit"] == limit
    assert body["page"] == 1
    assert body["totalPages"] == math.ceil(6 / limit)
    assert len(body["items"]) <= limit


def test_pages_cover_all_items_without_overlap(client, library):
    seen = []
    for page in (1, 2, 3):
        seen += _titles(client.get(f"/api/search?limit=2&page={page}&sortBy=title&sortDir=asc"))
    assert len(seen) == len(set(seen)) == 6


def test_page_past_the_end_is_empty(client, library):
    body = client.get("/api/search?limit=5&page=3").json()
    assert body["items"] == []
    assert body["total"] == 6


def test_empty_library(client):
    body = client.get("/api/search").json()
    assert body == {"items": [], "total": 0, "page": 1, "limit": 20, "totalPages": 0}


def test_huge_page_is_empty_not_an_error(client, library):
    res = client.get("/api/search?page=99999999999999999999&limit=10")
    assert res.status_code == 200
    body = res.json()
    assert body["items"] == []
    assert body["total"] == 6


def test_huge_year_bound_is_ignored(client, library):
    res = client.get("/api/search?yearMin=99999999999999999999")
    assert res.status_code == 200
    assert res.json()["total"] == 6


def test_storage_failure_is_500(client, monkeypatch):
    def broken(db, params):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(search, "run_search", broken)
    res = client.get("/api/search")
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Failed to search media"
    assert "disk I/O error" in body["details"]
