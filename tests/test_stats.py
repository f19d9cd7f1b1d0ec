from datetime import datetime

from mediashelf.models import Collection, MediaType, Review, Tag
from mediashelf.stats import (
    count_genres,
    evaluate_achievements,
    month_windows,
    monthly_activity,
    range_start,
    shift_months,
    top_genres,
)


class _Media:
    def __init__(self, genre):
        self.genre = genre


def _achievement(body, title):
    return next(a for a in body["achievements"] if a["title"] == title)


def test_shift_months_clamps_day():
    assert shift_months(datetime(2025, 8, 31), -6) == datetime(2025, 2, 28)
    assert shift_months(datetime(2024, 3, 31), -1) == datetime(2024, 2, 29)
    assert shift_months(datetime(2025, 1, 15), -1) == datetime(2024, 12, 15)
    assert shift_months(datetime(2025, 12, 1), 1) == datetime(2026, 1, 1)


def test_range_start():
    now = datetime(2026, 10, 19, 15, 30)
    assert range_start("all", now) is None
    assert range_start("bogus", now) is None
    assert range_start("6months", now) == datetime(2026, 4, 19)
    assert range_start("1year", now) == datetime(2025, 10, 19)


def test_genre_split_and_tie_break_by_first_seen():
    media = [_Media("Drama, Sci-Fi"), _Media("Comedy"), _Media("Sci-Fi"), _Media("Comedy,  Drama"), _Media(None)]
    counts = count_genres(media)
    assert counts == {"Drama": 2, "Sci-Fi": 2, "Comedy": 2}
    assert [g["genre"] for g in top_genres(counts)] == ["Drama", "Sci-Fi", "Comedy"]


def test_top_genres_keeps_ten():
    counts = {f"g{i}": i for i in range(15)}
    ranked = top_genres(counts)
    assert len(ranked) == 10
    assert ranked[0] == {"genre": "g14", "count": 14}


def test_month_windows_labels():
    windows = month_windows(datetime(2026, 2, 10))
    labels = [label for label, _, _ in windows]
    assert len(labels) == 12
    assert labels[0] == "Mar 25"
    assert labels[-1] == "Feb 26"


def test_monthly_activity_counts_per_month():
    now = datetime(2026, 10, 19)
    created = [datetime(2026, 10, 1), datetime(2026, 10, 18), datetime(2026, 3, 5), datetime(2020, 1, 1)]
    activity = monthly_activity(created, now)
    by_label = {a["month"]: a["count"] for a in activity}
    assert by_label["Oct 26"] == 2
    assert by_label["Mar 26"] == 1
    assert by_label["Nov 25"] == 0
    assert sum(by_label.values()) == 3


def test_achievements_thresholds():
    summary = {
        "total_media": 0,
        "by_type": {t.value: 0 for t in MediaType},
        "by_rating": {},
        "collection_count": 0,
        "review_count": 0,
        "tag_count": 0,
        "genre_count": 0,
        "watchlist_count": 0,
    }
    assert not any(a["unlocked"] for a in evaluate_achievements(summary))

    summary["by_type"]["BOOK"] = 10
    summary["total_media"] = 10
    unlocked = {a["title"] for a in evaluate_achievements(summary) if a["unlocked"]}
    assert unlocked == {"Getting Started", "Bibliophile"}


def test_stats_endpoint_shape(client):
    body = client.get("/api/stats").json()
    assert body["totalMedia"] == 0
    assert set(body["byType"]) == {t.value for t in MediaType}
    assert body["byStatus"] == {}
    assert body["byRating"] == {}
    assert len(body["monthlyActivity"]) == 12
    assert body["topGenres"] == []
    assert len(body["achievements"]) == 12
    for key in ("favoriteCount", "watchlistCount", "collectionCount", "tagCount", "reviewCount"):
        assert body[key] == 0


def test_bibliophile_unlocks_at_ten_books(client, make_media):
    for i in range(9):
        make_media(f"Book {i}", MediaType.BOOK)
    body = client.get("/api/stats").json()
    assert body["byType"]["BOOK"] == 9
    assert _achievement(body, "Bibliophile")["unlocked"] is False

    make_media("Book 9", MediaType.BOOK)
    body = client.get("/api/stats").json()
    assert body["byType"]["BOOK"] == 10
    assert _achievement(body, "Bibliophile")["unlocked"] is True


def test_time_range_bounds_media_and_counts(client, db, make_media):
    old = datetime(2001, 1, 1)
    make_media("Old", MediaType.MOVIE, genre="Noir", created_at=old)
    fresh = make_media("Fresh", MediaType.MOVIE, genre="Comedy")
    db.add(Review(rating=8, user_id=1, media_id=fresh.id, created_at=old))
    db.add(Review(rating=6, user_id=1, media_id=fresh.id))
    db.add(Collection(name="Old list", user_id=1, created_at=old))
    db.add(Tag(name="cozy"))
    db.commit()

    everything = client.get("/api/stats?timeRange=all").json()
    assert everything["totalMedia"] == 2
    assert everything["reviewCount"] == 2
    assert everything["collectionCount"] == 1

    recent = client.get("/api/stats?timeRange=6months").json()
    assert recent["totalMedia"] == 1
    assert recent["reviewCount"] == 1
    assert recent["collectionCount"] == 0
    assert recent["tagCount"] == 1
    assert recent["topGenres"] == [{"genre": "Comedy", "count": 1}]
    assert recent["monthlyActivity"][-1]["count"] == 1
