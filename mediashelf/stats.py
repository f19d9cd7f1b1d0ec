# ------------------------------------------------------------
# stats.py — 대시보드 통계 집계
#   타입별/장르별 집계, 최근 12개월 활동, 업적(achievement) 판정
# ------------------------------------------------------------

import calendar
import logging
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from .models import (
    Collection,
    Favorite,
    MediaItem,
    MediaType,
    Review,
    Tag,
    WatchlistItem,
    utcnow,
)

logger = logging.getLogger(__name__)

# timeRange 값 → 거슬러 올라갈 개월 수 (None이면 전체 기간)
TIME_RANGES = {"all": None, "6months": 6, "1year": 12}

TOP_GENRE_LIMIT = 10
ACTIVITY_MONTHS = 12


def shift_months(d: datetime, months: int) -> datetime:
    """달력 기준으로 months개월 이동. 일(day)은 해당 월의 말일로 보정"""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)


def range_start(time_range: str, now: datetime) -> Optional[datetime]:
    months = TIME_RANGES.get(time_range)
    if not months:
        return None
    return shift_months(now, -months).replace(hour=0, minute=0, second=0, microsecond=0)


def count_by_type(media: Iterable[MediaItem]) -> Dict[str, int]:
    # 모든 타입을 0으로 채워둔 뒤 집계
    counts = OrderedDict((t.value, 0) for t in MediaType)
    for m in media:
        counts[MediaType(m.type).value] += 1
    return dict(counts)


def count_genres(media: Iterable[MediaItem]) -> Dict[str, int]:
    """쉼표로 나눈 장르별 빈도. dict 순서 = 처음 등장한 순서"""
    counts: Dict[str, int] = {}
    for m in media:
        for genre in (m.genre or "").split(","):
            genre = genre.strip()
            if genre:
                counts[genre] = counts.get(genre, 0) + 1
    return counts


def top_genres(counts: Dict[str, int], limit: int = TOP_GENRE_LIMIT) -> List[dict]:
    # sorted()는 안정 정렬 → 동점이면 처음 등장한 장르가 앞
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [{"genre": g, "count": c} for g, c in ranked[:limit]]


def month_windows(now: datetime, months: int = ACTIVITY_MONTHS) -> List[Tuple[str, datetime, datetime]]:
    """
    현재 월로 끝나는 months개 달력 월의 (라벨, 시작, 다음 달 시작) 목록.
    오래된 달이 먼저. 라벨 예: "Jan 25"
    """
    first_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    windows = []
    for i in range(months - 1, -1, -1):
        start = shift_months(first_of_month, -i)
        end = shift_months(start, 1)
        windows.append((start.strftime("%b %y"), start, end))
    return windows


def monthly_activity(created: Iterable[datetime], now: datetime) -> List[dict]:
    """각 달에 생성된 미디어 수"""
    windows = month_windows(now)
    buckets = OrderedDict(((start.year, start.month), 0) for _, start, _ in windows)
    for ts in created:
        key = (ts.year, ts.month)
        if key in buckets:
            buckets[key] += 1
    return [
        {"month": label, "count": buckets[(start.year, start.month)]}
        for label, start, _ in windows
    ]


# (제목, 설명, 아이콘, 판정 함수)
ACHIEVEMENTS = [
    ("Getting Started", "Add your first media item", "🌟",
     lambda s: s["total_media"] > 0),
    ("Bibliophile", "Add 10 books to your library", "📚",
     lambda s: s["by_type"][MediaType.BOOK.value] >= 10),
    ("Movie Buff", "Add 25 movies to your library", "🎬",
     lambda s: s["by_type"][MediaType.MOVIE.value] >= 25),
    ("TV Addict", "Add 15 TV shows to your library", "📺",
     lambda s: s["by_type"][MediaType.TV_SHOW.value] >= 15),
    ("Gamer", "Add 20 video games to your library", "🎮",
     lambda s: s["by_type"][MediaType.VIDEO_GAME.value] >= 20),
    ("Curator", "Create 5 collections", "🗂️",
     lambda s: s["collection_count"] >= 5),
    ("Critic", "Write 10 reviews", "✍️",
     lambda s: s["review_count"] >= 10),
    ("Organized", "Use 20 different tags", "🏷️",
     lambda s: s["tag_count"] >= 20),
    ("Completionist", "Have 100 items in your library", "💯",
     lambda s: s["total_media"] >= 100),
    ("Five Star Fan", "Rate 5 items with 5 stars", "⭐",
     lambda s: s["by_rating"].get(5, 0) >= 5),
    ("Genre Explorer", "Explore 15 different genres", "🗺️",
     lambda s: s["genre_count"] >= 15),
    ("Wishlist Warrior", "Have 50 items in your watchlist", "📋",
     lambda s: s["watchlist_count"] >= 50),
]


def evaluate_achievements(summary: dict) -> List[dict]:
    return [
        {"title": title, "description": desc, "icon": icon, "unlocked": bool(check(summary))}
        for title, desc, icon, check in ACHIEVEMENTS
    ]


def _owned_count(db: Session, model, owner_id: int, since: Optional[datetime]) -> int:
    query = db.query(model).filter(model.user_id == owner_id)
    if since is not None:
        query = query.filter(model.created_at >= since)
    return query.count()


def compute_stats(db: Session, owner_id: int, time_range: str = "all", now: Optional[datetime] = None) -> dict:
    """
    /api/stats 응답 본문 계산.
    - 기간 안의 미디어 전체를 메모리로 읽어 집계 (소규모 라이브러리 전제)
    - 즐겨찾기/워치리스트/컬렉션/리뷰 수는 같은 기간 조건으로 각각 카운트
    - byStatus / byRating은 아직 집계하지 않음 (빈 맵)
    """
    now = now or utcnow()
    since = range_start(time_range, now)

    media_query = db.query(MediaItem)
    if since is not None:
        media_query = media_query.filter(MediaItem.created_at >= since)
    media = media_query.all()

    genre_counts = count_genres(media)

    summary = {
        "total_media": len(media),
        "favorite_count": _owned_count(db, Favorite, owner_id, since),
        "watchlist_count": _owned_count(db, WatchlistItem, owner_id, since),
        "collection_count": _owned_count(db, Collection, owner_id, since),
        "tag_count": db.query(Tag).count(),
        "review_count": _owned_count(db, Review, owner_id, since),
        "by_type": count_by_type(media),
        "by_status": {},
        "by_rating": {},
        "genre_count": len(genre_counts),
    }

    # 월별 활동은 timeRange와 무관하게 최근 12개월 전체 미디어 기준
    window_start = month_windows(now)[0][1]
    created = [
        row.created_at
        for row in db.query(MediaItem.created_at).filter(MediaItem.created_at >= window_start)
    ]

    stats = {k: v for k, v in summary.items() if k != "genre_count"}
    stats["monthly_activity"] = monthly_activity(created, now)
    stats["top_genres"] = top_genres(genre_counts)
    stats["achievements"] = evaluate_achievements(summary)

    logger.debug("stats timeRange=%s totalMedia=%d", time_range, stats["total_media"])
    return stats
