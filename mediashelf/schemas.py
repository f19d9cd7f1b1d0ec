from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import MediaStatus, MediaType, Priority


# ------------------------------------------------------------
# ApiModel: 모든 스키마의 베이스
#  - JSON 필드명은 camelCase (imdbId, createdAt, totalPages ...)
#  - 입력은 camelCase/snake_case 모두 허용
#  - ORM 객체에서 바로 변환 가능 (from_attributes)
# ------------------------------------------------------------
class ApiModel(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


# ------------------------------------------------------------
# 응답 스키마
# ------------------------------------------------------------
class TagOut(ApiModel):
    id: int
    name: str
    color: Optional[str] = None


class ReviewOut(ApiModel):
    id: int
    rating: int
    comment: Optional[str] = None
    is_public: bool
    user_id: int
    media_id: int
    created_at: datetime
    updated_at: datetime


class FavoriteRef(ApiModel):
    id: int
    user_id: int
    media_id: int
    created_at: datetime


class MediaSummary(ApiModel):
    """관계 없이 미디어 컬럼만 노출"""
    id: int
    title: str
    type: MediaType
    genre: Optional[str] = None
    year: Optional[int] = None
    rating: Optional[float] = None
    status: MediaStatus
    description: Optional[str] = None
    director: Optional[str] = None
    duration: Optional[int] = None
    seasons: Optional[int] = None
    episodes: Optional[int] = None
    author: Optional[str] = None
    pages: Optional[int] = None
    imdb_id: Optional[str] = None
    tmdb_id: Optional[str] = None
    isbn: Optional[str] = None
    poster: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MediaWithTags(MediaSummary):
    tags: List[TagOut] = []


class MediaOut(MediaSummary):
    reviews: List[ReviewOut] = []
    favorites: List[FavoriteRef] = []


class FavoriteOut(FavoriteRef):
    media_item: MediaSummary


class WatchlistOut(ApiModel):
    id: int
    user_id: int
    media_id: int
    priority: Priority
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    media_item: MediaWithTags


class CollectionItemOut(ApiModel):
    id: int
    collection_id: int
    media_id: int
    order: int
    notes: Optional[str] = None
    added_at: datetime
    media_item: MediaWithTags


class CollectionOut(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    is_public: bool
    user_id: int
    created_at: datetime
    updated_at: datetime
    items: List[CollectionItemOut] = []
    item_count: int = 0


class MediaTitle(ApiModel):
    title: str
    type: MediaType


class ReviewCreatedOut(ReviewOut):
    media_item: MediaTitle


class SearchResultsOut(ApiModel):
    items: List[MediaOut]
    total: int
    page: int
    limit: int
    total_pages: int


class DashboardOut(ApiModel):
    total_media: int
    total_movies: int
    total_shows: int
    total_books: int
    total_games: int
    recently_added: List[MediaSummary]
    top_rated: List[MediaSummary]


class MonthlyCount(ApiModel):
    month: str
    count: int


class GenreCount(ApiModel):
    genre: str
    count: int


class Achievement(ApiModel):
    title: str
    description: str
    icon: str
    unlocked: bool


class StatsOut(ApiModel):
    total_media: int
    favorite_count: int
    watchlist_count: int
    collection_count: int
    tag_count: int
    review_count: int
    by_type: Dict[str, int]
    by_status: Dict[str, int]
    by_rating: Dict[int, int]
    monthly_activity: List[MonthlyCount]
    top_genres: List[GenreCount]
    achievements: List[Achievement]


# ------------------------------------------------------------
# 요청 바디 스키마
#  - 필수 필드도 Optional로 받고, 누락 시 라우터에서
#    {"error": "..."} 400 메시지를 직접 만든다
# ------------------------------------------------------------
_NUMERIC_MEDIA_FIELDS = ("year", "rating", "duration", "pages", "seasons", "episodes")


class MediaIn(ApiModel):
    title: Optional[str] = None
    type: Optional[MediaType] = None
    genre: Union[List[str], str, None] = None  # 리스트면 ", "로 합침
    year: Optional[int] = None
    rating: Optional[float] = Field(None, ge=0, le=10)
    status: Optional[MediaStatus] = None
    description: Optional[str] = None
    director: Optional[str] = None
    author: Optional[str] = None
    duration: Optional[int] = None
    pages: Optional[int] = None
    seasons: Optional[int] = None
    episodes: Optional[int] = None
    imdb_id: Optional[str] = None
    tmdb_id: Optional[str] = None
    isbn: Optional[str] = None
    poster: Optional[str] = None

    # 폼에서 넘어오는 빈 문자열은 "값 없음"으로 취급
    @field_validator(*_NUMERIC_MEDIA_FIELDS, "status", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def genre_string(self) -> str:
        if isinstance(self.genre, list):
            return ", ".join(g.strip() for g in self.genre if g and g.strip())
        return self.genre or ""


class MediaRef(ApiModel):
    media_id: Optional[int] = None


class WatchlistIn(MediaRef):
    priority: Priority = Priority.MEDIUM
    notes: Optional[str] = ""


class WatchlistPatch(MediaRef):
    priority: Optional[Priority] = None
    notes: Optional[str] = None


class CollectionIn(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None


class CollectionItemIn(MediaRef):
    notes: Optional[str] = None


class ReviewIn(MediaRef):
    rating: Optional[float] = None
    comment: Optional[str] = None
