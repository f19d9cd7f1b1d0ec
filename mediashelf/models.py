# ------------------------------------------------------------
# models.py — SQLAlchemy ORM 모델 정의
#   users / media_items / reviews / favorites / watchlist_items
#   collections / collection_items / tags / media_tags
# ------------------------------------------------------------

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base


def utcnow() -> datetime:
    # DB에는 naive UTC로 저장
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ------------------------------
# Enum 정의 (DB에는 이름으로 저장)
# ------------------------------
class MediaType(str, enum.Enum):
    BOOK = "BOOK"
    MOVIE = "MOVIE"
    TV_SHOW = "TV_SHOW"
    DOCUMENTARY = "DOCUMENTARY"
    PODCAST = "PODCAST"
    AUDIOBOOK = "AUDIOBOOK"
    VIDEO_GAME = "VIDEO_GAME"
    ANIME = "ANIME"
    MANGA = "MANGA"


class MediaStatus(str, enum.Enum):
    RELEASED = "RELEASED"
    UPCOMING = "UPCOMING"
    IN_PROGRESS = "IN_PROGRESS"
    CANCELLED = "CANCELLED"


class Priority(str, enum.Enum):
    # 선언 순서 = 중요도 순서 (LOW < MEDIUM < HIGH < URGENT)
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


PRIORITY_RANK = {p: i for i, p in enumerate(Priority)}


# ------------------------------
# media_tags: MediaItem <-> Tag 다대다 교차 테이블
# ------------------------------
media_tags = Table(
    "media_tags",
    Base.metadata,
    Column("media_id", Integer, ForeignKey("media_items.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


# ------------------------------
# User: 사용자 테이블 (인증 없음, 기본 사용자 1명)
# ------------------------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(100))
    avatar = Column(String(500))
    bio = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    reviews = relationship("Review", back_populates="user", cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="user", cascade="all, delete-orphan")
    watchlist_items = relationship("WatchlistItem", back_populates="user", cascade="all, delete-orphan")
    collections = relationship("Collection", back_populates="user", cascade="all, delete-orphan")


# ------------------------------
# MediaItem: 영화/드라마/책 등 카탈로그 항목
# ------------------------------
class MediaItem(Base):
    __tablename__ = "media_items"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    type = Column(Enum(MediaType, name="media_type"), nullable=False, index=True)

    # 쉼표로 이어붙인 장르 문자열 (예: "Sci-Fi, Drama")
    genre = Column(String(255))
    year = Column(Integer, index=True)
    rating = Column(Float)  # 0~10
    status = Column(Enum(MediaStatus, name="media_status"), nullable=False, default=MediaStatus.RELEASED)
    description = Column(Text)

    # 영화
    director = Column(String(255))
    duration = Column(Integer)  # 분 단위
    # 드라마
    seasons = Column(Integer)
    episodes = Column(Integer)
    # 책
    author = Column(String(255))
    pages = Column(Integer)

    # 외부 식별자
    imdb_id = Column(String(32))
    tmdb_id = Column(String(32))
    isbn = Column(String(32))
    poster = Column(String(500))

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # 미디어 삭제 시 딸린 리뷰/즐겨찾기/워치리스트/컬렉션 항목도 함께 삭제
    reviews = relationship("Review", back_populates="media_item", cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="media_item", cascade="all, delete-orphan")
    watchlist_items = relationship("WatchlistItem", back_populates="media_item", cascade="all, delete-orphan")
    collection_items = relationship("CollectionItem", back_populates="media_item", cascade="all, delete-orphan")
    tags = relationship("Tag", secondary=media_tags, back_populates="media_items")

    def __repr__(self):
        return f"<MediaItem {self.id}:{self.title} ({self.type})>"


# ------------------------------
# Review: 평점(1~10 정수) + 코멘트
# - 같은 사용자/미디어에 여러 건 허용 (유니크 제약 없음)
# ------------------------------
class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    is_public = Column(Boolean, nullable=False, default=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    media_id = Column(Integer, ForeignKey("media_items.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="reviews")
    media_item = relationship("MediaItem", back_populates="reviews")


class Favorite(Base):
    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    media_id = Column(Integer, ForeignKey("media_items.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="favorites")
    media_item = relationship("MediaItem", back_populates="favorites")

    # 동시 요청 경쟁에서도 중복이 생기지 않도록 DB 레벨 유니크 제약
    __table_args__ = (UniqueConstraint("user_id", "media_id", name="uix_favorite_user_media"),)


class WatchlistItem(Base):
    __tablename__ = "watchlist_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    media_id = Column(Integer, ForeignKey("media_items.id"), nullable=False)
    priority = Column(Enum(Priority, name="priority"), nullable=False, default=Priority.MEDIUM)
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="watchlist_items")
    media_item = relationship("MediaItem", back_populates="watchlist_items")

    __table_args__ = (UniqueConstraint("user_id", "media_id", name="uix_watchlist_user_media"),)


# ------------------------------
# Collection: 사용자가 만든 순서 있는 미디어 묶음
# ------------------------------
class Collection(Base):
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    is_public = Column(Boolean, nullable=False, default=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="collections")
    items = relationship(
        "CollectionItem",
        back_populates="collection",
        cascade="all, delete-orphan",
        order_by="CollectionItem.order",
    )

    @property
    def item_count(self) -> int:
        return len(self.items)


class CollectionItem(Base):
    __tablename__ = "collection_items"

    id = Column(Integer, primary_key=True, index=True)
    collection_id = Column(Integer, ForeignKey("collections.id"), nullable=False)
    media_id = Column(Integer, ForeignKey("media_items.id"), nullable=False)
    order = Column(Integer, nullable=False, default=0)
    notes = Column(Text)
    added_at = Column(DateTime, default=utcnow, nullable=False)

    collection = relationship("Collection", back_populates="items")
    media_item = relationship("MediaItem", back_populates="collection_items")

    __table_args__ = (UniqueConstraint("collection_id", "media_id", name="uix_collection_media"),)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(64), unique=True, nullable=False)
    color = Column(String(16))
    created_at = Column(DateTime, default=utcnow, nullable=False)

    media_items = relationship("MediaItem", secondary=media_tags, back_populates="tags")
