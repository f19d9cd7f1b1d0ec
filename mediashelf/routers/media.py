# ---------------------------------------------
# media.py — 미디어 항목 CRUD 엔드포인트
# ---------------------------------------------

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, selectinload

from ..db import get_db
from ..errors import NotFoundError, ValidationError, storage_errors
from ..models import MediaItem, MediaStatus
from ..schemas import MediaIn, MediaOut

logger = logging.getLogger(__name__)

# 이 라우터의 모든 엔드포인트는 "/api/media"로 시작
router = APIRouter(prefix="/api/media", tags=["media"])


def _with_relations(db: Session):
    # 응답에 리뷰/즐겨찾기를 포함하므로 미리 로딩
    return db.query(MediaItem).options(
        selectinload(MediaItem.reviews), selectinload(MediaItem.favorites)
    )


def get_media_or_404(db: Session, media_id: int) -> MediaItem:
    media = _with_relations(db).filter(MediaItem.id == media_id).first()
    if media is None:
        raise NotFoundError("Media item not found")
    return media


def _apply(media: MediaItem, payload: MediaIn) -> None:
    """
    요청 바디를 ORM 객체에 반영 (생성/수정 공통, 전체 교체)
    - title, type 필수
    - genre가 리스트면 ", "로 합침
    - status 기본값 RELEASED, 나머지 선택 필드는 비어 있으면 NULL
    """
    if not payload.title or not payload.type:
        raise ValidationError("Title and type are required")

    media.title = payload.title
    media.type = payload.type
    media.genre = payload.genre_string()
    media.year = payload.year
    media.rating = payload.rating
    media.status = payload.status or MediaStatus.RELEASED
    for field in ("description", "director", "author", "imdb_id", "tmdb_id", "isbn", "poster"):
        setattr(media, field, getattr(payload, field) or None)
    for field in ("duration", "pages", "seasons", "episodes"):
        setattr(media, field, getattr(payload, field))


@router.get("", response_model=List[MediaOut])
def list_media(db: Session = Depends(get_db)):
    """전체 미디어 목록 (최근 추가 순)"""
    with storage_errors(db, "Failed to fetch media items"):
        return _with_relations(db).order_by(MediaItem.id.desc()).all()


@router.post("", response_model=MediaOut, status_code=201)
def create_media(payload: MediaIn, db: Session = Depends(get_db)):
    """
    미디어 항목 생성

    요청 바디(JSON) 예:
    {
      "title": "Dune",
      "type": "BOOK",
      "author": "Frank Herbert",
      "pages": 412
    }
    """
    media = MediaItem()
    _apply(media, payload)

    with storage_errors(db, "Failed to create media item"):
        db.add(media)
        db.commit()
        db.refresh(media)

    logger.info("Created media item %s (%s)", media.id, media.title)
    return media


@router.get("/{media_id}", response_model=MediaOut)
def get_media(media_id: int, db: Session = Depends(get_db)):
    with storage_errors(db, "Failed to fetch media item"):
        return get_media_or_404(db, media_id)


@router.put("/{media_id}", response_model=MediaOut)
def update_media(media_id: int, payload: MediaIn, db: Session = Depends(get_db)):
    # 필수값 검증이 존재 확인보다 먼저 (400이 404보다 우선)
    if not payload.title or not payload.type:
        raise ValidationError("Title and type are required")

    with storage_errors(db, "Failed to update media item"):
        media = get_media_or_404(db, media_id)
        _apply(media, payload)
        db.commit()
        db.refresh(media)

    logger.info("Updated media item %s", media_id)
    return media


@router.delete("/{media_id}")
def delete_media(media_id: int, db: Session = Depends(get_db)):
    """삭제 시 리뷰/즐겨찾기/워치리스트/컬렉션 항목까지 cascade 삭제"""
    with storage_errors(db, "Failed to delete media item"):
        media = db.get(MediaItem, media_id)
        if media is None:
            raise NotFoundError("Media item not found")
        db.delete(media)
        db.commit()

    logger.info("Deleted media item %s", media_id)
    return {"message": "Media item deleted successfully"}
