# -----------------------------------------------------------
# favorites.py — 즐겨찾기 조회/추가/삭제
# -----------------------------------------------------------

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..db import get_db, get_owner_id
from ..errors import ConflictError, NotFoundError, ValidationError, storage_errors
from ..models import Favorite, MediaItem
from ..schemas import FavoriteOut, MediaRef

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


def find_favorite(db: Session, owner_id: int, media_id: int):
    return (
        db.query(Favorite)
        .filter(Favorite.user_id == owner_id, Favorite.media_id == media_id)
        .first()
    )


@router.get("", response_model=List[FavoriteOut])
def list_favorites(db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    with storage_errors(db, "Failed to fetch favorites"):
        return (
            db.query(Favorite)
            .options(joinedload(Favorite.media_item))
            .filter(Favorite.user_id == owner_id)
            .order_by(Favorite.id.desc())
            .all()
        )


@router.post("", response_model=FavoriteOut, status_code=201)
def add_favorite(payload: MediaRef, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    """
    즐겨찾기 추가
    - 이미 있으면 400 "Already in favorites"
    - 동시 요청으로 존재 확인을 통과해도 (user_id, media_id) 유니크 제약에서 걸러짐
    """
    if not payload.media_id:
        raise ValidationError("Media ID is required")

    with storage_errors(db, "Failed to add to favorites"):
        if db.get(MediaItem, payload.media_id) is None:
            raise NotFoundError("Media item not found")

        if find_favorite(db, owner_id, payload.media_id):
            raise ConflictError("Already in favorites")

        favorite = Favorite(user_id=owner_id, media_id=payload.media_id)
        db.add(favorite)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Already in favorites")
        db.refresh(favorite)

    logger.info("Added media %s to favorites", payload.media_id)
    return favorite


@router.delete("")
def remove_favorite(payload: MediaRef, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    """없는 항목 삭제도 성공으로 처리 (멱등)"""
    if not payload.media_id:
        raise ValidationError("Media ID is required")

    with storage_errors(db, "Failed to remove from favorites"):
        db.query(Favorite).filter(
            Favorite.user_id == owner_id, Favorite.media_id == payload.media_id
        ).delete(synchronize_session=False)
        db.commit()

    return {"success": True}
