# -----------------------------------------------------------
# watchlist.py — 워치리스트 조회/추가/삭제/수정
# -----------------------------------------------------------

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from ..db import get_db, get_owner_id
from ..errors import ConflictError, NotFoundError, ValidationError, storage_errors
from ..models import PRIORITY_RANK, MediaItem, WatchlistItem
from ..schemas import MediaRef, WatchlistIn, WatchlistOut, WatchlistPatch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])

# enum 이름의 알파벳 순이 아니라 LOW < MEDIUM < HIGH < URGENT 순서로 정렬
_priority_rank = case(PRIORITY_RANK, value=WatchlistItem.priority)


def _watchlist_query(db: Session, owner_id: int):
    return (
        db.query(WatchlistItem)
        .options(joinedload(WatchlistItem.media_item).selectinload(MediaItem.tags))
        .filter(WatchlistItem.user_id == owner_id)
    )


def find_entry(db: Session, owner_id: int, media_id: int):
    return _watchlist_query(db, owner_id).filter(WatchlistItem.media_id == media_id).first()


def _get_entry_or_404(db: Session, owner_id: int, media_id: int) -> WatchlistItem:
    entry = find_entry(db, owner_id, media_id)
    if entry is None:
        raise NotFoundError("Watchlist item not found")
    return entry


@router.get("", response_model=List[WatchlistOut])
def list_watchlist(db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    """우선순위 높은 순, 같은 우선순위는 최근 추가 순"""
    with storage_errors(db, "Failed to fetch watchlist"):
        return (
            _watchlist_query(db, owner_id)
            .order_by(_priority_rank.desc(), WatchlistItem.created_at.desc())
            .all()
        )


@router.post("", response_model=WatchlistOut, status_code=201)
def add_to_watchlist(payload: WatchlistIn, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    if not payload.media_id:
        raise ValidationError("Media ID is required")

    with storage_errors(db, "Failed to add to watchlist"):
        if db.get(MediaItem, payload.media_id) is None:
            raise NotFoundError("Media item not found")

        if find_entry(db, owner_id, payload.media_id):
            raise ConflictError("Already in watchlist")

        entry = WatchlistItem(
            user_id=owner_id,
            media_id=payload.media_id,
            priority=payload.priority,
            notes=payload.notes or "",
        )
        db.add(entry)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Already in watchlist")
        db.refresh(entry)

    logger.info("Added media %s to watchlist (%s)", payload.media_id, payload.priority.value)
    return entry


@router.delete("")
def remove_from_watchlist(payload: MediaRef, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    if not payload.media_id:
        raise ValidationError("Media ID is required")

    with storage_errors(db, "Failed to remove from watchlist"):
        entry = _get_entry_or_404(db, owner_id, payload.media_id)
        db.delete(entry)
        db.commit()

    return {"success": True}


@router.patch("", response_model=WatchlistOut)
def update_watchlist_item(payload: WatchlistPatch, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    """priority / notes 중 바디에 들어온 값만 수정"""
    if not payload.media_id:
        raise ValidationError("Media ID is required")

    with storage_errors(db, "Failed to update watchlist item"):
        entry = _get_entry_or_404(db, owner_id, payload.media_id)
        if payload.priority is not None:
            entry.priority = payload.priority
        if "notes" in payload.model_fields_set:
            entry.notes = payload.notes
        db.commit()
        db.refresh(entry)

    return entry
