# -----------------------------------------------------------
# reviews.py — 리뷰 작성/조회 엔드포인트
# -----------------------------------------------------------

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db, get_owner_id
from ..errors import NotFoundError, ValidationError, storage_errors
from ..models import MediaItem, Review
from ..schemas import ReviewCreatedOut, ReviewIn, ReviewOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["reviews"])


def create_review(db: Session, owner_id: int, payload: ReviewIn) -> Review:
    """
    리뷰 1건 생성. 같은 미디어에 대한 중복 리뷰도 그대로 추가된다.
    - mediaId, rating 필수 (rating 0도 누락으로 취급)
    - rating은 1~10, 소수는 버림
    """
    if not payload.media_id or not payload.rating:
        raise ValidationError("Media ID and rating are required")
    if payload.rating < 1 or payload.rating > 10:
        raise ValidationError("Rating must be between 1 and 10")

    with storage_errors(db, "Failed to create review"):
        if db.get(MediaItem, payload.media_id) is None:
            raise NotFoundError("Media item not found")

        review = Review(
            media_id=payload.media_id,
            rating=int(payload.rating),
            comment=payload.comment or None,
            is_public=True,
            user_id=owner_id,
        )
        db.add(review)
        db.commit()
        db.refresh(review)

    logger.info("Created review %s for media %s", review.id, review.media_id)
    return review


@router.post("/add-review", response_model=ReviewCreatedOut, status_code=201)
def add_review(payload: ReviewIn, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    return create_review(db, owner_id, payload)


@router.post("/add-media", response_model=ReviewOut, deprecated=True)
def add_review_legacy(payload: ReviewIn, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    """구버전 클라이언트용 리뷰 생성 경로 (200 응답)"""
    return create_review(db, owner_id, payload)


@router.get("/reviews", response_model=List[ReviewOut])
def list_reviews(
    media_id: Optional[int] = Query(None, alias="mediaId"),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    """사용자의 리뷰 목록 (mediaId로 필터 가능, 최신순)"""
    with storage_errors(db, "Failed to fetch reviews"):
        query = db.query(Review).filter(Review.user_id == owner_id)
        if media_id is not None:
            query = query.filter(Review.media_id == media_id)
        return query.order_by(Review.id.desc()).all()
