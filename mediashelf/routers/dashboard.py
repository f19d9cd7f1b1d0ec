# --------------------------------------------------------------
# dashboard.py — 홈 화면 요약 (타입별 개수, 최근 추가, 높은 평점)
# --------------------------------------------------------------

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import storage_errors
from ..models import MediaItem, MediaType
from ..schemas import DashboardOut

router = APIRouter(prefix="/api", tags=["dashboard"])

DASHBOARD_LIST_SIZE = 8


def build_dashboard(db: Session) -> dict:
    counts = dict(db.query(MediaItem.type, func.count(MediaItem.id)).group_by(MediaItem.type).all())

    recently_added = db.query(MediaItem).order_by(MediaItem.id.desc()).limit(DASHBOARD_LIST_SIZE).all()

    # 평점 없는 항목은 제외
    top_rated = (
        db.query(MediaItem)
        .filter(MediaItem.rating.isnot(None))
        .order_by(MediaItem.rating.desc(), MediaItem.id.desc())
        .limit(DASHBOARD_LIST_SIZE)
        .all()
    )

    return {
        "total_media": sum(counts.values()),
        "total_movies": counts.get(MediaType.MOVIE, 0),
        "total_shows": counts.get(MediaType.TV_SHOW, 0),
        "total_books": counts.get(MediaType.BOOK, 0),
        "total_games": counts.get(MediaType.VIDEO_GAME, 0),
        "recently_added": recently_added,
        "top_rated": top_rated,
    }


@router.get("/dashboard", response_model=DashboardOut)
def get_dashboard(db: Session = Depends(get_db)):
    with storage_errors(db, "Failed to fetch dashboard data"):
        return build_dashboard(db)
