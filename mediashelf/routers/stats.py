# --------------------------------------------------------------
# stats.py — 통계/업적 엔드포인트
# --------------------------------------------------------------

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db, get_owner_id
from ..errors import storage_errors
from ..schemas import StatsOut
from ..stats import compute_stats

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=StatsOut)
def get_stats(
    time_range: str = Query("all", alias="timeRange"),  # all | 6months | 1year (그 외 값은 all)
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    with storage_errors(db, "Failed to fetch stats"):
        return compute_stats(db, owner_id, time_range)
