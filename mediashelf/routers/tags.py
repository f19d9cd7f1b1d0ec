# --------------------------------------------------------------
# tags.py — 태그 목록 조회 (읽기 전용)
# --------------------------------------------------------------

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import storage_errors
from ..models import Tag
from ..schemas import TagOut

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("", response_model=List[TagOut])
def list_tags(db: Session = Depends(get_db)):
    # 태그는 읽기 전용 (편집 API 없음)
    with storage_errors(db, "Failed to fetch tags"):
        return db.query(Tag).order_by(Tag.name.asc()).all()
