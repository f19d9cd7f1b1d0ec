# --------------------------------------------------------------
# search.py — 미디어 검색 (필터/정렬/페이지네이션)
# --------------------------------------------------------------

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import storage_errors
from ..query_builder import SearchParams, run_search
from ..schemas import SearchResultsOut

router = APIRouter(prefix="/api", tags=["search"])


@router.get("/search", response_model=SearchResultsOut)
def search_media(request: Request, db: Session = Depends(get_db)):
    """
    GET /api/search?q&type&genre&yearMin&yearMax&sortBy&sortDir&page&limit

    쿼리 파라미터는 FastAPI 타입 검증을 거치지 않고 원문 그대로 받는다.
    (예: yearMin=abc → 422가 아니라 필터 생략)
    """
    params = SearchParams.from_query(request.query_params)
    with storage_errors(db, "Failed to search media"):
        return run_search(db, params)
