# ------------------------------------------------------------
# query_builder.py — 검색 쿼리스트링 → 필터/정렬/페이지네이션
# ------------------------------------------------------------
#
# 입력 (모두 원본 쿼리스트링 그대로):
#   q        제목 부분일치 (대소문자 무시, 제목만 검색)
#   type     쉼표 구분 MediaType 집합
#   genre    쉼표 구분 장르 문자열 집합 (완전일치)
#   yearMin  / yearMax  포함 경계, 각각 독립 적용
#   sortBy   title | year | rating | createdAt | updatedAt
#   sortDir  asc | desc
#   page     1부터 시작
#   limit    페이지 크기
#
# 숫자 파라미터 파싱 실패는 오류가 아니라 "값 없음"(필터 생략)으로 처리한다.

import logging
import math
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from sqlalchemy import false
from sqlalchemy.orm import Session, selectinload

from .models import MediaItem, MediaType

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# OFFSET/LIMIT 및 정수 비교값은 DB의 64비트 부호 정수 범위를 넘으면 안 됨
MAX_SQL_INT = 2 ** 63 - 1

DEFAULT_SORT_BY = "title"
DEFAULT_SORT_DIR = "desc"

# 정렬 가능한 필드 (API 이름 → 컬럼). 보조 정렬 키는 두지 않는다.
SORT_COLUMNS = {
    "title": MediaItem.title,
    "year": MediaItem.year,
    "rating": MediaItem.rating,
    "createdAt": MediaItem.created_at,
    "updatedAt": MediaItem.updated_at,
}


def parse_int(raw) -> Optional[int]:
    """정수 파싱. 비어있거나 잘못된 값이면 None"""
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def parse_bound(raw) -> Optional[int]:
    """연도 경계용. DB 정수 범위를 벗어나면 잘못된 값과 같이 None"""
    value = parse_int(raw)
    if value is None or not -MAX_SQL_INT <= value <= MAX_SQL_INT:
        return None
    return value


def split_csv(raw: Optional[str]) -> Optional[List[str]]:
    """
    "a, b,,c" → ["a", "b", "c"]
    파라미터가 없거나 공백뿐이면 None (필터 자체를 적용하지 않음)
    """
    if raw is None or not raw.strip():
        return None
    return [token.strip() for token in raw.split(",") if token.strip()]


def parse_types(raw: Optional[str]) -> Optional[List[MediaType]]:
    """
    알 수 없는 타입 값은 버린다.
    값이 주어졌는데 전부 알 수 없는 값이면 빈 리스트 → 결과 없음.
    """
    tokens = split_csv(raw)
    if tokens is None:
        return None
    known = {t.value for t in MediaType}
    return [MediaType(t.upper()) for t in tokens if t.upper() in known]


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class SearchParams:
    q: str = ""
    types: Optional[List[MediaType]] = None
    genres: Optional[List[str]] = None
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    sort_by: str = DEFAULT_SORT_BY
    sort_dir: str = DEFAULT_SORT_DIR
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_query(cls, params: Mapping[str, str]) -> "SearchParams":
        """request.query_params (또는 dict)에서 검색 조건을 만든다"""
        sort_by = params.get("sortBy") or DEFAULT_SORT_BY
        if sort_by not in SORT_COLUMNS:
            sort_by = DEFAULT_SORT_BY

        sort_dir = (params.get("sortDir") or DEFAULT_SORT_DIR).lower()
        if sort_dir not in ("asc", "desc"):
            sort_dir = DEFAULT_SORT_DIR

        page = parse_int(params.get("page"))
        if page is None or page < 1:
            page = 1

        # 0, 음수, 잘못된 값은 모두 기본 페이지 크기
        limit = parse_int(params.get("limit"))
        if limit is None or limit < 1:
            limit = DEFAULT_PAGE_SIZE
        limit = min(limit, MAX_PAGE_SIZE)

        # (page - 1) * limit 이 정수 범위를 넘지 않도록 제한. 범위 밖 페이지는 어차피 빈 결과
        page = min(page, MAX_SQL_INT // limit + 1)

        return cls(
            q=(params.get("q") or "").strip(),
            types=parse_types(params.get("type")),
            genres=split_csv(params.get("genre")),
            year_min=parse_bound(params.get("yearMin")),
            year_max=parse_bound(params.get("yearMax")),
            sort_by=sort_by,
            sort_dir=sort_dir,
            page=page,
            limit=limit,
        )


def build_filters(params: SearchParams) -> list:
    """
    WHERE 절 조건 목록.
    페이지 조회와 전체 개수 조회가 반드시 같은 목록을 사용해야 total이 맞는다.
    """
    clauses = []

    if params.q:
        clauses.append(MediaItem.title.ilike(f"%{escape_like(params.q)}%", escape="\\"))

    if params.types is not None:
        clauses.append(MediaItem.type.in_(params.types) if params.types else false())

    # 장르는 합쳐진 문자열 하나로 저장되므로 완전일치만 가능
    if params.genres:
        clauses.append(MediaItem.genre.in_(params.genres))

    # NULL year는 비교 결과가 NULL이라 자동으로 제외됨
    if params.year_min is not None:
        clauses.append(MediaItem.year >= params.year_min)
    if params.year_max is not None:
        clauses.append(MediaItem.year <= params.year_max)

    return clauses


def build_order(params: SearchParams):
    column = SORT_COLUMNS[params.sort_by]
    return column.asc() if params.sort_dir == "asc" else column.desc()


def run_search(db: Session, params: SearchParams) -> dict:
    """
    검색 실행 후 {items, total, page, limit, total_pages} 반환
    - items: 리뷰/즐겨찾기를 함께 로딩한 MediaItem 목록 (최대 limit개)
    - total: 같은 필터로 센 전체 개수
    """
    clauses = build_filters(params)

    total = db.query(MediaItem).filter(*clauses).count()
    items = (
        db.query(MediaItem)
        .options(selectinload(MediaItem.reviews), selectinload(MediaItem.favorites))
        .filter(*clauses)
        .order_by(build_order(params))
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )

    logger.debug("search %s -> %d/%d", params, len(items), total)

    return {
        "items": items,
        "total": total,
        "page": params.page,
        "limit": params.limit,
        "total_pages": math.ceil(total / params.limit),
    }
