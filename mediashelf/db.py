# -------------------------------------------------------
# db.py — SQLAlchemy 엔진/세션 및 FastAPI 의존성 정의
# -------------------------------------------------------

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv

# .env 파일의 환경변수를 현재 프로세스 환경에 주입
load_dotenv()

logger = logging.getLogger(__name__)

# -----------------------------
# 환경변수 로딩 (기본값 포함)
# -----------------------------
# DATABASE_URL이 있으면 그대로 사용 (예: sqlite:///./mediashelf.db)
# 없으면 DB_* 변수로 MySQL(PyMySQL) URL을 조립
DB_USER = os.getenv("DB_USER", "mediashelf")
DB_PASSWORD = os.getenv("DB_PASSWORD", "mediashelf")
DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
DB_PORT = os.getenv("DB_PORT", "3306")
DB_NAME = os.getenv("DB_NAME", "mediashelf")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}?charset=utf8mb4",
)

# 단일 사용자 앱: 모든 사용자 소유 리소스는 이 id로 귀속됨
DEFAULT_USER_ID = int(os.getenv("DEFAULT_USER_ID", "1"))
DEFAULT_USER_EMAIL = os.getenv("DEFAULT_USER_EMAIL", "user@example.com")


def _engine_kwargs(url: str) -> dict:
    """URL 종류에 맞는 create_engine 옵션"""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # 인메모리 SQLite는 커넥션마다 DB가 새로 생기므로 하나의 커넥션을 공유
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    # MySQL: 죽은 커넥션 감지(pool_pre_ping) + 1시간마다 재활용
    return {"pool_pre_ping": True, "pool_recycle": 3600}


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

# autocommit=False: 명시적 commit() 전까지 반영 안 됨
# autoflush=False: 요청 단위 트랜잭션에서 예측 가능성 유지
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI 의존성 주입용 DB 세션 제공자(Generator)

    1) 요청이 들어오면 SessionLocal()로 세션 생성
    2) 핸들러에 주입(yield)
    3) 응답 후 finally 블록에서 세션 종료(close)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_owner_id() -> int:
    """요청의 소유 사용자 id (인증이 없으므로 설정값 사용)"""
    return DEFAULT_USER_ID


def init_db(bind=None):
    """
    테이블 생성 + 기본 사용자 시드.
    - create_all()은 존재하지 않는 테이블만 생성
    - 기본 사용자가 없으면 하나 만들어 둠 (favorites/watchlist FK 대상)
    """
    from .models import User  # 순환 import 방지

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    db = SessionLocal(bind=bind)
    try:
        if db.get(User, DEFAULT_USER_ID) is None:
            db.add(User(id=DEFAULT_USER_ID, email=DEFAULT_USER_EMAIL, name="Default User"))
            db.commit()
            logger.info("Created default user %s", DEFAULT_USER_ID)
    finally:
        db.close()
