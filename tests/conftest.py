import os

# 앱 모듈 import 전에 인메모리 SQLite로 전환
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from mediashelf.db import Base, SessionLocal, engine
from mediashelf.main import app
from mediashelf.models import MediaItem, MediaType


@pytest.fixture()
def client():
    # lifespan에서 테이블 생성 + 기본 사용자 시드
    with TestClient(app) as c:
        yield c
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db(client):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def make_media(db):
    """테스트용 미디어를 바로 DB에 넣는 팩토리"""

    def _make(title="Untitled", type=MediaType.MOVIE, **fields):
        item = MediaItem(title=title, type=type, **fields)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make
