# ------------------------------------------------------------
# main.py — FastAPI 앱 생성/미들웨어/라우터 등록 진입점
# ------------------------------------------------------------

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import init_db
from .errors import register_exception_handlers
from .routers import collections, dashboard, favorites, media, pages, reviews, search, stats, tags, watchlist

# 로그 설정: LOG_LEVEL 환경변수 (기본 INFO)
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 앱 시작 시 테이블 생성 + 기본 사용자 시드
    init_db()
    yield


app = FastAPI(title="MediaShelf API", lifespan=lifespan)

# 개발 단계에서는 "*", 운영에서는 CORS_ORIGINS로 도메인 제한
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# -------------------------------
# 라우터 등록
# -------------------------------
# - media:       /api/media, /api/media/{id}
# - search:      /api/search
# - stats:       /api/stats
# - dashboard:   /api/dashboard
# - favorites:   /api/favorites
# - watchlist:   /api/watchlist
# - collections: /api/collections
# - reviews:     /api/add-review, /api/add-media(구버전), /api/reviews
# - tags:        /api/tags
# - pages:       HTML 화면
app.include_router(media.router)
app.include_router(search.router)
app.include_router(stats.router)
app.include_router(dashboard.router)
app.include_router(favorites.router)
app.include_router(watchlist.router)
app.include_router(collections.router)
app.include_router(reviews.router)
app.include_router(tags.router)
app.include_router(pages.router)


@app.get("/health")
def health():
    return {"ok": True, "service": "mediashelf"}
