# --------------------------------------------------------------
# pages.py — 서버 렌더링 HTML 페이지 (Jinja2)
#   JSON API와 같은 함수를 그대로 호출해 화면을 만든다
# --------------------------------------------------------------

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from ..db import get_db, get_owner_id
from ..errors import AppError, NotFoundError
from ..models import MediaStatus, MediaType, Priority
from ..query_builder import SORT_COLUMNS, SearchParams, run_search
from ..schemas import CollectionIn, CollectionItemIn, MediaIn, MediaRef, ReviewIn, WatchlistIn
from ..stats import TIME_RANGES, compute_stats
from . import collections, dashboard, favorites, media, reviews, watchlist

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.globals.update(
    media_types=[t.value for t in MediaType],
    media_statuses=[s.value for s in MediaStatus],
    priorities=[p.value for p in Priority],
)

router = APIRouter(include_in_schema=False)


def _redirect(url: str) -> RedirectResponse:
    # POST 후 GET으로 이동 (PRG 패턴)
    return RedirectResponse(url=url, status_code=303)


def _schema_error_message(err: SchemaError) -> str:
    first = err.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid input")


@router.get("/", response_class=HTMLResponse)
def home(request: Request, db: Session = Depends(get_db)):
    context = dashboard.build_dashboard(db)
    return templates.TemplateResponse(request, "index.html", context)


@router.get("/search", response_class=HTMLResponse)
def search_page(request: Request, db: Session = Depends(get_db)):
    params = SearchParams.from_query(request.query_params)
    results = run_search(db, params)

    # 페이지 링크용: page만 바꾼 쿼리스트링
    base_query = {k: v for k, v in request.query_params.items() if k != "page"}

    return templates.TemplateResponse(
        request,
        "search.html",
        {
            "params": params,
            "results": results,
            "raw": request.query_params,
            "base_query": base_query,
            "sort_fields": list(SORT_COLUMNS),
        },
    )


@router.get("/stats", response_class=HTMLResponse)
def stats_page(
    request: Request,
    time_range: str = Query("all", alias="timeRange"),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    stats = compute_stats(db, owner_id, time_range)
    return templates.TemplateResponse(
        request,
        "stats.html",
        {"stats": stats, "time_range": time_range, "time_ranges": list(TIME_RANGES)},
    )


# -------------------------------
# 미디어 추가/수정/상세/삭제
# -------------------------------
_MEDIA_FORM_FIELDS = (
    "title", "type", "genre", "year", "rating", "status", "description",
    "director", "duration", "seasons", "episodes", "author", "pages", "poster",
)


def media_form(
    title: str = Form(""),
    type: str = Form(""),
    genre: str = Form(""),
    year: str = Form(""),
    rating: str = Form(""),
    status: str = Form(""),
    description: str = Form(""),
    director: str = Form(""),
    duration: str = Form(""),
    seasons: str = Form(""),
    episodes: str = Form(""),
    author: str = Form(""),
    pages: str = Form(""),
    poster: str = Form(""),
) -> dict:
    """추가/수정 폼 공통 필드 (모두 문자열로 받고 MediaIn에서 변환)"""
    return {
        "title": title.strip(), "type": type or None, "genre": genre, "year": year,
        "rating": rating, "status": status, "description": description,
        "director": director, "duration": duration, "seasons": seasons,
        "episodes": episodes, "author": author, "pages": pages, "poster": poster,
    }


def _form_from_item(item) -> dict:
    # 수정 화면 초기값: enum은 값으로, None은 빈 칸으로
    form = {}
    for field in _MEDIA_FORM_FIELDS:
        value = getattr(item, field)
        form[field] = getattr(value, "value", value) if value is not None else ""
    return form


def _render_media_form(request: Request, form: dict, action: str, heading: str, error=None, status_code=200):
    return templates.TemplateResponse(
        request,
        "media_form.html",
        {"form": form, "action": action, "heading": heading, "error": error},
        status_code=status_code,
    )


@router.get("/add-media", response_class=HTMLResponse)
def add_media_form(request: Request):
    return _render_media_form(request, {}, "/add-media", "Add media")


@router.post("/add-media", response_class=HTMLResponse)
def add_media_submit(request: Request, form: dict = Depends(media_form), db: Session = Depends(get_db)):
    try:
        created = media.create_media(MediaIn(**form), db)
    except SchemaError as err:
        error = _schema_error_message(err)
    except AppError as err:
        error = err.message
    else:
        return _redirect(f"/media/{created.id}")

    return _render_media_form(request, form, "/add-media", "Add media", error, status_code=400)


@router.get("/media/{media_id}/edit", response_class=HTMLResponse)
def edit_media_form(media_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        item = media.get_media_or_404(db, media_id)
    except AppError:
        return _redirect("/")
    return _render_media_form(request, _form_from_item(item), f"/media/{media_id}/edit", f"Edit {item.title}")


@router.post("/media/{media_id}/edit", response_class=HTMLResponse)
def edit_media_submit(
    media_id: int,
    request: Request,
    form: dict = Depends(media_form),
    db: Session = Depends(get_db),
):
    # 수정은 전체 교체 (PUT /api/media/{id} 와 같은 함수)
    try:
        media.update_media(media_id, MediaIn(**form), db)
    except SchemaError as err:
        error = _schema_error_message(err)
    except NotFoundError:
        return _redirect("/")
    except AppError as err:
        error = err.message
    else:
        return _redirect(f"/media/{media_id}")

    return _render_media_form(
        request, form, f"/media/{media_id}/edit", "Edit media", error, status_code=400
    )


@router.get("/media/{media_id}", response_class=HTMLResponse)
def media_detail(
    media_id: int,
    request: Request,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    try:
        item = media.get_media_or_404(db, media_id)
    except AppError:
        return _redirect("/")

    return templates.TemplateResponse(
        request,
        "media_detail.html",
        {
            "item": item,
            "is_favorite": any(f.user_id == owner_id for f in item.favorites),
            "in_watchlist": any(w.user_id == owner_id for w in item.watchlist_items),
            "average": (
                round(sum(r.rating for r in item.reviews) / len(item.reviews), 1)
                if item.reviews else None
            ),
        },
    )


@router.post("/media/{media_id}/delete")
def media_delete(media_id: int, db: Session = Depends(get_db)):
    try:
        media.delete_media(media_id, db)
    except AppError as err:
        logger.warning("Delete of media %s failed: %s", media_id, err.message)
    return _redirect("/")


@router.post("/media/{media_id}/favorite")
def media_toggle_favorite(media_id: int, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    ref = MediaRef(media_id=media_id)
    try:
        favorites.add_favorite(ref, db, owner_id)
    except AppError:
        # 이미 즐겨찾기 → 해제
        favorites.remove_favorite(ref, db, owner_id)
    return _redirect(f"/media/{media_id}")


@router.post("/media/{media_id}/watchlist")
def media_add_to_watchlist(
    media_id: int,
    priority: str = Form(Priority.MEDIUM.value),
    notes: str = Form(""),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    try:
        watchlist.add_to_watchlist(WatchlistIn(media_id=media_id, priority=priority, notes=notes), db, owner_id)
    except (AppError, SchemaError) as err:
        logger.info("Watchlist add for media %s skipped: %s", media_id, err)
    return _redirect(f"/media/{media_id}")


@router.get("/media/{media_id}/add-review", response_class=HTMLResponse)
def add_review_form(media_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        item = media.get_media_or_404(db, media_id)
    except AppError:
        return _redirect("/")
    return templates.TemplateResponse(request, "add_review.html", {"item": item, "error": None})


@router.post("/media/{media_id}/add-review", response_class=HTMLResponse)
def add_review_submit(
    media_id: int,
    request: Request,
    rating: str = Form(""),
    comment: str = Form(""),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    try:
        reviews.create_review(db, owner_id, ReviewIn(media_id=media_id, rating=rating or None, comment=comment))
    except SchemaError as err:
        error = _schema_error_message(err)
    except AppError as err:
        error = err.message
    else:
        return _redirect(f"/media/{media_id}")

    try:
        item = media.get_media_or_404(db, media_id)
    except AppError:
        return _redirect("/")
    return templates.TemplateResponse(
        request, "add_review.html", {"item": item, "error": error}, status_code=400
    )


# -------------------------------
# 즐겨찾기 / 워치리스트 / 컬렉션
# -------------------------------
@router.get("/favorites", response_class=HTMLResponse)
def favorites_page(request: Request, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    entries = favorites.list_favorites(db, owner_id)
    return templates.TemplateResponse(request, "favorites.html", {"favorites": entries})


@router.get("/watchlist", response_class=HTMLResponse)
def watchlist_page(request: Request, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    entries = watchlist.list_watchlist(db, owner_id)
    return templates.TemplateResponse(request, "watchlist.html", {"entries": entries})


@router.post("/watchlist/{media_id}/remove")
def watchlist_remove(media_id: int, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    try:
        watchlist.remove_from_watchlist(MediaRef(media_id=media_id), db, owner_id)
    except AppError as err:
        logger.info("Watchlist remove for media %s skipped: %s", media_id, err.message)
    return _redirect("/watchlist")


@router.get("/collections", response_class=HTMLResponse)
def collections_page(request: Request, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    entries = collections.list_collections(db, owner_id)
    return templates.TemplateResponse(request, "collections.html", {"collections": entries, "error": None})


@router.post("/collections", response_class=HTMLResponse)
def collections_create(
    request: Request,
    name: str = Form(""),
    description: str = Form(""),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    try:
        created = collections.create_collection(CollectionIn(name=name, description=description), db, owner_id)
    except AppError as err:
        entries = collections.list_collections(db, owner_id)
        return templates.TemplateResponse(
            request, "collections.html", {"collections": entries, "error": err.message}, status_code=400
        )
    return _redirect(f"/collections/{created.id}")


@router.get("/collections/{collection_id}", response_class=HTMLResponse)
def collection_detail(
    collection_id: int,
    request: Request,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    try:
        collection = collections.get_collection_or_404(db, owner_id, collection_id)
    except AppError:
        return _redirect("/collections")
    return templates.TemplateResponse(request, "collection_detail.html", {"collection": collection})


@router.post("/collections/{collection_id}/items")
def collection_add_item(
    collection_id: int,
    media_id: Optional[int] = Form(None),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    try:
        collections.add_collection_item(collection_id, CollectionItemIn(media_id=media_id), db, owner_id)
    except AppError as err:
        logger.info("Collection %s add skipped: %s", collection_id, err.message)
    return _redirect(f"/collections/{collection_id}")


@router.post("/collections/{collection_id}/items/{media_id}/remove")
def collection_remove_item(
    collection_id: int,
    media_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    try:
        collections.remove_collection_item(collection_id, media_id, db, owner_id)
    except AppError as err:
        logger.info("Collection %s remove skipped: %s", collection_id, err.message)
    return _redirect(f"/collections/{collection_id}")


@router.post("/collections/{collection_id}/delete")
def collection_delete(collection_id: int, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    try:
        collections.delete_collection(collection_id, db, owner_id)
    except AppError as err:
        logger.warning("Delete of collection %s failed: %s", collection_id, err.message)
    return _redirect("/collections")
