# -----------------------------------------------------------
# collections.py — 컬렉션(사용자 큐레이션 목록) CRUD + 항목 추가/제거
# -----------------------------------------------------------

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..db import get_db, get_owner_id
from ..errors import ConflictError, NotFoundError, ValidationError, storage_errors
from ..models import Collection, CollectionItem, MediaItem
from ..schemas import CollectionIn, CollectionItemIn, CollectionOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/collections", tags=["collections"])


def _collection_query(db: Session, owner_id: int):
    # items → media_item → tags 까지 한 번에 로딩
    return (
        db.query(Collection)
        .options(
            selectinload(Collection.items)
            .selectinload(CollectionItem.media_item)
            .selectinload(MediaItem.tags)
        )
        .filter(Collection.user_id == owner_id)
    )


def get_collection_or_404(db: Session, owner_id: int, collection_id: int) -> Collection:
    collection = _collection_query(db, owner_id).filter(Collection.id == collection_id).first()
    if collection is None:
        raise NotFoundError("Collection not found")
    return collection


def contains_media(collection: Collection, media_id: int) -> bool:
    return any(item.media_id == media_id for item in collection.items)


@router.get("", response_model=List[CollectionOut])
def list_collections(db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    with storage_errors(db, "Failed to fetch collections"):
        return _collection_query(db, owner_id).order_by(Collection.created_at.desc()).all()


@router.post("", response_model=CollectionOut, status_code=201)
def create_collection(payload: CollectionIn, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    if not payload.name or not payload.name.strip():
        raise ValidationError("Collection name is required")

    collection = Collection(
        name=payload.name.strip(),
        description=payload.description or "",
        is_public=bool(payload.is_public),
        user_id=owner_id,
    )
    with storage_errors(db, "Failed to create collection"):
        db.add(collection)
        db.commit()
        collection = get_collection_or_404(db, owner_id, collection.id)

    logger.info("Created collection %s (%s)", collection.id, collection.name)
    return collection


@router.get("/{collection_id}", response_model=CollectionOut)
def get_collection(collection_id: int, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    with storage_errors(db, "Failed to fetch collection"):
        return get_collection_or_404(db, owner_id, collection_id)


@router.put("/{collection_id}", response_model=CollectionOut)
def update_collection(
    collection_id: int,
    payload: CollectionIn,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    """바디에 들어온 필드만 수정. 이름을 빈 값으로 바꿀 수는 없음"""
    fields = payload.model_fields_set
    if "name" in fields and (not payload.name or not payload.name.strip()):
        raise ValidationError("Collection name is required")

    with storage_errors(db, "Failed to update collection"):
        collection = get_collection_or_404(db, owner_id, collection_id)
        if "name" in fields:
            collection.name = payload.name.strip()
        if "description" in fields:
            collection.description = payload.description
        if "is_public" in fields and payload.is_public is not None:
            collection.is_public = payload.is_public
        db.commit()
        collection = get_collection_or_404(db, owner_id, collection_id)

    return collection


@router.delete("/{collection_id}")
def delete_collection(collection_id: int, db: Session = Depends(get_db), owner_id: int = Depends(get_owner_id)):
    with storage_errors(db, "Failed to delete collection"):
        collection = get_collection_or_404(db, owner_id, collection_id)
        db.delete(collection)
        db.commit()

    logger.info("Deleted collection %s", collection_id)
    return {"success": True}


@router.post("/{collection_id}/items", response_model=CollectionOut, status_code=201)
def add_collection_item(
    collection_id: int,
    payload: CollectionItemIn,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    """컬렉션 끝(order = 현재 최댓값 + 1)에 미디어 추가"""
    if not payload.media_id:
        raise ValidationError("Media ID is required")

    with storage_errors(db, "Failed to add to collection"):
        collection = get_collection_or_404(db, owner_id, collection_id)
        if db.get(MediaItem, payload.media_id) is None:
            raise NotFoundError("Media item not found")
        if contains_media(collection, payload.media_id):
            raise ConflictError("Already in collection")

        last = (
            db.query(func.max(CollectionItem.order))
            .filter(CollectionItem.collection_id == collection_id)
            .scalar()
        )
        db.add(
            CollectionItem(
                collection_id=collection_id,
                media_id=payload.media_id,
                order=(last if last is not None else -1) + 1,
                notes=payload.notes,
            )
        )
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Already in collection")

        collection = get_collection_or_404(db, owner_id, collection_id)

    return collection


@router.delete("/{collection_id}/items/{media_id}", response_model=CollectionOut)
def remove_collection_item(
    collection_id: int,
    media_id: int,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
):
    with storage_errors(db, "Failed to remove from collection"):
        collection = get_collection_or_404(db, owner_id, collection_id)
        item = next((i for i in collection.items if i.media_id == media_id), None)
        if item is None:
            raise NotFoundError("Collection item not found")
        collection.items.remove(item)
        db.commit()
        collection = get_collection_or_404(db, owner_id, collection_id)

    return collection
