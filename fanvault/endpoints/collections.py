# fanvault/endpoints/collections.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import active_creator_permission, creator_permission
from fanvault.schemas.content import CollectionCreate, CollectionResponse, CollectionPostAdd, PostResponse
from fanvault.security.auth import get_current_user_optional
from fanvault.services.collection_service import collection_service

collections_router = APIRouter(
    prefix="/collections",
    tags=["collections"],
    responses={404: {"description": "Not found"}}
)


@collections_router.post("", response_model=CollectionResponse, status_code=201)
async def create_collection(
        collection_data: CollectionCreate,
        current_user: models.Profile = Depends(active_creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await collection_service.create_collection(db, current_user, collection_data)


@collections_router.get("/creator/{creator_id}", response_model=List[CollectionResponse])
async def list_collections(
        creator_id: int,
        viewer: Optional[models.Profile] = Depends(get_current_user_optional),
        db: AsyncSession = Depends(get_db)
):
    return await collection_service.list_collections(db, creator_id, viewer)


@collections_router.get("/{collection_id}/posts", response_model=List[PostResponse])
async def get_collection_posts(
        collection_id: int,
        viewer: Optional[models.Profile] = Depends(get_current_user_optional),
        db: AsyncSession = Depends(get_db)
):
    """Посты коллекции с учетом доступа зрителя"""
    return await collection_service.get_posts(db, collection_id, viewer)


@collections_router.post("/{collection_id}/posts", response_model=CollectionResponse)
async def add_post_to_collection(
        collection_id: int,
        data: CollectionPostAdd,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await collection_service.add_post(db, current_user, collection_id, data.post_id)


@collections_router.delete("/{collection_id}/posts/{post_id}", response_model=CollectionResponse)
async def remove_post_from_collection(
        collection_id: int,
        post_id: int,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await collection_service.remove_post(db, current_user, collection_id, post_id)


@collections_router.delete("/{collection_id}")
async def delete_collection(
        collection_id: int,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await collection_service.delete_collection(db, current_user, collection_id)
