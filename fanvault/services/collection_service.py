# fanvault/services/collection_service.py
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.repository.collections_repository import collections_repository
from fanvault.repository.posts_repository import posts_repository
from fanvault.schemas.content import CollectionCreate, CollectionResponse, PostResponse
from fanvault.services.post_service import post_service

logger = logging.getLogger(__name__)


class CollectionService:
    """Подборки постов автора"""

    async def _to_response(self, db: AsyncSession, collection: models.ContentCollection) -> CollectionResponse:
        response = CollectionResponse.model_validate(collection)
        response.post_count = await collections_repository.count_posts(db, collection.id)
        return response

    async def _get_collection(self, db: AsyncSession, collection_id: int) -> models.ContentCollection:
        collection = await collections_repository.get(db, collection_id)
        if not collection:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Коллекция не найдена")
        return collection

    async def _get_own(self, db: AsyncSession, collection_id: int, creator_id: int) -> models.ContentCollection:
        collection = await self._get_collection(db, collection_id)
        if collection.creator_id != creator_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
        return collection

    async def create_collection(
            self,
            db: AsyncSession,
            creator: models.Profile,
            collection_data: CollectionCreate
    ) -> CollectionResponse:
        collection = await collections_repository.create(db, collection_data, creator_id=creator.id)
        logger.info(f"📚 Автор {creator.id} создал коллекцию {collection.id}")
        return await self._to_response(db, collection)

    async def list_collections(
            self,
            db: AsyncSession,
            creator_id: int,
            viewer: Optional[models.Profile] = None
    ) -> List[CollectionResponse]:
        """Свои коллекции целиком, чужие только публичные"""
        own = viewer is not None and viewer.id == creator_id
        collections = await collections_repository.get_by_creator(db, creator_id, public_only=not own)
        return [await self._to_response(db, c) for c in collections]

    async def add_post(self, db: AsyncSession, creator: models.Profile, collection_id: int, post_id: int) -> CollectionResponse:
        collection = await self._get_own(db, collection_id, creator.id)

        post = await posts_repository.get(db, post_id)
        if not post or post.creator_id != creator.id or not post.is_published:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Пост не найден")

        if await collections_repository.get_entry(db, collection.id, post.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Post already in collection")

        await collections_repository.add_post(db, collection.id, post.id)
        return await self._to_response(db, collection)

    async def remove_post(self, db: AsyncSession, creator: models.Profile, collection_id: int, post_id: int) -> CollectionResponse:
        collection = await self._get_own(db, collection_id, creator.id)
        if not await collections_repository.remove_post(db, collection.id, post_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Пост не найден в коллекции")
        return await self._to_response(db, collection)

    async def get_posts(
            self,
            db: AsyncSession,
            collection_id: int,
            viewer: Optional[models.Profile] = None
    ) -> List[PostResponse]:
        collection = await self._get_collection(db, collection_id)
        if not collection.is_public and (viewer is None or viewer.id != collection.creator_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Коллекция не найдена")

        posts = await collections_repository.get_posts(db, collection.id)
        return await post_service.present(db, posts, viewer)

    async def delete_collection(self, db: AsyncSession, creator: models.Profile, collection_id: int) -> dict:
        await self._get_own(db, collection_id, creator.id)
        await collections_repository.delete(db, collection_id)
        return {"message": "Collection deleted successfully"}


collection_service = CollectionService()
