# fanvault/repository/collections_repository.py
from typing import List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import ContentCollection, CollectionPost, Post
from fanvault.repository.base import BaseRepository
from fanvault.schemas.content import CollectionCreate


class CollectionsRepository(BaseRepository[ContentCollection, CollectionCreate, CollectionCreate]):
    def __init__(self):
        super().__init__(ContentCollection)

    async def get_by_creator(
            self,
            db: AsyncSession,
            creator_id: int,
            public_only: bool = False
    ) -> List[ContentCollection]:
        return await self.get_by_field(
            db,
            field_name='creator_id',
            field_value=creator_id,
            order_by=ContentCollection.created_at.desc(),
            is_public=True if public_only else None
        )

    async def get_entry(self, db: AsyncSession, collection_id: int, post_id: int) -> Optional[CollectionPost]:
        stmt = select(CollectionPost).where(
            CollectionPost.collection_id == collection_id,
            CollectionPost.post_id == post_id
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def add_post(self, db: AsyncSession, collection_id: int, post_id: int) -> CollectionPost:
        """Добавление поста в конец коллекции"""
        stmt = select(func.max(CollectionPost.order_index)).where(
            CollectionPost.collection_id == collection_id
        )
        result = await db.execute(stmt)
        last_index = result.scalar()

        entry = CollectionPost(
            collection_id=collection_id,
            post_id=post_id,
            order_index=0 if last_index is None else last_index + 1
        )
        db.add(entry)
        await db.commit()
        await db.refresh(entry)
        return entry

    async def remove_post(self, db: AsyncSession, collection_id: int, post_id: int) -> bool:
        stmt = delete(CollectionPost).where(
            CollectionPost.collection_id == collection_id,
            CollectionPost.post_id == post_id
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount > 0

    async def get_posts(self, db: AsyncSession, collection_id: int) -> List[Post]:
        """Посты коллекции в заданном порядке"""
        stmt = (
            select(Post)
            .join(CollectionPost, CollectionPost.post_id == Post.id)
            .where(CollectionPost.collection_id == collection_id)
            .order_by(CollectionPost.order_index.asc())
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def count_posts(self, db: AsyncSession, collection_id: int) -> int:
        stmt = select(func.count(CollectionPost.id)).where(CollectionPost.collection_id == collection_id)
        result = await db.execute(stmt)
        return result.scalar() or 0


collections_repository = CollectionsRepository()
