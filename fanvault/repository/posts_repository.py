# fanvault/repository/posts_repository.py
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import Post
from fanvault.repository.base import BaseRepository
from fanvault.schemas.content import PostCreate, PostUpdate


class PostsRepository(BaseRepository[Post, PostCreate, PostUpdate]):
    def __init__(self):
        super().__init__(Post)

    async def get_by_creator(
            self,
            db: AsyncSession,
            creator_id: int,
            published_only: bool = True,
            skip: int = 0,
            limit: int = 50
    ) -> List[Post]:
        """Посты автора, новые первыми"""
        return await self.get_by_field(
            db,
            field_name='creator_id',
            field_value=creator_id,
            order_by=Post.created_at.desc(),
            skip=skip,
            limit=limit,
            is_published=True if published_only else None
        )

    async def get_feed(
            self,
            db: AsyncSession,
            creator_ids: List[int],
            skip: int = 0,
            limit: int = 50
    ) -> List[Post]:
        """Лента опубликованных постов выбранных авторов"""
        if not creator_ids:
            return []
        stmt = (
            select(Post)
            .where(Post.creator_id.in_(creator_ids), Post.is_published == True)  # noqa: E712
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_all_by_creator(self, db: AsyncSession, creator_id: int) -> List[Post]:
        stmt = select(Post).where(Post.creator_id == creator_id)
        result = await db.execute(stmt)
        return result.scalars().all()


posts_repository = PostsRepository()
