# fanvault/repository/likes_repository.py
from typing import Dict, Any

from sqlalchemy import select, delete, and_, func
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import PostLike


class LikesRepository:
    def __init__(self):
        self.model = PostLike

    async def create(self, db: AsyncSession, user_id: int, post_id: int) -> PostLike:
        """Создание лайка с проверкой на дубликат"""
        if await self.user_has_liked(db, user_id, post_id):
            raise ValueError("User already liked this post")

        like = PostLike(user_id=user_id, post_id=post_id)
        db.add(like)
        await db.commit()
        await db.refresh(like)
        return like

    async def delete(self, db: AsyncSession, user_id: int, post_id: int) -> bool:
        """Удаление лайка по user_id и post_id"""
        stmt = delete(PostLike).where(
            and_(PostLike.user_id == user_id, PostLike.post_id == post_id)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount > 0

    async def user_has_liked(self, db: AsyncSession, user_id: int, post_id: int) -> bool:
        """Проверка, поставил ли пользователь лайк посту"""
        stmt = select(PostLike).where(
            and_(PostLike.user_id == user_id, PostLike.post_id == post_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_likes_count(self, db: AsyncSession, post_id: int) -> int:
        """Получение количества лайков поста"""
        stmt = select(func.count(PostLike.id)).where(PostLike.post_id == post_id)
        result = await db.execute(stmt)
        return result.scalar() or 0

    async def toggle_like(self, db: AsyncSession, user_id: int, post_id: int) -> Dict[str, Any]:
        """Переключение лайка (поставить/убрать)"""
        if await self.user_has_liked(db, user_id, post_id):
            await self.delete(db, user_id, post_id)
            return {"action": "unliked", "liked": False}

        like = await self.create(db, user_id, post_id)
        return {"action": "liked", "liked": True, "like": like}


likes_repository = LikesRepository()
