# fanvault/repository/comments_repository.py
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import PostComment
from fanvault.repository.base import BaseRepository
from fanvault.schemas.content import CommentCreate


class CommentsRepository(BaseRepository[PostComment, CommentCreate, CommentCreate]):
    def __init__(self):
        super().__init__(PostComment)

    async def get_by_post(
            self,
            db: AsyncSession,
            post_id: int,
            skip: int = 0,
            limit: int = 100
    ) -> List[PostComment]:
        """Комментарии поста в порядке создания"""
        return await self.get_by_field(
            db,
            field_name='post_id',
            field_value=post_id,
            order_by=PostComment.created_at.asc(),
            skip=skip,
            limit=limit
        )


comments_repository = CommentsRepository()
