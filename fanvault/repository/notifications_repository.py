# fanvault/repository/notifications_repository.py
from typing import List

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import Notification
from fanvault.repository.base import BaseRepository
from fanvault.schemas.notification import NotificationResponse


class NotificationsRepository(BaseRepository[Notification, NotificationResponse, NotificationResponse]):
    def __init__(self):
        super().__init__(Notification)

    async def get_by_user(
            self,
            db: AsyncSession,
            user_id: int,
            unread_only: bool = False,
            skip: int = 0,
            limit: int = 50
    ) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read == False)  # noqa: E712
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return result.scalars().all()

    async def unread_count(self, db: AsyncSession, user_id: int) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read == False  # noqa: E712
        )
        result = await db.execute(stmt)
        return result.scalar() or 0

    async def mark_all_read(self, db: AsyncSession, user_id: int) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount


notifications_repository = NotificationsRepository()
