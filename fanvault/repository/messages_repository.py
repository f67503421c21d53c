# fanvault/repository/messages_repository.py
from typing import List, Dict, Any

from sqlalchemy import select, update, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import Message
from fanvault.repository.base import BaseRepository
from fanvault.schemas.message import MessageCreate


class MessagesRepository(BaseRepository[Message, MessageCreate, MessageCreate]):
    def __init__(self):
        super().__init__(Message)

    @staticmethod
    def _between(user_a: int, user_b: int):
        return or_(
            and_(Message.sender_id == user_a, Message.recipient_id == user_b),
            and_(Message.sender_id == user_b, Message.recipient_id == user_a)
        )

    async def get_conversation(
            self,
            db: AsyncSession,
            user_id: int,
            other_user_id: int,
            skip: int = 0,
            limit: int = 200
    ) -> List[Message]:
        """История переписки в обе стороны, старые первыми"""
        stmt = (
            select(Message)
            .where(self._between(user_id, other_user_id))
            .order_by(Message.created_at.asc(), Message.id.asc())
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_user_messages(self, db: AsyncSession, user_id: int, limit: int = 1000) -> List[Message]:
        """Все сообщения пользователя, новые первыми"""
        stmt = (
            select(Message)
            .where(or_(Message.sender_id == user_id, Message.recipient_id == user_id))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_unread_from(self, db: AsyncSession, user_id: int, other_user_id: int) -> List[Message]:
        stmt = select(Message).where(
            Message.sender_id == other_user_id,
            Message.recipient_id == user_id,
            Message.is_read == False  # noqa: E712
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def mark_read(self, db: AsyncSession, message_ids: List[int]) -> int:
        if not message_ids:
            return 0
        stmt = update(Message).where(Message.id.in_(message_ids)).values(is_read=True)
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount

    async def bulk_create(self, db: AsyncSession, rows: List[Dict[str, Any]]) -> List[Message]:
        """Массовая вставка сообщений одной транзакцией"""
        messages = [Message(**row) for row in rows]
        db.add_all(messages)
        await db.commit()
        for message in messages:
            await db.refresh(message)
        return messages


messages_repository = MessagesRepository()
