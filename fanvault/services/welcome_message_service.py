# fanvault/services/welcome_message_service.py
import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.repository.welcome_messages_repository import welcome_messages_repository
from fanvault.schemas.message import WelcomeMessageCreate, WelcomeMessageUpdate, WelcomeMessageResponse

logger = logging.getLogger(__name__)


class WelcomeMessageService:
    """Цепочка приветственных сообщений новым подписчикам"""

    async def _get_own(self, db: AsyncSession, message_id: int, creator_id: int) -> models.WelcomeMessage:
        message = await welcome_messages_repository.get(db, message_id)
        if not message or message.creator_id != creator_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Приветственное сообщение не найдено")
        return message

    async def list_messages(self, db: AsyncSession, creator: models.Profile) -> List[WelcomeMessageResponse]:
        messages = await welcome_messages_repository.get_by_creator(db, creator.id)
        return [WelcomeMessageResponse.model_validate(m) for m in messages]

    async def create_message(
            self,
            db: AsyncSession,
            creator: models.Profile,
            message_data: WelcomeMessageCreate
    ) -> WelcomeMessageResponse:
        sequence_order = await welcome_messages_repository.next_sequence_order(db, creator.id)
        message = await welcome_messages_repository.create(
            db, message_data, creator_id=creator.id, sequence_order=sequence_order
        )
        return WelcomeMessageResponse.model_validate(message)

    async def update_message(
            self,
            db: AsyncSession,
            creator: models.Profile,
            message_id: int,
            message_data: WelcomeMessageUpdate
    ) -> WelcomeMessageResponse:
        message = await self._get_own(db, message_id, creator.id)
        changes = message_data.model_dump(exclude_unset=True)
        if changes.get("is_ppv", message.is_ppv) and not changes.get("ppv_price", message.ppv_price):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="PPV price is required")

        message = await welcome_messages_repository.update(db, message, message_data)
        return WelcomeMessageResponse.model_validate(message)

    async def toggle_active(self, db: AsyncSession, creator: models.Profile, message_id: int) -> WelcomeMessageResponse:
        message = await self._get_own(db, message_id, creator.id)
        message = await welcome_messages_repository.update_fields(db, message, is_active=not message.is_active)
        return WelcomeMessageResponse.model_validate(message)

    async def delete_message(self, db: AsyncSession, creator: models.Profile, message_id: int) -> dict:
        await self._get_own(db, message_id, creator.id)
        await welcome_messages_repository.delete(db, message_id)
        return {"message": "Welcome message deleted successfully"}

    async def move_message(
            self,
            db: AsyncSession,
            creator: models.Profile,
            message_id: int,
            direction: str
    ) -> List[WelcomeMessageResponse]:
        """Перемещение вверх или вниз: обмен sequence_order с соседом"""
        if direction not in ("up", "down"):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Направление должно быть up или down")

        messages = list(await welcome_messages_repository.get_by_creator(db, creator.id))
        index = next((i for i, m in enumerate(messages) if m.id == message_id), None)
        if index is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Приветственное сообщение не найдено")

        neighbour = index - 1 if direction == "up" else index + 1
        if 0 <= neighbour < len(messages):
            current, other = messages[index], messages[neighbour]
            current_order, other_order = current.sequence_order, other.sequence_order
            await welcome_messages_repository.update_fields(db, current, sequence_order=other_order)
            await welcome_messages_repository.update_fields(db, other, sequence_order=current_order)

        return await self.list_messages(db, creator)

    async def reorder(self, db: AsyncSession, creator: models.Profile, message_ids: List[int]) -> List[WelcomeMessageResponse]:
        messages = {m.id: m for m in await welcome_messages_repository.get_by_creator(db, creator.id)}
        if sorted(message_ids) != sorted(messages):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Список должен содержать все приветственные сообщения автора"
            )

        for order, message_id in enumerate(message_ids, start=1):
            await welcome_messages_repository.update_fields(db, messages[message_id], sequence_order=order)
        return await self.list_messages(db, creator)

    async def schedule_for_subscriber(self, db: AsyncSession, creator_id: int, subscriber_id: int) -> int:
        """Постановка активных приветственных сообщений в очередь Celery"""
        from fanvault.tasks.tasks import deliver_welcome_message

        scheduled = 0
        try:
            messages = await welcome_messages_repository.get_by_creator(db, creator_id, active_only=True)
            for message in messages:
                deliver_welcome_message.apply_async(
                    args=[message.id, subscriber_id],
                    countdown=message.delay_hours * 3600
                )
                scheduled += 1
        except Exception as e:
            logger.error(f"❌ Ошибка планирования приветственных сообщений для {subscriber_id}: {e}")

        if scheduled:
            logger.info(f"👋 Запланировано {scheduled} приветственных сообщений подписчику {subscriber_id}")
        return scheduled


welcome_message_service = WelcomeMessageService()
