# fanvault/services/message_service.py
import logging
from datetime import datetime, timedelta
from typing import List, Iterable, Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.redis_client import redis_manager
from fanvault.repository.creator_repository import creator_repository
from fanvault.repository.messages_repository import messages_repository
from fanvault.repository.ppv_repository import ppv_repository
from fanvault.repository.subscriptions_repository import subscriptions_repository
from fanvault.repository.user_repository import profile_repository
from fanvault.schemas.message import (
    MessageCreate, MessageResponse, ConversationSummary, MassMessageCreate, MassMessageResult, MassAudience,
    ReadReceipt
)
from fanvault.services.platform_fee_service import fee_is_active
from fanvault.utils.file_utils import save_uploaded_file, message_type_from_mime

logger = logging.getLogger(__name__)

NEW_SUBSCRIBER_DAYS = 7


def select_audience(subscriptions: Iterable, audience: str, now: Optional[datetime] = None) -> List[int]:
    """Получатели массовой рассылки среди активных подписок, без повторов"""
    now = now or datetime.now()
    recipients = []
    for subscription in subscriptions:
        if audience == MassAudience.ACTIVE.value and not (subscription.end_date and subscription.end_date > now):
            continue
        if audience == MassAudience.NEW.value and subscription.start_date < now - timedelta(days=NEW_SUBSCRIBER_DAYS):
            continue
        if subscription.subscriber_id not in recipients:
            recipients.append(subscription.subscriber_id)
    return recipients


def to_message_response(message, viewer_id: int, purchased_ids: set) -> MessageResponse:
    """PPV сообщение для получателя скрыто до покупки"""
    response = MessageResponse.model_validate(message)
    if message.is_ppv and message.sender_id != viewer_id and message.id not in purchased_ids:
        response.content = None
        response.media_url = None
        response.is_locked = True
    return response


class MessageService:

    async def _publish(
            self,
            message: models.Message,
            event: str,
            *user_ids: int,
            purchased: frozenset = frozenset()
    ) -> None:
        """Событие для каждого участника, PPV содержимое скрыто у получателя без покупки"""
        for user_id in user_ids:
            payload = to_message_response(message, user_id, purchased).model_dump(mode="json")
            try:
                await redis_manager.publish_to_user(user_id, event, "messages", payload)
            except Exception as e:
                logger.warning(f"⚠️ Не удалось отправить сообщение {message.id} пользователю {user_id}: {e}")

    async def _ensure_can_sell(self, db: AsyncSession, user: models.Profile) -> None:
        """PPV и рассылки доступны только автору с оплаченной платой платформы"""
        if not user.is_creator:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
        creator = await creator_repository.get_by_user(db, user.id)
        if not fee_is_active(creator):
            raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail="Platform fee is not paid")

    async def send_message(
            self,
            db: AsyncSession,
            sender: models.Profile,
            message_data: MessageCreate
    ) -> MessageResponse:
        if message_data.recipient_id == sender.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Нельзя отправить сообщение себе")

        recipient = await profile_repository.get(db, message_data.recipient_id)
        if not recipient or not recipient.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Получатель не найден")

        if message_data.is_ppv:
            await self._ensure_can_sell(db, sender)

        message = await messages_repository.create(db, message_data, sender_id=sender.id)
        await self._publish(message, "INSERT", sender.id, recipient.id)

        logger.info(f"💬 Сообщение {message.id}: {sender.id} → {recipient.id}")
        return MessageResponse.model_validate(message)

    async def get_conversation(
            self,
            db: AsyncSession,
            user: models.Profile,
            other_user_id: int,
            skip: int = 0,
            limit: int = 200
    ) -> List[MessageResponse]:
        messages = await messages_repository.get_conversation(db, user.id, other_user_id, skip, limit)
        purchased = set(await ppv_repository.get_purchased_message_ids(db, user.id))
        return [to_message_response(m, user.id, purchased) for m in messages]

    async def list_conversations(self, db: AsyncSession, user: models.Profile) -> List[ConversationSummary]:
        """Последнее сообщение по каждому собеседнику, свежие диалоги первыми"""
        messages = await messages_repository.get_user_messages(db, user.id)
        purchased = set(await ppv_repository.get_purchased_message_ids(db, user.id))

        latest = {}
        unread = {}
        for message in messages:
            other_id = message.recipient_id if message.sender_id == user.id else message.sender_id
            if other_id not in latest:
                latest[other_id] = message
            if message.recipient_id == user.id and not message.is_read:
                unread[other_id] = unread.get(other_id, 0) + 1

        profiles = {p.id: p for p in await profile_repository.get_many(db, list(latest))}
        summaries = []
        for other_id, message in latest.items():
            profile = profiles.get(other_id)
            if not profile:
                continue
            summaries.append(ConversationSummary(
                user_id=other_id,
                username=profile.username,
                display_name=profile.display_name,
                avatar_url=profile.avatar_url,
                last_message=to_message_response(message, user.id, purchased),
                unread_count=unread.get(other_id, 0)
            ))
        return summaries

    async def mark_conversation_read(self, db: AsyncSession, user: models.Profile, other_user_id: int) -> ReadReceipt:
        unread = await messages_repository.get_unread_from(db, user.id, other_user_id)
        updated = await messages_repository.mark_read(db, [m.id for m in unread])
        purchased = frozenset(await ppv_repository.get_purchased_message_ids(db, user.id))

        for message in unread:
            await db.refresh(message)
            await self._publish(message, "UPDATE", user.id, other_user_id, purchased=purchased)
        return ReadReceipt(updated=updated)

    async def send_mass_message(
            self,
            db: AsyncSession,
            creator: models.Profile,
            message_data: MassMessageCreate
    ) -> MassMessageResult:
        await self._ensure_can_sell(db, creator)

        subscriptions = await subscriptions_repository.get_by_creator(db, creator.id, status="active")
        recipients = select_audience(subscriptions, message_data.audience.value)
        if not recipients:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No subscribers match the audience")

        rows = [
            {
                "sender_id": creator.id,
                "recipient_id": recipient_id,
                "content": message_data.content,
                "message_type": message_data.message_type.value,
                "media_url": message_data.media_url,
                "is_ppv": message_data.is_ppv,
                "ppv_price": message_data.ppv_price,
                "is_mass_message": True,
            }
            for recipient_id in recipients
        ]
        messages = await messages_repository.bulk_create(db, rows)
        for message in messages:
            await self._publish(message, "INSERT", message.recipient_id)

        logger.info(f"📣 Автор {creator.id} отправил рассылку {len(messages)} подписчикам ({message_data.audience.value})")
        return MassMessageResult(recipients=len(messages), audience=message_data.audience)

    async def upload_media(self, user: models.Profile, file: UploadFile) -> dict:
        url = await save_uploaded_file(file, "messages", user.id, subfolder="attachments")
        return {"url": url, "message_type": message_type_from_mime(file.content_type)}


message_service = MessageService()
