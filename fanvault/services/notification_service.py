# fanvault/services/notification_service.py
import logging
from typing import List, Dict, Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.redis_client import redis_manager
from fanvault.repository.notifications_repository import notifications_repository
from fanvault.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)


def format_cents(amount: int) -> str:
    """Сумма в центах как $X.YY"""
    return f"${amount / 100:.2f}"


def truncate_comment(comment: str, limit: int = 50) -> str:
    return comment[:limit] + ("..." if len(comment) > limit else "")


REQUEST_STATUS_TEXT = {
    "accepted": 'Your request "{title}" was accepted',
    "in_progress": 'Work on your request "{title}" has started',
    "completed": 'Your request "{title}" is ready. Check your messages',
    "declined": 'Your request "{title}" was declined. Any payment has been refunded',
    "expired": 'Your request "{title}" expired. Any payment has been refunded',
}


def request_status_text(title: str, request_status: str) -> str:
    template = REQUEST_STATUS_TEXT.get(request_status, 'Your request "{title}" is ' + request_status)
    return template.format(title=title)


class NotificationService:

    # ==================== БАЗА ДАННЫХ УВЕДОМЛЕНИЙ ====================

    async def create_notification(
            self,
            db: AsyncSession,
            user_id: int,
            notification_type: str,
            title: str,
            message: str,
            data: Optional[Dict[str, Any]] = None
    ) -> models.Notification:
        """Создание уведомления и отправка в канал пользователя"""
        notification = await notifications_repository.create_from_dict(db, {
            "user_id": user_id,
            "type": notification_type,
            "title": title,
            "message": message,
            "data": data,
        })

        # WebSocket уведомление
        try:
            await redis_manager.publish_to_user(
                user_id,
                "INSERT",
                "notifications",
                NotificationResponse.model_validate(notification).model_dump(mode="json")
            )
        except Exception as e:
            logger.warning(f"⚠️ Не удалось отправить уведомление {notification.id} в realtime: {e}")

        return notification

    async def safe_notify(self, db: AsyncSession, **kwargs) -> Optional[models.Notification]:
        """Уведомление как побочный эффект: ошибка логируется и не прерывает операцию"""
        try:
            return await self.create_notification(db, **kwargs)
        except Exception as e:
            logger.error(f"❌ Ошибка создания уведомления: {e}")
            await db.rollback()
            return None

    async def get_notifications(
            self,
            db: AsyncSession,
            user_id: int,
            unread_only: bool = False,
            skip: int = 0,
            limit: int = 50
    ) -> List[models.Notification]:
        return await notifications_repository.get_by_user(db, user_id, unread_only, skip, limit)

    async def get_unread_count(self, db: AsyncSession, user_id: int) -> int:
        return await notifications_repository.unread_count(db, user_id)

    async def _get_own(self, db: AsyncSession, notification_id: int, user_id: int) -> models.Notification:
        notification = await notifications_repository.get(db, notification_id)
        if not notification or notification.user_id != user_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Уведомление не найдено")
        return notification

    async def mark_as_read(self, db: AsyncSession, notification_id: int, user_id: int) -> models.Notification:
        notification = await self._get_own(db, notification_id, user_id)
        return await notifications_repository.update_fields(db, notification, is_read=True)

    async def mark_all_as_read(self, db: AsyncSession, user_id: int) -> int:
        updated = await notifications_repository.mark_all_read(db, user_id)
        logger.info(f"📭 Пользователь {user_id} прочитал {updated} уведомлений")
        return updated

    async def delete_notification(self, db: AsyncSession, notification_id: int, user_id: int) -> None:
        await self._get_own(db, notification_id, user_id)
        await notifications_repository.delete(db, notification_id)

    # ==================== ТИПОВЫЕ УВЕДОМЛЕНИЯ ====================

    async def notify_tip(self, db: AsyncSession, creator_id: int, tipper_name: str, amount: int,
                         message: Optional[str] = None):
        text = f"You received {format_cents(amount)}"
        if message:
            text += f' with message: "{message}"'
        return await self.safe_notify(
            db,
            user_id=creator_id,
            notification_type="tip",
            title=f"New tip from {tipper_name}",
            message=text,
            data={"amount": amount, "tipper_name": tipper_name, "message": message}
        )

    async def notify_subscription(self, db: AsyncSession, creator_id: int, subscriber_name: str, plan_name: str):
        return await self.safe_notify(
            db,
            user_id=creator_id,
            notification_type="subscription",
            title="New subscriber!",
            message=f"{subscriber_name} subscribed to your {plan_name} plan",
            data={"subscriber_name": subscriber_name, "plan_name": plan_name}
        )

    async def notify_like(self, db: AsyncSession, creator_id: int, liker_name: str, post_title: str):
        return await self.safe_notify(
            db,
            user_id=creator_id,
            notification_type="like",
            title="New like on your post",
            message=f'{liker_name} liked your post "{post_title}"',
            data={"liker_name": liker_name, "post_title": post_title}
        )

    async def notify_comment(self, db: AsyncSession, creator_id: int, commenter_name: str, post_title: str,
                             comment: str):
        return await self.safe_notify(
            db,
            user_id=creator_id,
            notification_type="comment",
            title="New comment on your post",
            message=f'{commenter_name} commented on "{post_title}": {truncate_comment(comment)}',
            data={"commenter_name": commenter_name, "post_title": post_title, "comment": comment}
        )

    async def notify_live_stream(self, db: AsyncSession, subscriber_id: int, creator_name: str, stream_title: str,
                                 stream_id: int):
        return await self.safe_notify(
            db,
            user_id=subscriber_id,
            notification_type="live_stream",
            title=f"{creator_name} is live!",
            message=f'"{stream_title}" - Join now to watch',
            data={"creator_name": creator_name, "stream_title": stream_title, "stream_id": stream_id}
        )

    async def notify_follow(self, db: AsyncSession, user_id: int, follower_name: str):
        return await self.safe_notify(
            db,
            user_id=user_id,
            notification_type="follow",
            title="New follower!",
            message=f"{follower_name} started following you",
            data={"follower_name": follower_name}
        )

    async def notify_payout(self, db: AsyncSession, creator_id: int, amount: int, payout_status: str):
        return await self.safe_notify(
            db,
            user_id=creator_id,
            notification_type="payout",
            title="Payout completed" if payout_status == "completed" else "Payout processing",
            message=f"Your payout of {format_cents(amount)} is {payout_status}",
            data={"amount": amount, "status": payout_status}
        )

    async def notify_custom_request(self, db: AsyncSession, creator_id: int, fan_name: str, title: str,
                                    price: int, request_id: int):
        return await self.safe_notify(
            db,
            user_id=creator_id,
            notification_type="custom_request",
            title="New custom request",
            message=f'{fan_name} requested "{title}" for {format_cents(price)}',
            data={"request_id": request_id, "fan_name": fan_name, "price": price}
        )

    async def notify_request_status(self, db: AsyncSession, fan_id: int, title: str, request_status: str,
                                    request_id: int):
        """Фанату об изменении статуса его заказа"""
        return await self.safe_notify(
            db,
            user_id=fan_id,
            notification_type="custom_request",
            title="Custom request update",
            message=request_status_text(title, request_status),
            data={"request_id": request_id, "status": request_status}
        )

    async def notify_verification(self, db: AsyncSession, user_id: int, approved: bool, notes: Optional[str] = None):
        if approved:
            message = "Your age verification has been approved. You now have full access to the platform."
        else:
            message = f"Your age verification was rejected. {notes or 'Please submit a new, clear photo of your ID.'}"
        return await self.safe_notify(
            db,
            user_id=user_id,
            notification_type="verification",
            title="Age Verification Approved" if approved else "Age Verification Rejected",
            message=message,
            data={"verification_status": "approved" if approved else "rejected"}
        )


notification_service = NotificationService()
