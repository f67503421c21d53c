# fanvault/tasks/tasks.py
import json
import logging
from datetime import datetime, timedelta

import redis
import stripe
from sqlalchemy import create_engine, select, delete, or_, and_
from sqlalchemy.orm import sessionmaker

from fanvault.config.settings import settings
from fanvault.database import models
from fanvault.database.redis_client import user_channel
from fanvault.services.notification_service import format_cents, request_status_text
from fanvault.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

# Настройка БД для Celery (синхронная)
engine = create_engine(settings.SYNC_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

stripe.api_key = settings.STRIPE_SECRET_KEY


def publish_to_user(user_id: int, event: str, table: str, record: dict) -> None:
    """Отправка события в канал пользователя через Redis pub/sub"""
    r = redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        password=settings.REDIS_PASSWORD or None
    )
    r.publish(user_channel(user_id), json.dumps({"type": event, "table": table, "record": record}, default=str))


def message_record(message: models.Message, viewer_id: int) -> dict:
    """Строка сообщения для канала пользователя, PPV скрыт от получателя"""
    locked = bool(message.is_ppv) and message.sender_id != viewer_id
    return {
        "id": message.id,
        "sender_id": message.sender_id,
        "recipient_id": message.recipient_id,
        "content": None if locked else message.content,
        "message_type": message.message_type,
        "media_url": None if locked else message.media_url,
        "is_ppv": message.is_ppv,
        "ppv_price": message.ppv_price,
        "is_read": message.is_read,
        "created_at": message.created_at.isoformat(),
        "is_locked": locked,
    }


def notification_record(notification: models.Notification) -> dict:
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "data": notification.data,
        "is_read": notification.is_read,
        "created_at": notification.created_at.isoformat(),
    }


# ========== ПРИВЕТСТВЕННЫЕ СООБЩЕНИЯ ==========

@celery_app.task
def deliver_welcome_message(welcome_message_id: int, subscriber_id: int):
    """Отправка приветственного сообщения новому подписчику"""
    db = SessionLocal()
    try:
        welcome = db.get(models.WelcomeMessage, welcome_message_id)
        if not welcome or not welcome.is_active:
            logger.info(f"⏭️ Welcome message {welcome_message_id} skipped: inactive or deleted")
            return False

        message = models.Message(
            sender_id=welcome.creator_id,
            recipient_id=subscriber_id,
            content=welcome.content,
            message_type=welcome.message_type,
            media_url=welcome.media_url,
            is_ppv=welcome.is_ppv,
            ppv_price=welcome.ppv_price,
            is_read=False
        )
        db.add(message)
        db.commit()
        db.refresh(message)

        logger.info(f"👋 Welcome message {welcome_message_id} delivered to user {subscriber_id}")

        publish_to_user(subscriber_id, "INSERT", "messages", message_record(message, subscriber_id))
        publish_to_user(welcome.creator_id, "INSERT", "messages", message_record(message, welcome.creator_id))
        return True

    except Exception as e:
        logger.error(f"❌ Error delivering welcome message {welcome_message_id}: {e}")
        db.rollback()
        return False
    finally:
        db.close()


# ========== ПОДПИСКИ И ПЛАТА ПЛАТФОРМЫ ==========

@celery_app.task
def expire_subscriptions():
    """Истекшие активные подписки помечаются expired"""
    db = SessionLocal()
    try:
        now = datetime.now()
        expired = db.scalars(
            select(models.UserSubscription).where(
                models.UserSubscription.status == "active",
                models.UserSubscription.end_date < now
            )
        ).all()

        for subscription in expired:
            subscription.status = "expired"
            creator = db.scalar(
                select(models.CreatorProfile).where(models.CreatorProfile.user_id == subscription.creator_id)
            )
            if creator:
                creator.total_subscribers = max(0, (creator.total_subscribers or 0) - 1)

        db.commit()
        logger.info(f"✅ Subscriptions expired: {len(expired)}")
        return len(expired)

    except Exception as e:
        logger.error(f"❌ Error expiring subscriptions: {e}")
        db.rollback()
        return 0
    finally:
        db.close()


@celery_app.task
def expire_platform_fees():
    """Отключение авторов с просроченной платой платформы"""
    db = SessionLocal()
    try:
        overdue = db.scalars(
            select(models.CreatorProfile).where(
                models.CreatorProfile.is_platform_fee_active == True,  # noqa: E712
                models.CreatorProfile.platform_fee_paid_until < datetime.now()
            )
        ).all()

        for creator in overdue:
            creator.is_platform_fee_active = False

        db.commit()
        logger.info(f"✅ Platform fees expired: {len(overdue)} creators")
        return len(overdue)

    except Exception as e:
        logger.error(f"❌ Error expiring platform fees: {e}")
        db.rollback()
        return 0
    finally:
        db.close()


# ========== ВЫПЛАТЫ ==========

@celery_app.task
def process_payouts():
    """Проведение ожидающих выплат и уведомление авторов"""
    db = SessionLocal()
    try:
        pending = db.scalars(
            select(models.Payout).where(models.Payout.status == "pending")
        ).all()

        notifications = []
        for payout in pending:
            payout.status = "completed"
            payout.processed_at = datetime.now()

            notification = models.Notification(
                user_id=payout.creator_id,
                type="payout",
                title="Payout completed",
                message=f"Your payout of {format_cents(payout.amount)} is completed",
                data={"amount": payout.amount, "status": "completed"},
                is_read=False
            )
            db.add(notification)
            notifications.append(notification)

        db.commit()

        for notification in notifications:
            db.refresh(notification)
            publish_to_user(notification.user_id, "INSERT", "notifications", notification_record(notification))

        logger.info(f"🏦 Payouts processed: {len(pending)}")
        return len(pending)

    except Exception as e:
        logger.error(f"❌ Error processing payouts: {e}")
        db.rollback()
        return 0
    finally:
        db.close()


# ========== ЗАКАЗЫ КОНТЕНТА ==========

REQUEST_RESPONSE_HOURS = 24


@celery_app.task
def expire_custom_requests():
    """Просроченные заказы помечаются expired, оплата возвращается фанату"""
    db = SessionLocal()
    try:
        now = datetime.now()
        overdue = db.scalars(
            select(models.CustomRequest).where(
                models.CustomRequest.status.in_(("pending", "accepted", "in_progress")),
                or_(
                    models.CustomRequest.deadline < now,
                    and_(
                        models.CustomRequest.status == "pending",
                        models.CustomRequest.created_at < now - timedelta(hours=REQUEST_RESPONSE_HOURS)
                    )
                )
            )
        ).all()

        notifications = []
        for request in overdue:
            if request.payment_status == "paid":
                if settings.STRIPE_ENABLED:
                    try:
                        stripe.Refund.create(payment_intent=request.payment_intent_id)
                    except stripe.StripeError as e:
                        logger.error(f"❌ Refund failed for custom request {request.id}: {e}")
                        continue
                intent = db.scalar(
                    select(models.PaymentIntent).where(
                        models.PaymentIntent.provider_intent_id == request.payment_intent_id
                    )
                )
                if intent:
                    intent.status = "refunded"
                request.payment_status = "refunded"

            request.status = "expired"
            notification = models.Notification(
                user_id=request.fan_id,
                type="custom_request",
                title="Custom request update",
                message=request_status_text(request.title, "expired"),
                data={"request_id": request.id, "status": "expired"},
                is_read=False
            )
            db.add(notification)
            notifications.append(notification)

        db.commit()

        for notification in notifications:
            db.refresh(notification)
            publish_to_user(notification.user_id, "INSERT", "notifications", notification_record(notification))

        logger.info(f"⌛ Custom requests expired: {len(notifications)}")
        return len(notifications)

    except Exception as e:
        logger.error(f"❌ Error expiring custom requests: {e}")
        db.rollback()
        return 0
    finally:
        db.close()


# ========== ОЧИСТКА ==========

@celery_app.task
def cleanup_old_notifications():
    """Удаление прочитанных уведомлений старше 30 дней"""
    db = SessionLocal()
    try:
        thirty_days_ago = datetime.now() - timedelta(days=30)
        deleted = db.execute(
            delete(models.Notification).where(
                models.Notification.is_read == True,  # noqa: E712
                models.Notification.created_at < thirty_days_ago
            )
        ).rowcount

        db.commit()
        logger.info(f"✅ Cleanup completed: {deleted} notifications")
        return deleted

    except Exception as e:
        logger.error(f"❌ Error cleaning up notifications: {e}")
        db.rollback()
        return 0
    finally:
        db.close()
