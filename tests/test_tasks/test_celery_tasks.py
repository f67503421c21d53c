# tests/test_tasks/test_celery_tasks.py
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fanvault.database import models
from fanvault.database.models.base import Base
from fanvault.tasks import tasks


@pytest.fixture
def sync_session_factory():
    """Синхронная БД для задач Celery"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
    with patch.object(tasks, "SessionLocal", factory):
        yield factory
    engine.dispose()


@pytest.fixture
def published():
    with patch.object(tasks, "publish_to_user") as mock_publish:
        yield mock_publish


def make_profile(db, name: str, is_creator: bool = False) -> models.Profile:
    profile = models.Profile(
        email=f"{name}@example.com",
        username=name,
        hashed_password="hash",
        is_creator=is_creator
    )
    db.add(profile)
    db.commit()
    return profile


class TestWelcomeDelivery:
    """Тесты доставки приветственных сообщений"""

    def test_delivers_message(self, sync_session_factory, published):
        with sync_session_factory() as db:
            creator = make_profile(db, "creator", is_creator=True)
            fan = make_profile(db, "fan")
            welcome = models.WelcomeMessage(creator_id=creator.id, content="Thanks for subscribing!")
            db.add(welcome)
            db.commit()
            welcome_id, creator_id, fan_id = welcome.id, creator.id, fan.id

        assert tasks.deliver_welcome_message(welcome_id, fan_id) is True

        with sync_session_factory() as db:
            message = db.scalar(select(models.Message))
            assert message.sender_id == creator_id
            assert message.recipient_id == fan_id
            assert message.content == "Thanks for subscribing!"

        assert {call.args[0] for call in published.call_args_list} == {creator_id, fan_id}
        assert published.call_args_list[0].args[1:3] == ("INSERT", "messages")

    def test_ppv_welcome_is_hidden_from_subscriber(self, sync_session_factory, published):
        """Подписчик получает PPV приветствие без содержимого, автор видит его целиком"""
        with sync_session_factory() as db:
            creator = make_profile(db, "creator", is_creator=True)
            fan = make_profile(db, "fan")
            welcome = models.WelcomeMessage(
                creator_id=creator.id, content="Exclusive set", message_type="image",
                media_url="/media/messages/1/welcome/1.jpg", is_ppv=True, ppv_price=700
            )
            db.add(welcome)
            db.commit()
            welcome_id, creator_id, fan_id = welcome.id, creator.id, fan.id

        assert tasks.deliver_welcome_message(welcome_id, fan_id) is True

        records = {call.args[0]: call.args[3] for call in published.call_args_list}
        assert records[fan_id]["content"] is None
        assert records[fan_id]["media_url"] is None
        assert records[fan_id]["is_locked"] is True
        assert records[fan_id]["ppv_price"] == 700
        assert records[creator_id]["content"] == "Exclusive set"
        assert records[creator_id]["is_locked"] is False

    def test_skips_inactive_message(self, sync_session_factory, published):
        with sync_session_factory() as db:
            creator = make_profile(db, "creator", is_creator=True)
            fan = make_profile(db, "fan")
            welcome = models.WelcomeMessage(creator_id=creator.id, content="Old", is_active=False)
            db.add(welcome)
            db.commit()
            welcome_id, fan_id = welcome.id, fan.id

        assert tasks.deliver_welcome_message(welcome_id, fan_id) is False
        published.assert_not_called()

    def test_skips_deleted_message(self, sync_session_factory, published):
        assert tasks.deliver_welcome_message(404, 1) is False


class TestPeriodicTasks:

    def test_expire_subscriptions(self, sync_session_factory):
        now = datetime.now()
        with sync_session_factory() as db:
            creator = make_profile(db, "creator", is_creator=True)
            fan = make_profile(db, "fan")
            other = make_profile(db, "other")
            db.add(models.CreatorProfile(user_id=creator.id, total_subscribers=2))
            db.add(models.UserSubscription(
                subscriber_id=fan.id, creator_id=creator.id, tier="monthly", status="active",
                start_date=now - timedelta(days=40), end_date=now - timedelta(days=10), amount_paid=999
            ))
            db.add(models.UserSubscription(
                subscriber_id=other.id, creator_id=creator.id, tier="monthly", status="active",
                start_date=now, end_date=now + timedelta(days=30), amount_paid=999
            ))
            db.commit()
            creator_id = creator.id

        assert tasks.expire_subscriptions() == 1

        with sync_session_factory() as db:
            statuses = sorted(s.status for s in db.scalars(select(models.UserSubscription)))
            profile = db.scalar(select(models.CreatorProfile).where(models.CreatorProfile.user_id == creator_id))
            assert statuses == ["active", "expired"]
            assert profile.total_subscribers == 1

    def test_expire_platform_fees(self, sync_session_factory):
        now = datetime.now()
        with sync_session_factory() as db:
            overdue = make_profile(db, "overdue", is_creator=True)
            paid = make_profile(db, "paid", is_creator=True)
            db.add(models.CreatorProfile(
                user_id=overdue.id, is_platform_fee_active=True, platform_fee_paid_until=now - timedelta(days=1)
            ))
            db.add(models.CreatorProfile(
                user_id=paid.id, is_platform_fee_active=True, platform_fee_paid_until=now + timedelta(days=10)
            ))
            db.commit()
            overdue_id = overdue.id

        assert tasks.expire_platform_fees() == 1

        with sync_session_factory() as db:
            profile = db.scalar(select(models.CreatorProfile).where(models.CreatorProfile.user_id == overdue_id))
            assert profile.is_platform_fee_active is False

    def test_process_payouts(self, sync_session_factory, published):
        with sync_session_factory() as db:
            creator = make_profile(db, "creator", is_creator=True)
            db.add(models.Payout(creator_id=creator.id, amount=2500, status="pending"))
            db.add(models.Payout(creator_id=creator.id, amount=100, status="failed"))
            db.commit()
            creator_id = creator.id

        assert tasks.process_payouts() == 1

        with sync_session_factory() as db:
            statuses = sorted(p.status for p in db.scalars(select(models.Payout)))
            notification = db.scalar(select(models.Notification))
            assert statuses == ["completed", "failed"]
            assert notification.user_id == creator_id
            assert "$25.00" in notification.message

        published.assert_called_once()

    def test_cleanup_old_notifications(self, sync_session_factory):
        old = datetime.now() - timedelta(days=45)
        with sync_session_factory() as db:
            user = make_profile(db, "user")
            db.add(models.Notification(user_id=user.id, type="like", title="Old read", message="m", is_read=True, created_at=old))
            db.add(models.Notification(user_id=user.id, type="like", title="Old unread", message="m", is_read=False, created_at=old))
            db.add(models.Notification(user_id=user.id, type="like", title="Fresh read", message="m", is_read=True))
            db.commit()

        assert tasks.cleanup_old_notifications() == 1

        with sync_session_factory() as db:
            titles = sorted(n.title for n in db.scalars(select(models.Notification)))
            assert titles == ["Fresh read", "Old unread"]

    def test_expire_custom_requests(self, sync_session_factory, published):
        """Просрочка дедлайна и ответа в течение суток, оплата возвращается"""
        now = datetime.now()
        with sync_session_factory() as db:
            creator = make_profile(db, "creator", is_creator=True)
            fan = make_profile(db, "fan")
            db.add(models.PaymentIntent(
                provider_intent_id="pi_sim_overdue", user_id=fan.id, creator_id=creator.id,
                payment_type="custom_request", amount=2500, status="succeeded"
            ))
            common = {"fan_id": fan.id, "creator_id": creator.id, "description": "d", "price": 2500}
            db.add(models.CustomRequest(
                title="Overdue", status="accepted", payment_status="paid", payment_intent_id="pi_sim_overdue",
                deadline=now - timedelta(hours=1), **common
            ))
            db.add(models.CustomRequest(
                title="Ignored", status="pending", payment_status="pending",
                deadline=now + timedelta(days=5), created_at=now - timedelta(hours=25), **common
            ))
            db.add(models.CustomRequest(
                title="Fresh", status="pending", payment_status="paid",
                deadline=now + timedelta(days=5), **common
            ))
            db.add(models.CustomRequest(
                title="Done", status="completed", payment_status="paid",
                deadline=now - timedelta(days=1), **common
            ))
            db.commit()
            fan_id = fan.id

        assert tasks.expire_custom_requests() == 2

        with sync_session_factory() as db:
            requests = {r.title: r for r in db.scalars(select(models.CustomRequest))}
            intent = db.scalar(select(models.PaymentIntent))
            notifications = db.scalars(select(models.Notification)).all()

            assert (requests["Overdue"].status, requests["Overdue"].payment_status) == ("expired", "refunded")
            assert (requests["Ignored"].status, requests["Ignored"].payment_status) == ("expired", "pending")
            assert requests["Fresh"].status == "pending"
            assert requests["Done"].status == "completed"
            assert intent.status == "refunded"
            assert {n.user_id for n in notifications} == {fan_id}
            assert len(notifications) == 2

        assert published.call_count == 2
