# tests/conftest.py
import os
import tempfile
import uuid
from datetime import datetime, timedelta
from typing import AsyncGenerator
from unittest.mock import patch

# Окружение задается до импорта настроек приложения
os.environ["ENVIRONMENT"] = "test"
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["MEDIA_ROOT"] = tempfile.mkdtemp(prefix="fanvault-media-")

import pytest
from httpx import AsyncClient, ASGITransport
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from fanvault.database import models
from fanvault.database.models.base import Base
from fanvault.database.postgres import get_db
from fanvault.security.auth import create_access_token

from main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "TestPass123"

# Дешевый argon2 для тестов
test_pwd_context = CryptContext(
    schemes=["argon2"],
    argon2__time_cost=1,
    argon2__memory_cost=1024,
    argon2__parallelism=1,
)
TEST_PASSWORD_HASH = test_pwd_context.hash(TEST_PASSWORD)


@pytest.fixture(autouse=True)
def fast_password_hashing():
    with patch("fanvault.security.auth.pwd_context", test_pwd_context):
        yield


@pytest.fixture(autouse=True)
def mock_welcome_delivery():
    """Celery задачи в тестах не уходят в брокер"""
    with patch("fanvault.tasks.tasks.deliver_welcome_message.apply_async") as mock_apply:
        yield mock_apply


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Фикстура для сессии БД"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP клиент приложения с тестовой БД, новая сессия на каждый запрос"""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user: models.Profile) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def user_factory(db_session):
    """Создание пользователя, при is_creator вместе с профилем автора"""

    async def create(
            is_creator: bool = False,
            is_admin: bool = False,
            fee_paid: bool = True,
            subscription_price: int = 999,
            **fields
    ) -> models.Profile:
        unique_id = uuid.uuid4().hex[:8]
        user = models.Profile(
            email=f"user_{unique_id}@example.com",
            username=f"user_{unique_id}",
            display_name=f"User {unique_id}",
            hashed_password=TEST_PASSWORD_HASH,
            is_creator=is_creator,
            is_admin=is_admin,
            age_verified=True,
            **fields
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)

        if is_creator:
            db_session.add(models.CreatorProfile(
                user_id=user.id,
                subscription_price=subscription_price,
                content_categories=[],
                platform_fee_paid_until=datetime.now() + timedelta(days=30) if fee_paid else None,
                is_platform_fee_active=fee_paid
            ))
            await db_session.commit()
        return user

    return create


@pytest.fixture
async def fan(user_factory):
    return await user_factory()


@pytest.fixture
async def creator(user_factory):
    return await user_factory(is_creator=True)


@pytest.fixture
async def admin(user_factory):
    return await user_factory(is_admin=True)


@pytest.fixture
def post_factory(db_session):
    async def create(creator: models.Profile, **fields) -> models.Post:
        data = {
            "title": "Test Post",
            "description": "Test Description",
            "content_type": "image",
            "media_urls": ["/media/posts/1/media/1.jpg"],
            "is_published": True,
        }
        data.update(fields)
        post = models.Post(creator_id=creator.id, **data)
        db_session.add(post)
        await db_session.commit()
        await db_session.refresh(post)
        return post

    return create


@pytest.fixture
def subscription_factory(db_session):
    async def create(subscriber: models.Profile, creator: models.Profile, **fields) -> models.UserSubscription:
        now = datetime.now()
        data = {
            "tier": "monthly",
            "status": "active",
            "start_date": now,
            "end_date": now + timedelta(days=30),
            "amount_paid": 999,
        }
        data.update(fields)
        subscription = models.UserSubscription(subscriber_id=subscriber.id, creator_id=creator.id, **data)
        db_session.add(subscription)
        await db_session.commit()
        await db_session.refresh(subscription)
        return subscription

    return create
