# fanvault/repository/subscriptions_repository.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import UserSubscription, SubscriptionPlan
from fanvault.repository.base import BaseRepository
from fanvault.schemas.payment import SubscriptionPlanCreate, SubscriptionStatus


class SubscriptionPlansRepository(BaseRepository[SubscriptionPlan, SubscriptionPlanCreate, SubscriptionPlanCreate]):
    def __init__(self):
        super().__init__(SubscriptionPlan)

    async def get_by_creator(
            self,
            db: AsyncSession,
            creator_id: int,
            active_only: bool = True
    ) -> List[SubscriptionPlan]:
        return await self.get_by_field(
            db,
            field_name='creator_id',
            field_value=creator_id,
            order_by=SubscriptionPlan.price.asc(),
            is_active=True if active_only else None
        )


class SubscriptionsRepository(BaseRepository[UserSubscription, SubscriptionPlanCreate, SubscriptionPlanCreate]):
    def __init__(self):
        super().__init__(UserSubscription)

    async def get_active(
            self,
            db: AsyncSession,
            subscriber_id: int,
            creator_id: int
    ) -> Optional[UserSubscription]:
        """Действующая подписка пользователя на автора"""
        stmt = select(UserSubscription).where(
            UserSubscription.subscriber_id == subscriber_id,
            UserSubscription.creator_id == creator_id,
            UserSubscription.status == SubscriptionStatus.ACTIVE.value
        )
        result = await db.execute(stmt)
        subscription = result.scalars().first()
        if subscription and subscription.end_date and subscription.end_date < datetime.now():
            return None
        return subscription

    async def get_by_subscriber(
            self,
            db: AsyncSession,
            subscriber_id: int,
            status: Optional[str] = None,
            skip: int = 0,
            limit: int = 100
    ) -> List[UserSubscription]:
        return await self.get_by_field(
            db,
            field_name='subscriber_id',
            field_value=subscriber_id,
            order_by=UserSubscription.created_at.desc(),
            skip=skip,
            limit=limit,
            status=status
        )

    async def get_by_creator(
            self,
            db: AsyncSession,
            creator_id: int,
            status: Optional[str] = None,
            since: Optional[datetime] = None,
            skip: int = 0,
            limit: int = 10000
    ) -> List[UserSubscription]:
        """Подписчики автора с фильтром по статусу и дате начала"""
        stmt = select(UserSubscription).where(UserSubscription.creator_id == creator_id)
        if status:
            stmt = stmt.where(UserSubscription.status == status)
        if since:
            stmt = stmt.where(UserSubscription.start_date >= since)
        stmt = stmt.order_by(UserSubscription.created_at.desc()).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_subscribed_creator_ids(self, db: AsyncSession, subscriber_id: int) -> List[int]:
        stmt = select(UserSubscription.creator_id).where(
            UserSubscription.subscriber_id == subscriber_id,
            UserSubscription.status == SubscriptionStatus.ACTIVE.value,
            or_(UserSubscription.end_date.is_(None), UserSubscription.end_date >= datetime.now())
        ).distinct()
        result = await db.execute(stmt)
        return list(result.scalars().all())


subscription_plans_repository = SubscriptionPlansRepository()
subscriptions_repository = SubscriptionsRepository()
