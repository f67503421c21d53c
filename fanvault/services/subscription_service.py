# fanvault/services/subscription_service.py
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.repository.creator_repository import creator_repository
from fanvault.repository.subscriptions_repository import subscription_plans_repository, subscriptions_repository
from fanvault.schemas.payment import (
    SubscriptionPlanCreate, SubscriptionPlanResponse, SubscriptionResponse, SubscriptionStatusResponse,
    SubscriptionTier, SubscriptionStatus
)
from fanvault.services.platform_fee_service import add_months

logger = logging.getLogger(__name__)

# множитель цены и длительность в месяцах
TIER_PRICING = {
    SubscriptionTier.MONTHLY.value: (1.0, 1),
    SubscriptionTier.QUARTERLY.value: (2.7, 3),
    SubscriptionTier.YEARLY.value: (10.0, 12),
}


def tier_price(base_price: int, tier: str) -> Tuple[int, int]:
    """Цена и длительность подписки для тарифа"""
    if tier not in TIER_PRICING:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Неизвестный тариф: {tier}")
    multiplier, months = TIER_PRICING[tier]
    return int(base_price * multiplier), months


class SubscriptionService:

    # ==================== ТАРИФЫ ====================

    async def create_plan(
            self,
            db: AsyncSession,
            creator: models.Profile,
            plan_data: SubscriptionPlanCreate
    ) -> SubscriptionPlanResponse:
        plan = await subscription_plans_repository.create(db, plan_data, creator_id=creator.id)
        logger.info(f"📋 Автор {creator.id} создал тариф {plan.id}")
        return SubscriptionPlanResponse.model_validate(plan)

    async def list_plans(self, db: AsyncSession, creator_id: int) -> List[SubscriptionPlanResponse]:
        plans = await subscription_plans_repository.get_by_creator(db, creator_id)
        return [SubscriptionPlanResponse.model_validate(p) for p in plans]

    async def deactivate_plan(self, db: AsyncSession, creator: models.Profile, plan_id: int) -> SubscriptionPlanResponse:
        plan = await subscription_plans_repository.get(db, plan_id)
        if not plan or plan.creator_id != creator.id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Тариф не найден")
        plan = await subscription_plans_repository.update_fields(db, plan, is_active=False)
        return SubscriptionPlanResponse.model_validate(plan)

    async def quote(
            self,
            db: AsyncSession,
            creator_id: int,
            tier: str,
            plan_id: Optional[int] = None
    ) -> Tuple[int, int]:
        """Стоимость и длительность подписки: по тарифу автора или по базовой цене"""
        if plan_id is not None:
            plan = await subscription_plans_repository.get(db, plan_id)
            if not plan or plan.creator_id != creator_id or not plan.is_active:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Тариф не найден")
            return plan.price, plan.duration_months

        creator = await creator_repository.get_by_user(db, creator_id)
        if not creator:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Автор не найден")
        return tier_price(creator.subscription_price, tier)

    # ==================== ПОДПИСКИ ====================

    async def ensure_not_subscribed(self, db: AsyncSession, subscriber_id: int, creator_id: int) -> None:
        if await subscriptions_repository.get_active(db, subscriber_id, creator_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already subscribed to this creator")

    async def create_subscription(
            self,
            db: AsyncSession,
            subscriber_id: int,
            creator_id: int,
            tier: str,
            amount_paid: int,
            months: int,
            plan_id: Optional[int] = None
    ) -> models.UserSubscription:
        await self.ensure_not_subscribed(db, subscriber_id, creator_id)

        start = datetime.now()
        subscription = await subscriptions_repository.create_from_dict(db, {
            "subscriber_id": subscriber_id,
            "creator_id": creator_id,
            "plan_id": plan_id,
            "tier": tier,
            "status": SubscriptionStatus.ACTIVE.value,
            "start_date": start,
            "end_date": add_months(start, months),
            "amount_paid": amount_paid,
        })
        await creator_repository.change_subscribers(db, creator_id, 1)

        logger.info(f"⭐ Пользователь {subscriber_id} подписался на автора {creator_id} ({tier})")
        return subscription

    async def cancel_subscription(
            self,
            db: AsyncSession,
            user: models.Profile,
            subscription_id: int
    ) -> SubscriptionResponse:
        """Отмена действует сразу: доступ до end_date не сохраняется"""
        subscription = await subscriptions_repository.get(db, subscription_id)
        if not subscription or subscription.subscriber_id != user.id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Подписка не найдена")

        if subscription.status != SubscriptionStatus.ACTIVE.value:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subscription is not active")

        subscription = await subscriptions_repository.update_fields(
            db, subscription, status=SubscriptionStatus.CANCELLED.value, end_date=datetime.now()
        )
        await creator_repository.change_subscribers(db, subscription.creator_id, -1)

        logger.info(f"🚫 Подписка {subscription.id} отменена пользователем {user.id}")
        return SubscriptionResponse.model_validate(subscription)

    async def get_status(self, db: AsyncSession, user: models.Profile, creator_id: int) -> SubscriptionStatusResponse:
        subscription = await subscriptions_repository.get_active(db, user.id, creator_id)
        return SubscriptionStatusResponse(
            creator_id=creator_id,
            is_subscribed=subscription is not None,
            subscription=SubscriptionResponse.model_validate(subscription) if subscription else None
        )

    async def get_my_subscriptions(
            self,
            db: AsyncSession,
            user: models.Profile,
            status_filter: Optional[str] = None
    ) -> List[SubscriptionResponse]:
        subscriptions = await subscriptions_repository.get_by_subscriber(db, user.id, status=status_filter)
        return [SubscriptionResponse.model_validate(s) for s in subscriptions]

    async def get_my_subscribers(
            self,
            db: AsyncSession,
            creator: models.Profile,
            status_filter: Optional[str] = SubscriptionStatus.ACTIVE.value
    ) -> List[SubscriptionResponse]:
        subscriptions = await subscriptions_repository.get_by_creator(db, creator.id, status=status_filter)
        return [SubscriptionResponse.model_validate(s) for s in subscriptions]


subscription_service = SubscriptionService()
