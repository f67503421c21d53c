# fanvault/endpoints/subscriptions.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import active_creator_permission, creator_permission
from fanvault.schemas.payment import (
    SubscriptionPlanCreate, SubscriptionPlanResponse, SubscribeRequest, SubscriptionResponse,
    SubscriptionStatusResponse, CheckoutResponse, SubscriptionStatus
)
from fanvault.security.auth import get_current_user
from fanvault.services.payment_service import payment_service
from fanvault.services.subscription_service import subscription_service

subscriptions_router = APIRouter(
    prefix="/subscriptions",
    tags=["subscriptions"],
    responses={404: {"description": "Not found"}}
)


# Тарифы
@subscriptions_router.post("/plans", response_model=SubscriptionPlanResponse, status_code=201)
async def create_plan(
        plan_data: SubscriptionPlanCreate,
        current_user: models.Profile = Depends(active_creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await subscription_service.create_plan(db, current_user, plan_data)


@subscriptions_router.get("/plans/{creator_id}", response_model=List[SubscriptionPlanResponse])
async def list_plans(creator_id: int, db: AsyncSession = Depends(get_db)):
    """Активные тарифы автора"""
    return await subscription_service.list_plans(db, creator_id)


@subscriptions_router.delete("/plans/{plan_id}", response_model=SubscriptionPlanResponse)
async def deactivate_plan(
        plan_id: int,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await subscription_service.deactivate_plan(db, current_user, plan_id)


# Подписки
@subscriptions_router.post("", response_model=CheckoutResponse, status_code=201)
async def subscribe(
        request: SubscribeRequest,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Оформление подписки через оплату"""
    return await payment_service.subscribe(db, current_user, request)


@subscriptions_router.get("/me", response_model=List[SubscriptionResponse])
async def get_my_subscriptions(
        status_filter: Optional[SubscriptionStatus] = Query(None, alias="status"),
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await subscription_service.get_my_subscriptions(
        db, current_user, status_filter.value if status_filter else None
    )


@subscriptions_router.get("/subscribers", response_model=List[SubscriptionResponse])
async def get_my_subscribers(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await subscription_service.get_my_subscribers(db, current_user)


@subscriptions_router.get("/status/{creator_id}", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
        creator_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await subscription_service.get_status(db, current_user, creator_id)


@subscriptions_router.post("/{subscription_id}/cancel", response_model=SubscriptionResponse)
async def cancel_subscription(
        subscription_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await subscription_service.cancel_subscription(db, current_user, subscription_id)
