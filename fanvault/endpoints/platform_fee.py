# fanvault/endpoints/platform_fee.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import creator_permission
from fanvault.schemas.payment import PlatformFeeStatus, CheckoutResponse
from fanvault.services.payment_service import payment_service
from fanvault.services.platform_fee_service import platform_fee_service

platform_fee_router = APIRouter(
    prefix="/platform-fee",
    tags=["platform fee"],
    responses={404: {"description": "Not found"}}
)


@platform_fee_router.get("/status", response_model=PlatformFeeStatus)
async def get_platform_fee_status(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await platform_fee_service.get_status(db, current_user)


@platform_fee_router.post("/pay", response_model=CheckoutResponse, status_code=201)
async def pay_platform_fee(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    """Оплата следующего месяца"""
    return await payment_service.pay_platform_fee(db, current_user)
