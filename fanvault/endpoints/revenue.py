# fanvault/endpoints/revenue.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import creator_permission
from fanvault.schemas.payment import RevenueSummary, EarningsSummary, PayoutCreate, PayoutResponse
from fanvault.services.revenue_service import revenue_service

revenue_router = APIRouter(
    prefix="/revenue",
    tags=["revenue"],
    responses={404: {"description": "Not found"}}
)


@revenue_router.get("", response_model=RevenueSummary)
async def get_revenue(
        start_date: Optional[datetime] = Query(None),
        end_date: Optional[datetime] = Query(None),
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    """Доход автора за период"""
    return await revenue_service.get_creator_revenue(db, current_user.id, start_date, end_date)


@revenue_router.get("/earnings", response_model=EarningsSummary)
async def get_earnings(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await revenue_service.get_earnings_summary(db, current_user)


@revenue_router.post("/payouts", response_model=PayoutResponse, status_code=201)
async def request_payout(
        payout_data: PayoutCreate,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await revenue_service.request_payout(db, current_user, payout_data)


@revenue_router.get("/payouts", response_model=List[PayoutResponse])
async def list_payouts(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await revenue_service.list_payouts(db, current_user)
