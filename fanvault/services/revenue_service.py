# fanvault/services/revenue_service.py
import logging
from datetime import datetime
from typing import Optional, List

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.config.settings import settings
from fanvault.database import models
from fanvault.repository.creator_repository import creator_repository
from fanvault.repository.revenue_repository import revenue_repository, payouts_repository
from fanvault.schemas.payment import (
    RevenueSummary, RevenueRecordResponse, PayoutCreate, PayoutResponse, EarningsSummary, PayoutStatus
)
from fanvault.services.analytics_service import summarize_revenue
from fanvault.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def split_amount(amount: int, platform_fee: Optional[int] = None) -> tuple:
    """Комиссия платформы (по умолчанию 15%) и чистый доход автора"""
    if platform_fee is None:
        platform_fee = int(amount * settings.REVENUE_FEE_RATE)
    return platform_fee, amount - platform_fee


class RevenueService:

    async def record_revenue(
            self,
            db: AsyncSession,
            creator_id: int,
            source_type: str,
            amount: int,
            source_id: Optional[int] = None,
            buyer_id: Optional[int] = None,
            platform_fee: Optional[int] = None
    ) -> models.RevenueRecord:
        """Запись дохода автора и увеличение его заработка"""
        fee, net_amount = split_amount(amount, platform_fee)
        record = await revenue_repository.create_from_dict(db, {
            "creator_id": creator_id,
            "buyer_id": buyer_id,
            "source_type": source_type,
            "source_id": source_id,
            "amount": amount,
            "platform_fee": fee,
            "net_amount": net_amount,
            "currency": settings.CURRENCY,
            "processed_at": datetime.now(),
        })
        await creator_repository.add_earnings(db, creator_id, net_amount)

        logger.info(f"💰 Доход автора {creator_id}: {source_type} {amount} (чистыми {net_amount})")
        return record

    async def get_creator_revenue(
            self,
            db: AsyncSession,
            creator_id: int,
            start_date: Optional[datetime] = None,
            end_date: Optional[datetime] = None
    ) -> RevenueSummary:
        records = await revenue_repository.get_by_creator(db, creator_id, start_date, end_date)
        summary = summarize_revenue(records)
        return RevenueSummary(
            **summary,
            records=[RevenueRecordResponse.model_validate(r) for r in records]
        )

    async def get_available_balance(self, db: AsyncSession, creator_id: int) -> int:
        """Чистый доход минус все выплаты, кроме неуспешных"""
        summary = summarize_revenue(await revenue_repository.get_by_creator(db, creator_id))
        committed = await payouts_repository.get_committed_amount(db, creator_id)
        return summary["total_revenue"] - committed

    async def request_payout(self, db: AsyncSession, creator: models.Profile, payout_data: PayoutCreate) -> PayoutResponse:
        available = await self.get_available_balance(db, creator.id)
        if payout_data.amount > available:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Insufficient balance")

        payout = await payouts_repository.create(
            db, payout_data, creator_id=creator.id, status=PayoutStatus.PENDING.value
        )
        await notification_service.notify_payout(db, creator.id, payout.amount, payout.status)

        logger.info(f"🏦 Запрошена выплата {payout.id} автору {creator.id}: {payout.amount}")
        return PayoutResponse.model_validate(payout)

    async def list_payouts(self, db: AsyncSession, creator: models.Profile) -> List[PayoutResponse]:
        payouts = await payouts_repository.get_by_creator(db, creator.id)
        return [PayoutResponse.model_validate(p) for p in payouts]

    async def get_earnings_summary(self, db: AsyncSession, creator: models.Profile) -> EarningsSummary:
        summary = summarize_revenue(await revenue_repository.get_by_creator(db, creator.id))
        payouts = await payouts_repository.get_by_creator(db, creator.id)
        paid_out = sum(p.amount for p in payouts if p.status != PayoutStatus.FAILED.value)

        return EarningsSummary(
            total_revenue=summary["total_revenue"],
            total_fees=summary["total_fees"],
            paid_out=paid_out,
            available_balance=summary["total_revenue"] - paid_out,
            revenue_by_source=summary["revenue_by_source"],
            payouts=[PayoutResponse.model_validate(p) for p in payouts]
        )


revenue_service = RevenueService()
