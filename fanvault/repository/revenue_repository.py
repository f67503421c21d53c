# fanvault/repository/revenue_repository.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import RevenueRecord, Payout
from fanvault.repository.base import BaseRepository
from fanvault.schemas.payment import PayoutCreate, PayoutStatus


class RevenueRepository(BaseRepository[RevenueRecord, PayoutCreate, PayoutCreate]):
    def __init__(self):
        super().__init__(RevenueRecord)

    async def get_by_creator(
            self,
            db: AsyncSession,
            creator_id: int,
            start_date: Optional[datetime] = None,
            end_date: Optional[datetime] = None
    ) -> List[RevenueRecord]:
        """Записи дохода автора за период, новые первыми"""
        stmt = select(RevenueRecord).where(RevenueRecord.creator_id == creator_id)
        if start_date:
            stmt = stmt.where(RevenueRecord.processed_at >= start_date)
        if end_date:
            stmt = stmt.where(RevenueRecord.processed_at <= end_date)
        stmt = stmt.order_by(RevenueRecord.processed_at.desc(), RevenueRecord.id.desc())
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_total_spent(self, db: AsyncSession, buyer_id: int) -> int:
        stmt = select(func.coalesce(func.sum(RevenueRecord.amount), 0)).where(
            RevenueRecord.buyer_id == buyer_id
        )
        result = await db.execute(stmt)
        return int(result.scalar() or 0)

    async def get_platform_totals(self, db: AsyncSession) -> tuple:
        stmt = select(
            func.coalesce(func.sum(RevenueRecord.amount), 0),
            func.coalesce(func.sum(RevenueRecord.platform_fee), 0)
        )
        result = await db.execute(stmt)
        total, fees = result.one()
        return int(total), int(fees)


class PayoutsRepository(BaseRepository[Payout, PayoutCreate, PayoutCreate]):
    def __init__(self):
        super().__init__(Payout)

    async def get_by_creator(self, db: AsyncSession, creator_id: int, skip: int = 0, limit: int = 100) -> List[Payout]:
        return await self.get_by_field(
            db,
            field_name='creator_id',
            field_value=creator_id,
            order_by=Payout.created_at.desc(),
            skip=skip,
            limit=limit
        )

    async def get_committed_amount(self, db: AsyncSession, creator_id: int) -> int:
        """Сумма выплат, кроме неуспешных"""
        stmt = select(func.coalesce(func.sum(Payout.amount), 0)).where(
            Payout.creator_id == creator_id,
            Payout.status != PayoutStatus.FAILED.value
        )
        result = await db.execute(stmt)
        return int(result.scalar() or 0)


revenue_repository = RevenueRepository()
payouts_repository = PayoutsRepository()
