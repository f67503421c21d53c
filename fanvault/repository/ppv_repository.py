# fanvault/repository/ppv_repository.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import PPVPurchase


class PPVRepository:
    def __init__(self):
        self.model = PPVPurchase

    async def create(
            self,
            db: AsyncSession,
            buyer_id: int,
            seller_id: int,
            amount: int,
            post_id: Optional[int] = None,
            message_id: Optional[int] = None
    ) -> PPVPurchase:
        purchase = PPVPurchase(
            buyer_id=buyer_id,
            seller_id=seller_id,
            amount=amount,
            post_id=post_id,
            message_id=message_id
        )
        db.add(purchase)
        await db.commit()
        await db.refresh(purchase)
        return purchase

    async def has_purchased(
            self,
            db: AsyncSession,
            buyer_id: int,
            post_id: Optional[int] = None,
            message_id: Optional[int] = None
    ) -> bool:
        """Проверка покупки поста или сообщения"""
        stmt = select(PPVPurchase.id).where(PPVPurchase.buyer_id == buyer_id)
        if post_id is not None:
            stmt = stmt.where(PPVPurchase.post_id == post_id)
        if message_id is not None:
            stmt = stmt.where(PPVPurchase.message_id == message_id)
        result = await db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def get_purchased_message_ids(self, db: AsyncSession, buyer_id: int) -> List[int]:
        stmt = select(PPVPurchase.message_id).where(
            PPVPurchase.buyer_id == buyer_id,
            PPVPurchase.message_id.is_not(None)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_purchased_post_ids(self, db: AsyncSession, buyer_id: int) -> List[int]:
        stmt = select(PPVPurchase.post_id).where(
            PPVPurchase.buyer_id == buyer_id,
            PPVPurchase.post_id.is_not(None)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_buyer(self, db: AsyncSession, buyer_id: int, limit: int = 100) -> List[PPVPurchase]:
        stmt = (
            select(PPVPurchase)
            .where(PPVPurchase.buyer_id == buyer_id)
            .order_by(PPVPurchase.created_at.desc())
            .limit(limit)
        )
        result = await db.execute(stmt)
        return result.scalars().all()


ppv_repository = PPVRepository()
