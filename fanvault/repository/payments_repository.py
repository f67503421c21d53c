# fanvault/repository/payments_repository.py
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import PaymentIntent
from fanvault.repository.base import BaseRepository
from fanvault.schemas.payment import PaymentIntentCreate


class PaymentIntentsRepository(BaseRepository[PaymentIntent, PaymentIntentCreate, PaymentIntentCreate]):
    def __init__(self):
        super().__init__(PaymentIntent)

    async def get_by_provider_id(self, db: AsyncSession, provider_intent_id: str) -> Optional[PaymentIntent]:
        stmt = select(PaymentIntent).where(PaymentIntent.provider_intent_id == provider_intent_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()


payment_intents_repository = PaymentIntentsRepository()
