# fanvault/repository/custom_requests_repository.py
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import CustomRequest
from fanvault.repository.base import BaseRepository
from fanvault.schemas.request import CustomRequestCreate


class CustomRequestsRepository(BaseRepository[CustomRequest, CustomRequestCreate, CustomRequestCreate]):
    def __init__(self):
        super().__init__(CustomRequest)

    async def get_received(
            self,
            db: AsyncSession,
            creator_id: int,
            request_status: Optional[str] = None
    ) -> List[CustomRequest]:
        """Заказы автору, новые первыми"""
        return await self.get_by_field(
            db,
            field_name='creator_id',
            field_value=creator_id,
            order_by=CustomRequest.created_at.desc(),
            status=request_status
        )

    async def get_sent(self, db: AsyncSession, fan_id: int) -> List[CustomRequest]:
        return await self.get_by_field(
            db,
            field_name='fan_id',
            field_value=fan_id,
            order_by=CustomRequest.created_at.desc()
        )


custom_requests_repository = CustomRequestsRepository()
