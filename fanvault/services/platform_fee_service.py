# fanvault/services/platform_fee_service.py
import calendar
import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.config.settings import settings
from fanvault.database import models
from fanvault.repository.creator_repository import creator_repository
from fanvault.schemas.payment import PlatformFeeStatus

logger = logging.getLogger(__name__)


def add_months(moment: datetime, months: int) -> datetime:
    """Сдвиг даты на N месяцев с поправкой на длину месяца"""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def fee_is_active(creator: Optional[models.CreatorProfile], now: Optional[datetime] = None) -> bool:
    now = now or datetime.now()
    return bool(
        creator
        and creator.is_platform_fee_active
        and creator.platform_fee_paid_until
        and creator.platform_fee_paid_until >= now
    )


class PlatformFeeService:
    """Ежемесячная плата автора платформе"""

    async def get_status(self, db: AsyncSession, user: models.Profile) -> PlatformFeeStatus:
        creator = await creator_repository.get_by_user(db, user.id)
        if not creator:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Профиль автора не найден")

        paid_until = creator.platform_fee_paid_until
        return PlatformFeeStatus(
            is_active=fee_is_active(creator),
            paid_until=paid_until,
            is_expired=paid_until is None or paid_until < datetime.now(),
            amount=settings.PLATFORM_FEE_AMOUNT
        )

    async def extend(self, db: AsyncSession, creator_id: int) -> models.CreatorProfile:
        """Продление оплаченного периода на месяц от текущей даты или от paid_until"""
        creator = await creator_repository.get_by_user(db, creator_id)
        if not creator:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Профиль автора не найден")

        now = datetime.now()
        start = creator.platform_fee_paid_until
        if not start or start < now:
            start = now

        creator = await creator_repository.update_fields(
            db,
            creator,
            platform_fee_paid_until=add_months(start, 1),
            is_platform_fee_active=True
        )
        logger.info(f"💳 Плата платформы автора {creator_id} продлена до {creator.platform_fee_paid_until}")
        return creator


platform_fee_service = PlatformFeeService()
