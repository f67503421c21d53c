# fanvault/dependencies/rbac.py
from fastapi import HTTPException, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.repository.creator_repository import creator_repository
from fanvault.security.auth import get_current_user
from fanvault.services.platform_fee_service import fee_is_active


def permission(flag: str):
    """Проверка булева флага роли у профиля"""

    def role_checker(current_user: models.Profile = Depends(get_current_user)):
        if not getattr(current_user, 'is_active', True):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is deactivated"
            )

        if not getattr(current_user, flag, False):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions"
            )
        return current_user

    return role_checker


admin_permission = permission("is_admin")
creator_permission = permission("is_creator")


async def active_creator_permission(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
) -> models.Profile:
    """Автор с оплаченной ежемесячной платой платформы"""
    creator = await creator_repository.get_by_user(db, current_user.id)
    if not fee_is_active(creator):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Platform fee is not paid"
        )
    return current_user
