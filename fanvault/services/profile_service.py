# fanvault/services/profile_service.py
import logging
from typing import List, Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.repository.creator_repository import creator_repository
from fanvault.repository.follows_repository import follows_repository
from fanvault.repository.subscriptions_repository import subscription_plans_repository, subscriptions_repository
from fanvault.repository.user_repository import profile_repository
from fanvault.schemas.payment import SubscriptionPlanResponse
from fanvault.schemas.user import (
    ProfileUpdate, ProfileResponse, PrivateProfileResponse, CreatorProfileCreate, CreatorProfileUpdate,
    CreatorProfileResponse, CreatorPageResponse, FollowResponse
)
from fanvault.services.notification_service import notification_service
from fanvault.utils.file_utils import save_uploaded_file

logger = logging.getLogger(__name__)


class ProfileService:
    """Профили пользователей, авторы и подписки на обновления"""

    async def get_profile(self, db: AsyncSession, user_id: int) -> models.Profile:
        profile = await profile_repository.get(db, user_id)
        if not profile or not profile.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Пользователь не найден")
        return profile

    async def get_by_username(self, db: AsyncSession, username: str) -> models.Profile:
        profile = await profile_repository.get_by_username(db, username)
        if not profile or not profile.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Пользователь не найден")
        return profile

    async def update_profile(
            self,
            db: AsyncSession,
            user: models.Profile,
            profile_data: ProfileUpdate
    ) -> PrivateProfileResponse:
        profile = await profile_repository.update(db, user, profile_data)
        logger.info(f"✏️ Профиль {user.id} обновлен")
        return PrivateProfileResponse.model_validate(profile)

    async def upload_image(
            self,
            db: AsyncSession,
            user: models.Profile,
            file: UploadFile,
            kind: str
    ) -> PrivateProfileResponse:
        """Загрузка аватара или обложки"""
        if kind not in ("avatar", "cover"):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Неизвестный тип изображения")

        url = await save_uploaded_file(file, "avatars", user.id, subfolder=kind)
        profile = await profile_repository.update_fields(db, user, **{f"{kind}_url": url})
        return PrivateProfileResponse.model_validate(profile)

    # ==================== АВТОРЫ ====================

    async def become_creator(
            self,
            db: AsyncSession,
            user: models.Profile,
            creator_data: CreatorProfileCreate
    ) -> CreatorProfileResponse:
        """Создание профиля автора и включение флага is_creator"""
        if await creator_repository.get_by_user(db, user.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Профиль автора уже существует")

        creator = await creator_repository.create(db, creator_data, user_id=user.id)
        await profile_repository.update_fields(db, user, is_creator=True)

        logger.info(f"🎨 Пользователь {user.id} стал автором")
        return CreatorProfileResponse.model_validate(creator)

    async def get_creator_profile(self, db: AsyncSession, user_id: int) -> models.CreatorProfile:
        creator = await creator_repository.get_by_user(db, user_id)
        if not creator:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Профиль автора не найден")
        return creator

    async def update_creator_profile(
            self,
            db: AsyncSession,
            user: models.Profile,
            creator_data: CreatorProfileUpdate
    ) -> CreatorProfileResponse:
        creator = await self.get_creator_profile(db, user.id)
        creator = await creator_repository.update(db, creator, creator_data)
        return CreatorProfileResponse.model_validate(creator)

    async def list_creators(
            self,
            db: AsyncSession,
            query: Optional[str] = None,
            skip: int = 0,
            limit: int = 50
    ) -> List[ProfileResponse]:
        creators = await profile_repository.search_creators(db, query, skip, limit)
        return [ProfileResponse.model_validate(c) for c in creators]

    async def get_creator_page(
            self,
            db: AsyncSession,
            username: str,
            viewer: Optional[models.Profile] = None
    ) -> CreatorPageResponse:
        """Публичная страница автора с тарифами"""
        profile = await self.get_by_username(db, username)
        if not profile.is_creator:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Автор не найден")

        creator = await self.get_creator_profile(db, profile.id)
        plans = await subscription_plans_repository.get_by_creator(db, profile.id)

        is_subscribed = False
        is_following = False
        if viewer:
            is_subscribed = await subscriptions_repository.get_active(db, viewer.id, profile.id) is not None
            is_following = await follows_repository.is_following(db, viewer.id, profile.id)

        return CreatorPageResponse(
            profile=ProfileResponse.model_validate(profile),
            creator=CreatorProfileResponse.model_validate(creator),
            plans=[SubscriptionPlanResponse.model_validate(p) for p in plans],
            is_subscribed=is_subscribed,
            is_following=is_following
        )

    # ==================== FOLLOW ====================

    async def follow(self, db: AsyncSession, user: models.Profile, target_id: int) -> FollowResponse:
        if target_id == user.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Нельзя подписаться на себя")

        await self.get_profile(db, target_id)
        try:
            await follows_repository.create(db, user.id, target_id)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

        await notification_service.notify_follow(db, target_id, user.display_name or user.username)
        return FollowResponse(following_id=target_id, is_following=True)

    async def unfollow(self, db: AsyncSession, user: models.Profile, target_id: int) -> FollowResponse:
        removed = await follows_repository.delete(db, user.id, target_id)
        if not removed:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Подписка не найдена")
        return FollowResponse(following_id=target_id, is_following=False)


profile_service = ProfileService()
