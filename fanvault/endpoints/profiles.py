# fanvault/endpoints/profiles.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import creator_permission
from fanvault.schemas.user import (
    ProfileResponse, PrivateProfileResponse, ProfileUpdate, CreatorProfileCreate, CreatorProfileUpdate,
    CreatorProfileResponse, CreatorPageResponse, FollowResponse
)
from fanvault.security.auth import get_current_user, get_current_user_optional
from fanvault.services.profile_service import profile_service

profiles_router = APIRouter(
    prefix="/profiles",
    tags=["profiles"],
    responses={404: {"description": "Not found"}}
)


@profiles_router.patch("/me", response_model=PrivateProfileResponse)
async def update_my_profile(
        profile_data: ProfileUpdate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await profile_service.update_profile(db, current_user, profile_data)


@profiles_router.post("/me/avatar", response_model=PrivateProfileResponse)
async def upload_avatar(
        file: UploadFile = File(...),
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await profile_service.upload_image(db, current_user, file, "avatar")


@profiles_router.post("/me/cover", response_model=PrivateProfileResponse)
async def upload_cover(
        file: UploadFile = File(...),
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await profile_service.upload_image(db, current_user, file, "cover")


# Авторы
@profiles_router.post("/creator", response_model=CreatorProfileResponse, status_code=201)
async def become_creator(
        creator_data: CreatorProfileCreate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Стать автором"""
    return await profile_service.become_creator(db, current_user, creator_data)


@profiles_router.get("/creator/me", response_model=CreatorProfileResponse)
async def get_my_creator_profile(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await profile_service.get_creator_profile(db, current_user.id)


@profiles_router.patch("/creator/me", response_model=CreatorProfileResponse)
async def update_my_creator_profile(
        creator_data: CreatorProfileUpdate,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await profile_service.update_creator_profile(db, current_user, creator_data)


@profiles_router.get("/creators", response_model=List[ProfileResponse])
async def list_creators(
        q: Optional[str] = Query(None, max_length=100),
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=100),
        db: AsyncSession = Depends(get_db)
):
    """Поиск авторов"""
    return await profile_service.list_creators(db, q, skip, limit)


@profiles_router.get("/creators/{username}/page", response_model=CreatorPageResponse)
async def get_creator_page(
        username: str,
        viewer: Optional[models.Profile] = Depends(get_current_user_optional),
        db: AsyncSession = Depends(get_db)
):
    return await profile_service.get_creator_page(db, username, viewer)


@profiles_router.get("/username/{username}", response_model=ProfileResponse)
async def get_profile_by_username(username: str, db: AsyncSession = Depends(get_db)):
    return await profile_service.get_by_username(db, username)


@profiles_router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: int, db: AsyncSession = Depends(get_db)):
    return await profile_service.get_profile(db, user_id)


# Follow
@profiles_router.post("/{user_id}/follow", response_model=FollowResponse)
async def follow(
        user_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await profile_service.follow(db, current_user, user_id)


@profiles_router.delete("/{user_id}/follow", response_model=FollowResponse)
async def unfollow(
        user_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await profile_service.unfollow(db, current_user, user_id)
