# fanvault/endpoints/analytics.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import admin_permission, creator_permission
from fanvault.repository.posts_repository import posts_repository
from fanvault.schemas.analytics import (
    AnalyticsEventCreate, AnalyticsContentType, ContentAnalyticsResponse, CreatorAnalytics, CreatorStats,
    UserDashboard, PlatformStats
)
from fanvault.security.auth import get_current_user
from fanvault.services.analytics_service import analytics_service

analytics_router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
    responses={404: {"description": "Not found"}}
)


@analytics_router.post("/events", status_code=201)
async def track_event(
        event: AnalyticsEventCreate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    await analytics_service.track_event(
        db, event.content_id, event.content_type.value, event.metric_type.value, event.value, current_user.id
    )
    return {"message": "Event tracked"}


@analytics_router.get("/content/{content_type}/{content_id}", response_model=ContentAnalyticsResponse)
async def get_content_analytics(
        content_type: AnalyticsContentType,
        content_id: int,
        start_date: Optional[datetime] = Query(None),
        end_date: Optional[datetime] = Query(None),
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    """Метрики контента за период, посты доступны только их автору"""
    if content_type == AnalyticsContentType.POST and not current_user.is_admin:
        post = await posts_repository.get(db, content_id)
        if not post or post.creator_id != current_user.id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Пост не найден")

    return await analytics_service.get_content_analytics(db, content_id, content_type.value, start_date, end_date)


@analytics_router.get("/creator", response_model=CreatorAnalytics)
async def get_creator_analytics(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await analytics_service.get_creator_analytics(db, current_user.id)


@analytics_router.get("/creator/stats", response_model=CreatorStats)
async def get_creator_stats(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    """Статистика автора за последние 30 дней"""
    return await analytics_service.get_creator_stats(db, current_user.id)


@analytics_router.get("/dashboard", response_model=UserDashboard)
async def get_dashboard(
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await analytics_service.get_user_dashboard(db, current_user)


@analytics_router.get("/platform", response_model=PlatformStats)
async def get_platform_stats(
        current_user: models.Profile = Depends(admin_permission),
        db: AsyncSession = Depends(get_db)
):
    return await analytics_service.get_platform_stats(db)
