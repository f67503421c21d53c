# fanvault/endpoints/notifications.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.schemas.notification import NotificationResponse, UnreadCountResponse
from fanvault.security.auth import get_current_user
from fanvault.services.notification_service import notification_service

notifications_router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
    responses={404: {"description": "Not found"}}
)


@notifications_router.get("", response_model=List[NotificationResponse])
async def get_notifications(
        unread_only: bool = Query(False),
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=100),
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await notification_service.get_notifications(db, current_user.id, unread_only, skip, limit)


@notifications_router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return UnreadCountResponse(unread_count=await notification_service.get_unread_count(db, current_user.id))


@notifications_router.post("/read-all")
async def mark_all_as_read(
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    updated = await notification_service.mark_all_as_read(db, current_user.id)
    return {"updated": updated}


@notifications_router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_as_read(
        notification_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await notification_service.mark_as_read(db, notification_id, current_user.id)


@notifications_router.delete("/{notification_id}")
async def delete_notification(
        notification_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    await notification_service.delete_notification(db, notification_id, current_user.id)
    return {"message": "Notification deleted successfully"}
