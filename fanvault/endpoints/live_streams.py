# fanvault/endpoints/live_streams.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import active_creator_permission, creator_permission
from fanvault.schemas.stream import (
    LiveStreamCreate, LiveStreamResponse, LiveStreamOwnerResponse, LiveStreamJoinResponse
)
from fanvault.security.auth import get_current_user
from fanvault.services.live_stream_service import live_stream_service

streams_router = APIRouter(
    prefix="/streams",
    tags=["live streams"],
    responses={404: {"description": "Not found"}}
)


@streams_router.post("", response_model=LiveStreamOwnerResponse, status_code=201)
async def create_stream(
        stream_data: LiveStreamCreate,
        current_user: models.Profile = Depends(active_creator_permission),
        db: AsyncSession = Depends(get_db)
):
    """
    Создание трансляции
    """
    return await live_stream_service.create_stream(db, current_user, stream_data)


@streams_router.get("/active", response_model=List[LiveStreamResponse])
async def get_active_streams(db: AsyncSession = Depends(get_db)):
    return await live_stream_service.get_active_streams(db)


@streams_router.get("/me", response_model=List[LiveStreamOwnerResponse])
async def get_my_streams(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await live_stream_service.get_my_streams(db, current_user)


@streams_router.get("/{stream_id}", response_model=LiveStreamResponse)
async def get_stream(stream_id: int, db: AsyncSession = Depends(get_db)):
    return await live_stream_service.get_stream(db, stream_id)


@streams_router.post("/{stream_id}/start", response_model=LiveStreamOwnerResponse)
async def start_stream(
        stream_id: int,
        current_user: models.Profile = Depends(active_creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await live_stream_service.start_stream(db, current_user, stream_id)


@streams_router.post("/{stream_id}/end", response_model=LiveStreamOwnerResponse)
async def end_stream(
        stream_id: int,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await live_stream_service.end_stream(db, current_user, stream_id)


@streams_router.post("/{stream_id}/join", response_model=LiveStreamJoinResponse)
async def join_stream(
        stream_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Токен LiveKit для входа в комнату"""
    return await live_stream_service.join_stream(db, current_user, stream_id)


@streams_router.post("/{stream_id}/leave", response_model=LiveStreamResponse)
async def leave_stream(
        stream_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await live_stream_service.leave_stream(db, current_user, stream_id)
