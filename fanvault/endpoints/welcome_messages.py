# fanvault/endpoints/welcome_messages.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import active_creator_permission, creator_permission
from fanvault.schemas.message import (
    WelcomeMessageCreate, WelcomeMessageUpdate, WelcomeMessageResponse, WelcomeMessageReorder
)
from fanvault.services.welcome_message_service import welcome_message_service

welcome_messages_router = APIRouter(
    prefix="/welcome-messages",
    tags=["welcome messages"],
    responses={404: {"description": "Not found"}}
)


@welcome_messages_router.get("", response_model=List[WelcomeMessageResponse])
async def list_welcome_messages(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await welcome_message_service.list_messages(db, current_user)


@welcome_messages_router.post("", response_model=WelcomeMessageResponse, status_code=201)
async def create_welcome_message(
        message_data: WelcomeMessageCreate,
        current_user: models.Profile = Depends(active_creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await welcome_message_service.create_message(db, current_user, message_data)


@welcome_messages_router.put("/order", response_model=List[WelcomeMessageResponse])
async def reorder_welcome_messages(
        order: WelcomeMessageReorder,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    """Новый порядок всей цепочки"""
    return await welcome_message_service.reorder(db, current_user, order.message_ids)


@welcome_messages_router.patch("/{message_id}", response_model=WelcomeMessageResponse)
async def update_welcome_message(
        message_id: int,
        message_data: WelcomeMessageUpdate,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await welcome_message_service.update_message(db, current_user, message_id, message_data)


@welcome_messages_router.post("/{message_id}/toggle", response_model=WelcomeMessageResponse)
async def toggle_welcome_message(
        message_id: int,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await welcome_message_service.toggle_active(db, current_user, message_id)


@welcome_messages_router.post("/{message_id}/move", response_model=List[WelcomeMessageResponse])
async def move_welcome_message(
        message_id: int,
        direction: str = Query(..., pattern="^(up|down)$"),
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await welcome_message_service.move_message(db, current_user, message_id, direction)


@welcome_messages_router.delete("/{message_id}")
async def delete_welcome_message(
        message_id: int,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await welcome_message_service.delete_message(db, current_user, message_id)
