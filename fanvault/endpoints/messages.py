# fanvault/endpoints/messages.py
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.schemas.message import (
    MessageCreate, MessageResponse, ConversationSummary, MassMessageCreate, MassMessageResult, ReadReceipt
)
from fanvault.security.auth import get_current_user
from fanvault.services.message_service import message_service

messages_router = APIRouter(
    prefix="/messages",
    tags=["messages"],
    responses={404: {"description": "Not found"}}
)


@messages_router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
        message_data: MessageCreate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await message_service.send_message(db, current_user, message_data)


@messages_router.post("/mass", response_model=MassMessageResult, status_code=201)
async def send_mass_message(
        message_data: MassMessageCreate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Рассылка подписчикам автора"""
    return await message_service.send_mass_message(db, current_user, message_data)


@messages_router.post("/media")
async def upload_message_media(
        file: UploadFile = File(...),
        current_user: models.Profile = Depends(get_current_user)
):
    return await message_service.upload_media(current_user, file)


@messages_router.get("/conversations", response_model=List[ConversationSummary])
async def list_conversations(
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await message_service.list_conversations(db, current_user)


@messages_router.get("/conversations/{user_id}", response_model=List[MessageResponse])
async def get_conversation(
        user_id: int,
        skip: int = Query(0, ge=0),
        limit: int = Query(200, ge=1, le=500),
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await message_service.get_conversation(db, current_user, user_id, skip, limit)


@messages_router.post("/conversations/{user_id}/read", response_model=ReadReceipt)
async def mark_conversation_read(
        user_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await message_service.mark_conversation_read(db, current_user, user_id)
