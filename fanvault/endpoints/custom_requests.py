# fanvault/endpoints/custom_requests.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import active_creator_permission, creator_permission
from fanvault.schemas.request import (
    CustomRequestCreate, CustomRequestResponse, CustomRequestCheckout, RequestDelivery, RequestRating, RequestStatus
)
from fanvault.security.auth import get_current_user
from fanvault.services.custom_request_service import custom_request_service

custom_requests_router = APIRouter(
    prefix="/custom-requests",
    tags=["custom requests"],
    responses={404: {"description": "Not found"}}
)


@custom_requests_router.post("", response_model=CustomRequestCheckout, status_code=201)
async def create_custom_request(
        request_data: CustomRequestCreate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Заказ индивидуального контента с оплатой"""
    return await custom_request_service.create_request(db, current_user, request_data)


@custom_requests_router.get("/sent", response_model=List[CustomRequestResponse])
async def list_sent_requests(
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await custom_request_service.list_sent(db, current_user)


@custom_requests_router.get("/received", response_model=List[CustomRequestResponse])
async def list_received_requests(
        request_status: Optional[RequestStatus] = Query(None, alias="status"),
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await custom_request_service.list_received(db, current_user, request_status)


@custom_requests_router.get("/{request_id}", response_model=CustomRequestResponse)
async def get_custom_request(
        request_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await custom_request_service.get_request(db, current_user, request_id)


@custom_requests_router.post("/{request_id}/accept", response_model=CustomRequestResponse)
async def accept_custom_request(
        request_id: int,
        current_user: models.Profile = Depends(active_creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await custom_request_service.accept_request(db, current_user, request_id)


@custom_requests_router.post("/{request_id}/start", response_model=CustomRequestResponse)
async def start_custom_request(
        request_id: int,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await custom_request_service.start_request(db, current_user, request_id)


@custom_requests_router.post("/{request_id}/decline", response_model=CustomRequestResponse)
async def decline_custom_request(
        request_id: int,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    """Отказ с полным возвратом оплаты"""
    return await custom_request_service.decline_request(db, current_user, request_id)


@custom_requests_router.post("/{request_id}/deliver", response_model=CustomRequestResponse)
async def deliver_custom_request(
        request_id: int,
        delivery: RequestDelivery,
        current_user: models.Profile = Depends(active_creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await custom_request_service.deliver_request(db, current_user, request_id, delivery)


@custom_requests_router.post("/{request_id}/rate", response_model=CustomRequestResponse)
async def rate_custom_request(
        request_id: int,
        rating_data: RequestRating,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await custom_request_service.rate_request(db, current_user, request_id, rating_data)
