# fanvault/endpoints/payments.py
import logging
from typing import List

from fastapi import APIRouter, Depends, Request, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import admin_permission, creator_permission
from fanvault.schemas.payment import (
    PaymentIntentCreate, PaymentIntentResponse, PaymentConfirm, PaymentResult, PaymentStatusResponse,
    WebhookResponse, ConnectOnboardingResponse, TipCreate, TipResponse, PPVUnlockRequest, PPVPurchaseResponse,
    CheckoutResponse, ContentKind
)
from fanvault.security.auth import get_current_user
from fanvault.services.payment_service import payment_service

logger = logging.getLogger(__name__)

payments_router = APIRouter(
    prefix="/payments",
    tags=["payments"],
    responses={404: {"description": "Not found"}}
)


@payments_router.post("/intents", response_model=PaymentIntentResponse, status_code=201)
async def create_payment_intent(
        payment_data: PaymentIntentCreate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """
    Создание платежного намерения
    """
    return await payment_service.create_payment_intent(db, current_user, payment_data)


@payments_router.post("/confirm", response_model=PaymentResult)
async def confirm_payment(
        confirm_data: PaymentConfirm,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await payment_service.confirm_payment(db, current_user, confirm_data.payment_intent_id)


@payments_router.post("/webhook", response_model=WebhookResponse)
async def stripe_webhook(
        request: Request,
        db: AsyncSession = Depends(get_db)
):
    """Вебхук для обработки событий от Stripe"""
    payload = await request.body()
    sig_header = request.headers.get('stripe-signature')

    if not sig_header:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing stripe-signature header"
        )

    return await payment_service.handle_webhook(db, payload, sig_header)


@payments_router.get("/status/{payment_intent_id}", response_model=PaymentStatusResponse)
async def get_payment_status(
        payment_intent_id: str,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await payment_service.get_payment_status(db, current_user, payment_intent_id)


@payments_router.post("/refund/{payment_intent_id}")
async def create_refund(
        payment_intent_id: str,
        current_user: models.Profile = Depends(admin_permission),
        db: AsyncSession = Depends(get_db)
):
    logger.info(f"↩️ Администратор {current_user.id} оформляет возврат {payment_intent_id}")
    return await payment_service.create_refund(db, payment_intent_id)


@payments_router.post("/connect", response_model=ConnectOnboardingResponse)
async def create_connect_account(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    """Подключение Stripe Connect для выплат автору"""
    return await payment_service.create_connect_account(db, current_user)


# Чаевые
@payments_router.post("/tips", response_model=CheckoutResponse, status_code=201)
async def send_tip(
        tip_data: TipCreate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await payment_service.send_tip(db, current_user, tip_data)


@payments_router.get("/tips/received", response_model=List[TipResponse])
async def get_tips_received(
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await payment_service.get_tips_received(db, current_user)


@payments_router.get("/tips/sent", response_model=List[TipResponse])
async def get_tips_sent(
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await payment_service.get_tips_sent(db, current_user)


# PPV
@payments_router.post("/ppv/unlock", response_model=CheckoutResponse, status_code=201)
async def unlock_ppv(
        request: PPVUnlockRequest,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Покупка платного поста или сообщения"""
    return await payment_service.unlock_ppv(db, current_user, request)


@payments_router.get("/ppv/purchases", response_model=List[PPVPurchaseResponse])
async def get_purchases(
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await payment_service.get_purchases(db, current_user)


@payments_router.get("/ppv/{content_kind}/{content_id}")
async def get_ppv_status(
        content_kind: ContentKind,
        content_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    purchased = await payment_service.is_purchased(db, current_user, content_kind, content_id)
    return {"content_kind": content_kind.value, "content_id": content_id, "is_purchased": purchased}
