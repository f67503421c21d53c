# fanvault/services/payment_service.py
import logging
import secrets
import time
from datetime import datetime
from typing import Dict, Any, List, Tuple

import stripe
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.config.settings import settings
from fanvault.database import models
from fanvault.repository.creator_repository import creator_repository
from fanvault.repository.custom_requests_repository import custom_requests_repository
from fanvault.repository.messages_repository import messages_repository
from fanvault.repository.payments_repository import payment_intents_repository
from fanvault.repository.posts_repository import posts_repository
from fanvault.repository.ppv_repository import ppv_repository
from fanvault.repository.streams_repository import streams_repository
from fanvault.repository.subscriptions_repository import subscription_plans_repository
from fanvault.repository.tips_repository import tips_repository
from fanvault.repository.user_repository import profile_repository
from fanvault.schemas.payment import (
    PaymentIntentCreate, PaymentIntentResponse, PaymentResult, PaymentStatusResponse, CheckoutResponse,
    ConnectOnboardingResponse, SubscribeRequest, TipCreate, TipResponse, PPVUnlockRequest, PPVPurchaseResponse,
    PaymentType, PaymentStatus, ContentKind, SubscriptionTier
)
from fanvault.schemas.request import RequestPaymentStatus
from fanvault.services.analytics_service import analytics_service
from fanvault.services.notification_service import notification_service
from fanvault.services.platform_fee_service import platform_fee_service
from fanvault.services.revenue_service import revenue_service
from fanvault.services.subscription_service import subscription_service
from fanvault.services.welcome_message_service import welcome_message_service

logger = logging.getLogger(__name__)


def payment_fee(amount: int) -> int:
    """Комиссия платформы с платежа"""
    return int(amount * settings.PAYMENT_FEE_RATE)


def simulated_intent() -> Tuple[str, str]:
    intent_id = f"pi_sim_{int(time.time() * 1000)}_{secrets.token_hex(6)}"
    return intent_id, f"{intent_id}_secret_{secrets.token_hex(12)}"


class PaymentService:
    def __init__(self):
        stripe.api_key = settings.STRIPE_SECRET_KEY
        self.webhook_secret = settings.STRIPE_WEBHOOK_SECRET

    # ==================== ЦЕНА ====================

    async def _load_ppv_content(self, db: AsyncSession, content_kind: ContentKind, content_id: int):
        """Пост или сообщение и его продавец"""
        if content_kind == ContentKind.POST:
            content = await posts_repository.get(db, content_id)
            seller_id = content.creator_id if content else None
        else:
            content = await messages_repository.get(db, content_id)
            seller_id = content.sender_id if content else None

        if not content:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Контент не найден")
        return content, seller_id

    async def _check_ppv(self, db: AsyncSession, buyer_id: int, content_kind: ContentKind, content_id: int):
        content, seller_id = await self._load_ppv_content(db, content_kind, content_id)

        if seller_id == buyer_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot purchase your own content")
        if not content.is_ppv or not content.ppv_price:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Content is not pay-per-view")
        if content_kind == ContentKind.MESSAGE and content.recipient_id != buyer_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")

        key = {"post_id": content_id} if content_kind == ContentKind.POST else {"message_id": content_id}
        if await ppv_repository.has_purchased(db, buyer_id, **key):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Content already purchased")
        return content, seller_id

    async def _check_custom_request(self, db: AsyncSession, fan_id: int, request_id: int) -> models.CustomRequest:
        request = await custom_requests_repository.get(db, request_id) if request_id is not None else None
        if not request or request.fan_id != fan_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Заказ не найден")
        if request.payment_status != RequestPaymentStatus.PENDING.value:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Request already paid")
        return request

    async def _resolve_amount(
            self,
            db: AsyncSession,
            user: models.Profile,
            payment_data: PaymentIntentCreate
    ) -> Tuple[int, Dict[str, Any]]:
        """Итоговая сумма платежа считается на сервере"""
        payment_type = payment_data.payment_type
        meta: Dict[str, Any] = {}

        creator = await profile_repository.get(db, payment_data.creator_id)
        if not creator or not creator.is_creator:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Автор не найден")

        if payment_type == PaymentType.PLATFORM_FEE:
            if creator.id != user.id:
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
            amount = settings.PLATFORM_FEE_AMOUNT

        elif creator.id == user.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Нельзя оплатить самому себе")

        elif payment_type == PaymentType.SUBSCRIPTION:
            tier = (payment_data.subscription_tier or SubscriptionTier.MONTHLY).value
            await subscription_service.ensure_not_subscribed(db, user.id, creator.id)
            amount, months = await subscription_service.quote(db, creator.id, tier, payment_data.plan_id)
            meta.update(months=months, plan_id=payment_data.plan_id, tier=tier)

        elif payment_type == PaymentType.PPV:
            if not payment_data.content_kind or payment_data.content_id is None:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Не указан контент для покупки")
            content, seller_id = await self._check_ppv(db, user.id, payment_data.content_kind, payment_data.content_id)
            if seller_id != creator.id:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Контент принадлежит другому автору")
            amount = content.ppv_price

        elif payment_type == PaymentType.CUSTOM_REQUEST:
            request = await self._check_custom_request(db, user.id, payment_data.content_id)
            if request.creator_id != creator.id:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Заказ адресован другому автору")
            amount = request.price

        else:
            amount = payment_data.amount
            if payment_data.live_stream_id is not None:
                stream = await streams_repository.get(db, payment_data.live_stream_id)
                if not stream or stream.creator_id != creator.id:
                    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Трансляция не найдена")
                meta["live_stream_id"] = stream.id
            elif payment_type == PaymentType.LIVE_STREAM:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Не указана трансляция")

        if not settings.MIN_PAYMENT_AMOUNT <= amount <= settings.MAX_PAYMENT_AMOUNT:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Сумма должна быть от {settings.MIN_PAYMENT_AMOUNT} до {settings.MAX_PAYMENT_AMOUNT} центов"
            )
        return amount, meta

    # ==================== ПЛАТЕЖНЫЕ НАМЕРЕНИЯ ====================

    async def create_payment_intent(
            self,
            db: AsyncSession,
            user: models.Profile,
            payment_data: PaymentIntentCreate
    ) -> PaymentIntentResponse:
        """Создание платежного намерения: Stripe или симуляция"""
        amount, meta = await self._resolve_amount(db, user, payment_data)
        fee = payment_fee(amount)
        payment_type = payment_data.payment_type.value

        if settings.STRIPE_ENABLED:
            params = {
                "amount": amount,
                "currency": settings.CURRENCY,
                "metadata": {
                    "user_id": str(user.id),
                    "creator_id": str(payment_data.creator_id),
                    "type": payment_type,
                },
                "automatic_payment_methods": {"enabled": True},
            }
            creator_profile = await creator_repository.get_by_user(db, payment_data.creator_id)
            if payment_data.payment_type != PaymentType.PLATFORM_FEE and creator_profile and creator_profile.stripe_account_id:
                params["application_fee_amount"] = fee
                params["transfer_data"] = {"destination": creator_profile.stripe_account_id}

            try:
                intent = stripe.PaymentIntent.create(**params)
            except stripe.StripeError as e:
                logger.error(f"Stripe error creating payment intent: {e}")
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Ошибка платежной системы: {getattr(e, 'user_message', None) or str(e)}"
                )
            intent_id, client_secret = intent.id, intent.client_secret
        else:
            intent_id, client_secret = simulated_intent()

        await payment_intents_repository.create_from_dict(db, {
            "provider_intent_id": intent_id,
            "client_secret": client_secret,
            "user_id": user.id,
            "creator_id": payment_data.creator_id,
            "payment_type": payment_type,
            "amount": amount,
            "platform_fee": fee,
            "currency": settings.CURRENCY,
            "status": PaymentStatus.PENDING.value,
            "content_id": payment_data.content_id,
            "content_kind": payment_data.content_kind.value if payment_data.content_kind else None,
            "subscription_tier": meta.get("tier"),
            "tip_message": payment_data.tip_message,
            "meta_data": meta,
        })

        logger.info(f"Создано платежное намерение {intent_id}: {payment_type} {amount} от {user.id}")
        return PaymentIntentResponse(
            client_secret=client_secret,
            payment_intent_id=intent_id,
            amount=amount,
            platform_fee=fee,
            currency=settings.CURRENCY,
            payment_type=payment_data.payment_type,
            simulated=not settings.STRIPE_ENABLED
        )

    async def _get_intent(self, db: AsyncSession, payment_intent_id: str) -> models.PaymentIntent:
        intent = await payment_intents_repository.get_by_provider_id(db, payment_intent_id)
        if not intent:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Платеж не найден")
        return intent

    async def confirm_payment(self, db: AsyncSession, user: models.Profile, payment_intent_id: str) -> PaymentResult:
        intent = await self._get_intent(db, payment_intent_id)
        if intent.user_id != user.id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Платеж не найден")

        if settings.STRIPE_ENABLED:
            try:
                remote = stripe.PaymentIntent.retrieve(payment_intent_id)
            except stripe.StripeError as e:
                logger.error(f"Error retrieving payment intent: {e}")
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Ошибка при получении статуса платежа: {e}"
                )
            if remote.status != "succeeded":
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment has not succeeded")

        return await self._fulfil(db, intent)

    async def _fulfil(self, db: AsyncSession, intent: models.PaymentIntent) -> PaymentResult:
        """Выполнение успешного платежа по его типу"""
        if intent.status == PaymentStatus.SUCCEEDED.value:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Payment already processed")

        buyer = await profile_repository.get(db, intent.user_id)
        meta = intent.meta_data or {}
        handlers = {
            PaymentType.SUBSCRIPTION.value: self._fulfil_subscription,
            PaymentType.TIP.value: self._fulfil_tip,
            PaymentType.PPV.value: self._fulfil_ppv,
            PaymentType.LIVE_STREAM.value: self._fulfil_live_stream,
            PaymentType.PLATFORM_FEE.value: self._fulfil_platform_fee,
            PaymentType.CUSTOM_REQUEST.value: self._fulfil_custom_request,
        }
        result = await handlers[intent.payment_type](db, intent, buyer, meta)

        await payment_intents_repository.update_fields(
            db, intent, status=PaymentStatus.SUCCEEDED.value, completed_at=datetime.now()
        )
        logger.info(f"✅ Платеж {intent.provider_intent_id} выполнен: {intent.payment_type}")
        return PaymentResult(
            status=PaymentStatus.SUCCEEDED.value,
            payment_intent_id=intent.provider_intent_id,
            payment_type=PaymentType(intent.payment_type),
            result=result
        )

    async def _fulfil_subscription(self, db, intent, buyer, meta) -> Dict[str, Any]:
        tier = intent.subscription_tier or SubscriptionTier.MONTHLY.value
        plan_id = meta.get("plan_id")
        subscription = await subscription_service.create_subscription(
            db,
            subscriber_id=intent.user_id,
            creator_id=intent.creator_id,
            tier=tier,
            amount_paid=intent.amount,
            months=meta.get("months", 1),
            plan_id=plan_id
        )
        await revenue_service.record_revenue(
            db, intent.creator_id, "subscription", intent.amount,
            source_id=subscription.id, buyer_id=intent.user_id, platform_fee=intent.platform_fee
        )
        await welcome_message_service.schedule_for_subscriber(db, intent.creator_id, intent.user_id)

        plan_name = tier.capitalize()
        if plan_id:
            plan = await subscription_plans_repository.get(db, plan_id)
            plan_name = plan.name if plan else plan_name
        await notification_service.notify_subscription(
            db, intent.creator_id, buyer.display_name or buyer.username, plan_name
        )
        await analytics_service.track_user_activity(db, intent.user_id, "subscribe", intent.creator_id, "profile")
        return {"subscription_id": subscription.id, "end_date": subscription.end_date.isoformat()}

    async def _fulfil_tip(self, db, intent, buyer, meta) -> Dict[str, Any]:
        live_stream_id = meta.get("live_stream_id")
        tip = await tips_repository.create_from_dict(db, {
            "tipper_id": intent.user_id,
            "creator_id": intent.creator_id,
            "amount": intent.amount,
            "message": intent.tip_message,
            "live_stream_id": live_stream_id,
        })
        if live_stream_id:
            await streams_repository.increment_field(db, live_stream_id, "total_tips", intent.amount)
            await analytics_service.track_event(
                db, live_stream_id, "live_stream", "tip", value=intent.amount, user_id=intent.user_id
            )

        await revenue_service.record_revenue(
            db, intent.creator_id, "tip", intent.amount,
            source_id=tip.id, buyer_id=intent.user_id, platform_fee=intent.platform_fee
        )
        await notification_service.notify_tip(
            db, intent.creator_id, buyer.display_name or buyer.username, intent.amount, intent.tip_message
        )
        return {"tip_id": tip.id}

    async def _fulfil_ppv(self, db, intent, buyer, meta) -> Dict[str, Any]:
        kind = ContentKind(intent.content_kind)
        content, seller_id = await self._check_ppv(db, intent.user_id, kind, intent.content_id)
        key = {"post_id": content.id} if kind == ContentKind.POST else {"message_id": content.id}

        purchase = await ppv_repository.create(db, intent.user_id, seller_id, intent.amount, **key)
        await revenue_service.record_revenue(
            db, seller_id, "ppv", intent.amount,
            source_id=purchase.id, buyer_id=intent.user_id, platform_fee=intent.platform_fee
        )
        await analytics_service.track_user_activity(db, intent.user_id, "ppv_purchase", content.id, kind.value)
        return {"purchase_id": purchase.id, "content_kind": kind.value, "content_id": content.id}

    async def _fulfil_live_stream(self, db, intent, buyer, meta) -> Dict[str, Any]:
        record = await revenue_service.record_revenue(
            db, intent.creator_id, "live_stream", intent.amount,
            source_id=meta.get("live_stream_id"), buyer_id=intent.user_id, platform_fee=intent.platform_fee
        )
        return {"revenue_id": record.id}

    async def _fulfil_platform_fee(self, db, intent, buyer, meta) -> Dict[str, Any]:
        creator = await platform_fee_service.extend(db, intent.creator_id)
        return {"paid_until": creator.platform_fee_paid_until.isoformat()}

    async def _fulfil_custom_request(self, db, intent, buyer, meta) -> Dict[str, Any]:
        """Оплата заказа удерживается до доставки, доход автору начисляется при выполнении"""
        request = await self._check_custom_request(db, intent.user_id, intent.content_id)
        request = await custom_requests_repository.update_fields(
            db, request,
            payment_status=RequestPaymentStatus.PAID.value,
            payment_intent_id=intent.provider_intent_id
        )
        fan_name = "Anonymous fan" if request.is_anonymous else buyer.display_name or buyer.username
        await notification_service.notify_custom_request(db, request.creator_id, fan_name, request.title,
                                                         request.price, request.id)
        return {"request_id": request.id, "payment_status": request.payment_status}

    async def checkout(self, db: AsyncSession, user: models.Profile, payment_data: PaymentIntentCreate) -> CheckoutResponse:
        """Создание платежа; без Stripe симулированный платеж подтверждается сразу"""
        payment = await self.create_payment_intent(db, user, payment_data)
        if settings.STRIPE_ENABLED:
            return CheckoutResponse(payment=payment, status=PaymentStatus.PENDING.value)

        intent = await self._get_intent(db, payment.payment_intent_id)
        result = await self._fulfil(db, intent)
        return CheckoutResponse(payment=payment, status=result.status, result=result.result)

    # ==================== СЦЕНАРИИ ОПЛАТЫ ====================

    async def subscribe(self, db: AsyncSession, user: models.Profile, request: SubscribeRequest) -> CheckoutResponse:
        return await self.checkout(db, user, PaymentIntentCreate(
            payment_type=PaymentType.SUBSCRIPTION,
            creator_id=request.creator_id,
            subscription_tier=request.tier,
            plan_id=request.plan_id
        ))

    async def send_tip(self, db: AsyncSession, user: models.Profile, tip_data: TipCreate) -> CheckoutResponse:
        return await self.checkout(db, user, PaymentIntentCreate(
            payment_type=PaymentType.TIP,
            amount=tip_data.amount,
            creator_id=tip_data.creator_id,
            tip_message=tip_data.message,
            live_stream_id=tip_data.live_stream_id
        ))

    async def unlock_ppv(self, db: AsyncSession, user: models.Profile, request: PPVUnlockRequest) -> CheckoutResponse:
        _, seller_id = await self._load_ppv_content(db, request.content_kind, request.content_id)
        return await self.checkout(db, user, PaymentIntentCreate(
            payment_type=PaymentType.PPV,
            creator_id=seller_id,
            content_kind=request.content_kind,
            content_id=request.content_id
        ))

    async def pay_custom_request(self, db: AsyncSession, user: models.Profile, request: models.CustomRequest) -> CheckoutResponse:
        return await self.checkout(db, user, PaymentIntentCreate(
            payment_type=PaymentType.CUSTOM_REQUEST,
            creator_id=request.creator_id,
            content_id=request.id
        ))

    async def pay_platform_fee(self, db: AsyncSession, user: models.Profile) -> CheckoutResponse:
        return await self.checkout(db, user, PaymentIntentCreate(
            payment_type=PaymentType.PLATFORM_FEE,
            creator_id=user.id
        ))

    # ==================== ВЕБХУКИ ====================

    async def handle_webhook(self, db: AsyncSession, payload: bytes, sig_header: str) -> Dict[str, Any]:
        """Обработка вебхуков от Stripe"""
        if not settings.STRIPE_ENABLED:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Stripe не настроен")

        try:
            event = stripe.Webhook.construct_event(payload, sig_header, self.webhook_secret)
        except ValueError as e:
            logger.error(f"Invalid payload: {e}")
            raise HTTPException(status_code=400, detail="Invalid payload")
        except stripe.SignatureVerificationError as e:
            logger.error(f"Invalid signature: {e}")
            raise HTTPException(status_code=400, detail="Invalid signature")

        event_type = event['type']
        payment_intent_id = event['data']['object']['id']

        if event_type == 'payment_intent.succeeded':
            return await self._handle_payment_success(db, payment_intent_id)
        elif event_type == 'payment_intent.payment_failed':
            return await self._mark_status(db, payment_intent_id, PaymentStatus.FAILED, event_type)
        elif event_type == 'payment_intent.canceled':
            return await self._mark_status(db, payment_intent_id, PaymentStatus.CANCELED, event_type)

        logger.info(f"Unhandled event type: {event_type}")
        return {'status': 'unhandled', 'event_type': event_type}

    async def _handle_payment_success(self, db: AsyncSession, payment_intent_id: str) -> Dict[str, Any]:
        intent = await payment_intents_repository.get_by_provider_id(db, payment_intent_id)
        if not intent:
            logger.warning(f"Webhook for unknown payment intent: {payment_intent_id}")
            return {'status': 'ignored', 'payment_intent': payment_intent_id}
        if intent.status == PaymentStatus.SUCCEEDED.value:
            return {'status': 'already_processed', 'payment_intent': payment_intent_id}

        await self._fulfil(db, intent)
        return {'status': 'success', 'event_type': 'payment_intent.succeeded', 'payment_intent': payment_intent_id}

    async def _mark_status(
            self,
            db: AsyncSession,
            payment_intent_id: str,
            new_status: PaymentStatus,
            event_type: str
    ) -> Dict[str, Any]:
        intent = await payment_intents_repository.get_by_provider_id(db, payment_intent_id)
        if intent and intent.status == PaymentStatus.PENDING.value:
            await payment_intents_repository.update_fields(db, intent, status=new_status.value)
        logger.warning(f"Payment {new_status.value}: {payment_intent_id}")
        return {'status': new_status.value, 'event_type': event_type, 'payment_intent': payment_intent_id}

    # ==================== STRIPE CONNECT ====================

    async def create_connect_account(self, db: AsyncSession, user: models.Profile) -> ConnectOnboardingResponse:
        """Подключение аккаунта автора для выплат"""
        creator = await creator_repository.get_by_user(db, user.id)
        if not creator:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Профиль автора не найден")

        if not settings.STRIPE_ENABLED:
            account_id = creator.stripe_account_id or f"acct_sim_{secrets.token_hex(8)}"
            await creator_repository.update_fields(
                db, creator,
                stripe_account_id=account_id,
                stripe_account_status="active",
                stripe_onboarding_complete=True
            )
            return ConnectOnboardingResponse(
                account_id=account_id,
                onboarding_url=f"{settings.FRONTEND_URL}/creator/onboarding/complete?account={account_id}",
                simulated=True
            )

        try:
            account_id = creator.stripe_account_id
            if not account_id:
                account = stripe.Account.create(
                    type="express",
                    email=user.email,
                    capabilities={"card_payments": {"requested": True}, "transfers": {"requested": True}},
                    metadata={"user_id": str(user.id)}
                )
                account_id = account.id
            link = stripe.AccountLink.create(
                account=account_id,
                refresh_url=f"{settings.FRONTEND_URL}/creator/onboarding/refresh",
                return_url=f"{settings.FRONTEND_URL}/creator/onboarding/complete",
                type="account_onboarding"
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating connect account: {e}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Ошибка платежной системы: {e}")

        await creator_repository.update_fields(db, creator, stripe_account_id=account_id, stripe_account_status="pending")
        return ConnectOnboardingResponse(account_id=account_id, onboarding_url=link.url, simulated=False)

    # ==================== СТАТУС И ВОЗВРАТ ====================

    async def get_payment_status(self, db: AsyncSession, user: models.Profile, payment_intent_id: str) -> PaymentStatusResponse:
        intent = await self._get_intent(db, payment_intent_id)
        if user.id not in (intent.user_id, intent.creator_id) and not user.is_admin:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Платеж не найден")

        return PaymentStatusResponse(
            payment_intent_id=intent.provider_intent_id,
            status=intent.status,
            amount=intent.amount,
            payment_type=intent.payment_type,
            created_at=intent.created_at,
            completed_at=intent.completed_at
        )

    async def create_refund(self, db: AsyncSession, payment_intent_id: str) -> Dict[str, Any]:
        """Возврат средств по успешному платежу"""
        intent = await self._get_intent(db, payment_intent_id)
        if intent.status != PaymentStatus.SUCCEEDED.value:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Возврат возможен только для успешного платежа")

        if settings.STRIPE_ENABLED:
            try:
                refund = stripe.Refund.create(payment_intent=payment_intent_id)
            except stripe.StripeError as e:
                logger.error(f"Error creating refund: {e}")
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Ошибка при создании возврата: {e}")
            refund_id = refund.id
        else:
            refund_id = f"re_sim_{secrets.token_hex(8)}"

        await payment_intents_repository.update_fields(db, intent, status=PaymentStatus.REFUNDED.value)
        logger.info(f"Refund created: {refund_id}")
        return {"refund_id": refund_id, "payment_intent_id": payment_intent_id, "status": PaymentStatus.REFUNDED.value}

    # ==================== ИСТОРИЯ ====================

    async def get_tips_received(self, db: AsyncSession, user: models.Profile) -> List[TipResponse]:
        return [TipResponse.model_validate(t) for t in await tips_repository.get_received(db, user.id)]

    async def get_tips_sent(self, db: AsyncSession, user: models.Profile) -> List[TipResponse]:
        return [TipResponse.model_validate(t) for t in await tips_repository.get_sent(db, user.id)]

    async def get_purchases(self, db: AsyncSession, user: models.Profile) -> List[PPVPurchaseResponse]:
        return [PPVPurchaseResponse.model_validate(p) for p in await ppv_repository.get_by_buyer(db, user.id)]

    async def is_purchased(self, db: AsyncSession, user: models.Profile, content_kind: ContentKind, content_id: int) -> bool:
        key = {"post_id": content_id} if content_kind == ContentKind.POST else {"message_id": content_id}
        return await ppv_repository.has_purchased(db, user.id, **key)


payment_service = PaymentService()
