# fanvault/services/custom_request_service.py
import logging
import mimetypes
from datetime import datetime
from typing import List, Optional, Dict

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.repository.custom_requests_repository import custom_requests_repository
from fanvault.repository.payments_repository import payment_intents_repository
from fanvault.repository.user_repository import profile_repository
from fanvault.schemas.message import MessageCreate, MessageType
from fanvault.schemas.request import (
    CustomRequestCreate, CustomRequestResponse, CustomRequestCheckout, RequestDelivery, RequestRating,
    RequestStatus, RequestPaymentStatus
)
from fanvault.services.message_service import message_service
from fanvault.services.notification_service import notification_service
from fanvault.services.payment_service import payment_service
from fanvault.services.revenue_service import revenue_service
from fanvault.utils.file_utils import message_type_from_mime

logger = logging.getLogger(__name__)

# Из каких статусов можно перейти в данный
TRANSITIONS = {
    RequestStatus.ACCEPTED.value: {RequestStatus.PENDING.value},
    RequestStatus.DECLINED.value: {RequestStatus.PENDING.value, RequestStatus.ACCEPTED.value},
    RequestStatus.IN_PROGRESS.value: {RequestStatus.ACCEPTED.value},
    RequestStatus.COMPLETED.value: {RequestStatus.ACCEPTED.value, RequestStatus.IN_PROGRESS.value},
}


def can_transition(current: str, target: str) -> bool:
    return current in TRANSITIONS.get(target, set())


def to_request_response(request, viewer_id: int, fan_username: Optional[str] = None) -> CustomRequestResponse:
    """Анонимный заказ скрывает фаната от автора"""
    response = CustomRequestResponse.model_validate(request)
    if request.is_anonymous and viewer_id != request.fan_id:
        response.fan_id = None
        response.fan_username = None
    else:
        response.fan_username = fan_username
    return response


class CustomRequestService:
    """Заказы индивидуального контента: оплата удерживается до доставки"""

    async def _usernames(self, db: AsyncSession, requests) -> Dict[int, str]:
        profiles = await profile_repository.get_many(db, list({r.fan_id for r in requests}))
        return {p.id: p.username for p in profiles}

    async def _respond(self, db: AsyncSession, request: models.CustomRequest, viewer_id: int) -> CustomRequestResponse:
        usernames = await self._usernames(db, [request])
        return to_request_response(request, viewer_id, usernames.get(request.fan_id))

    async def _get_for_creator(self, db: AsyncSession, request_id: int, creator_id: int) -> models.CustomRequest:
        request = await custom_requests_repository.get(db, request_id)
        if not request or request.creator_id != creator_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Заказ не найден")
        return request

    def _ensure_transition(self, request: models.CustomRequest, target: RequestStatus) -> None:
        if not can_transition(request.status, target.value):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot move request from {request.status} to {target.value}"
            )

    # ==================== ФАНАТ ====================

    async def create_request(
            self,
            db: AsyncSession,
            fan: models.Profile,
            request_data: CustomRequestCreate
    ) -> CustomRequestCheckout:
        """Создание заказа и его оплата"""
        if request_data.creator_id == fan.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Нельзя заказать контент у себя")

        creator = await profile_repository.get(db, request_data.creator_id)
        if not creator or not creator.is_creator or not creator.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Автор не найден")

        request = await custom_requests_repository.create(
            db, request_data,
            fan_id=fan.id,
            status=RequestStatus.PENDING.value,
            payment_status=RequestPaymentStatus.PENDING.value
        )
        checkout = await payment_service.pay_custom_request(db, fan, request)

        await db.refresh(request)
        if not request.payment_intent_id:
            request = await custom_requests_repository.update_fields(
                db, request, payment_intent_id=checkout.payment.payment_intent_id
            )

        logger.info(f"🎨 Заказ {request.id}: {fan.id} → {creator.id} на {request.price}")
        return CustomRequestCheckout(request=to_request_response(request, fan.id, fan.username), checkout=checkout)

    async def list_sent(self, db: AsyncSession, fan: models.Profile) -> List[CustomRequestResponse]:
        requests = await custom_requests_repository.get_sent(db, fan.id)
        return [to_request_response(r, fan.id, fan.username) for r in requests]

    async def get_request(self, db: AsyncSession, user: models.Profile, request_id: int) -> CustomRequestResponse:
        request = await custom_requests_repository.get(db, request_id)
        if not request or user.id not in (request.fan_id, request.creator_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Заказ не найден")
        return await self._respond(db, request, user.id)

    async def rate_request(
            self,
            db: AsyncSession,
            fan: models.Profile,
            request_id: int,
            rating_data: RequestRating
    ) -> CustomRequestResponse:
        request = await custom_requests_repository.get(db, request_id)
        if not request or request.fan_id != fan.id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Заказ не найден")
        if request.status != RequestStatus.COMPLETED.value:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Only completed requests can be rated")
        if request.rating is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Request already rated")

        request = await custom_requests_repository.update_fields(
            db, request, rating=rating_data.rating, feedback=rating_data.feedback
        )
        return to_request_response(request, fan.id, fan.username)

    # ==================== АВТОР ====================

    async def list_received(
            self,
            db: AsyncSession,
            creator: models.Profile,
            request_status: Optional[RequestStatus] = None
    ) -> List[CustomRequestResponse]:
        requests = await custom_requests_repository.get_received(
            db, creator.id, request_status.value if request_status else None
        )
        usernames = await self._usernames(db, requests)
        return [to_request_response(r, creator.id, usernames.get(r.fan_id)) for r in requests]

    async def accept_request(self, db: AsyncSession, creator: models.Profile, request_id: int) -> CustomRequestResponse:
        request = await self._get_for_creator(db, request_id, creator.id)
        self._ensure_transition(request, RequestStatus.ACCEPTED)
        if request.payment_status != RequestPaymentStatus.PAID.value:
            raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail="Request is not paid")
        if request.deadline < datetime.now():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Deadline has passed")

        request = await custom_requests_repository.update_fields(db, request, status=RequestStatus.ACCEPTED.value)
        await notification_service.notify_request_status(
            db, request.fan_id, request.title, request.status, request.id
        )
        return await self._respond(db, request, creator.id)

    async def start_request(self, db: AsyncSession, creator: models.Profile, request_id: int) -> CustomRequestResponse:
        request = await self._get_for_creator(db, request_id, creator.id)
        self._ensure_transition(request, RequestStatus.IN_PROGRESS)

        request = await custom_requests_repository.update_fields(db, request, status=RequestStatus.IN_PROGRESS.value)
        await notification_service.notify_request_status(
            db, request.fan_id, request.title, request.status, request.id
        )
        return await self._respond(db, request, creator.id)

    async def decline_request(self, db: AsyncSession, creator: models.Profile, request_id: int) -> CustomRequestResponse:
        """Отказ автора: оплаченный заказ возвращается фанату полностью"""
        request = await self._get_for_creator(db, request_id, creator.id)
        self._ensure_transition(request, RequestStatus.DECLINED)

        fields = {"status": RequestStatus.DECLINED.value}
        if request.payment_status == RequestPaymentStatus.PAID.value:
            await payment_service.create_refund(db, request.payment_intent_id)
            fields["payment_status"] = RequestPaymentStatus.REFUNDED.value

        request = await custom_requests_repository.update_fields(db, request, **fields)
        await notification_service.notify_request_status(
            db, request.fan_id, request.title, request.status, request.id
        )
        logger.info(f"🚫 Заказ {request.id} отклонен автором {creator.id}")
        return await self._respond(db, request, creator.id)

    async def deliver_request(
            self,
            db: AsyncSession,
            creator: models.Profile,
            request_id: int,
            delivery: RequestDelivery
    ) -> CustomRequestResponse:
        """Доставка файлов личными сообщениями и начисление дохода автору"""
        request = await self._get_for_creator(db, request_id, creator.id)
        self._ensure_transition(request, RequestStatus.COMPLETED)
        if request.payment_status != RequestPaymentStatus.PAID.value:
            raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail="Request is not paid")

        for index, media_url in enumerate(delivery.media_urls):
            mime_type, _ = mimetypes.guess_type(media_url)
            await message_service.send_message(db, creator, MessageCreate(
                recipient_id=request.fan_id,
                content=delivery.note if index == 0 else None,
                message_type=MessageType(message_type_from_mime(mime_type)),
                media_url=media_url
            ))

        intent = await payment_intents_repository.get_by_provider_id(db, request.payment_intent_id)
        await revenue_service.record_revenue(
            db, creator.id, "custom_request", request.price,
            source_id=request.id,
            buyer_id=request.fan_id,
            platform_fee=intent.platform_fee if intent else None
        )

        request = await custom_requests_repository.update_fields(
            db, request,
            status=RequestStatus.COMPLETED.value,
            delivered_content=list(delivery.media_urls),
            completed_at=datetime.now()
        )
        await notification_service.notify_request_status(
            db, request.fan_id, request.title, request.status, request.id
        )
        logger.info(f"📦 Заказ {request.id} доставлен: {len(delivery.media_urls)} файлов")
        return await self._respond(db, request, creator.id)


custom_request_service = CustomRequestService()
