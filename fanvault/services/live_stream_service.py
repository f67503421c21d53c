# fanvault/services/live_stream_service.py
import logging
import secrets
import string
import time
from datetime import datetime, timedelta
from typing import List

from fastapi import HTTPException, status
from livekit.api import AccessToken
from livekit.api.access_token import VideoGrants
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.config.settings import settings
from fanvault.database import models
from fanvault.repository.streams_repository import streams_repository
from fanvault.repository.subscriptions_repository import subscriptions_repository
from fanvault.schemas.stream import (
    LiveStreamCreate, LiveStreamResponse, LiveStreamOwnerResponse, LiveStreamJoinResponse
)
from fanvault.services.notification_service import notification_service

logger = logging.getLogger(__name__)

KEY_ALPHABET = string.ascii_lowercase + string.digits


def generate_stream_key() -> str:
    """Ключ трансляции вида sk_<timestamp>_<9 символов>"""
    suffix = "".join(secrets.choice(KEY_ALPHABET) for _ in range(9))
    return f"sk_{int(time.time() * 1000)}_{suffix}"


def stream_urls(stream_key: str) -> tuple:
    host = settings.LIVE_INGEST_HOST
    return f"rtmp://{host}/live/{stream_key}", f"https://{host}/hls/{stream_key}/index.m3u8"


def room_name(stream_id: int) -> str:
    return f"stream_{stream_id}"


class LiveStreamService:
    def __init__(self):
        self.api_key = settings.LIVEKIT_API_KEY
        self.api_secret = settings.LIVEKIT_API_SECRET

    def generate_token(self, stream_id: int, user_id: int, name: str, can_publish: bool) -> str:
        """Токен LiveKit: автор публикует, зрители только смотрят"""
        grants = VideoGrants(
            room_join=True,
            room=room_name(stream_id),
            can_publish=can_publish,
            can_subscribe=True,
            can_publish_data=True
        )

        token = (
            AccessToken(api_key=self.api_key, api_secret=self.api_secret)
            .with_identity(f"user_{user_id}")
            .with_name(name)
            .with_grants(grants)
            .with_ttl(timedelta(hours=3))
        )
        logger.debug(f"🎫 Токен для пользователя {user_id} в комнате {room_name(stream_id)} (publish={can_publish})")
        return token.to_jwt()

    async def _get_stream(self, db: AsyncSession, stream_id: int) -> models.LiveStream:
        stream = await streams_repository.get(db, stream_id)
        if not stream:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Трансляция не найдена")
        return stream

    async def _get_own_stream(self, db: AsyncSession, stream_id: int, creator_id: int) -> models.LiveStream:
        stream = await self._get_stream(db, stream_id)
        if stream.creator_id != creator_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
        return stream

    async def create_stream(
            self,
            db: AsyncSession,
            creator: models.Profile,
            stream_data: LiveStreamCreate
    ) -> LiveStreamOwnerResponse:
        stream_key = generate_stream_key()
        rtmp_url, hls_url = stream_urls(stream_key)
        stream = await streams_repository.create(
            db,
            stream_data,
            creator_id=creator.id,
            stream_key=stream_key,
            rtmp_url=rtmp_url,
            hls_url=hls_url,
            is_active=False
        )
        logger.info(f"🎥 Автор {creator.id} создал трансляцию {stream.id}")
        return LiveStreamOwnerResponse.model_validate(stream)

    async def start_stream(self, db: AsyncSession, creator: models.Profile, stream_id: int) -> LiveStreamOwnerResponse:
        stream = await self._get_own_stream(db, stream_id, creator.id)

        active = await streams_repository.get_active_by_creator(db, creator.id)
        if active:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A stream is already live")

        stream = await streams_repository.update_fields(
            db, stream, is_active=True, actual_start=datetime.now(), actual_end=None, viewer_count=0
        )

        subscriptions = await subscriptions_repository.get_by_creator(db, creator.id, status="active")
        notified = set()
        for subscription in subscriptions:
            if subscription.subscriber_id in notified:
                continue
            notified.add(subscription.subscriber_id)
            await notification_service.notify_live_stream(
                db, subscription.subscriber_id, creator.display_name or creator.username, stream.title, stream.id
            )

        logger.info(f"🔴 Трансляция {stream.id} запущена, уведомлено {len(notified)} подписчиков")
        return LiveStreamOwnerResponse.model_validate(stream)

    async def end_stream(self, db: AsyncSession, creator: models.Profile, stream_id: int) -> LiveStreamOwnerResponse:
        stream = await self._get_own_stream(db, stream_id, creator.id)
        if not stream.is_active:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Stream is not live")

        stream = await streams_repository.update_fields(db, stream, is_active=False, actual_end=datetime.now())
        logger.info(f"⏹️ Трансляция {stream.id} завершена")
        return LiveStreamOwnerResponse.model_validate(stream)

    async def join_stream(self, db: AsyncSession, user: models.Profile, stream_id: int) -> LiveStreamJoinResponse:
        """Вход в трансляцию: только автор или активный подписчик"""
        stream = await self._get_stream(db, stream_id)
        if not stream.is_active:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Stream is not live")

        is_creator = stream.creator_id == user.id
        if not is_creator and not await subscriptions_repository.get_active(db, user.id, stream.creator_id):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Subscription required")

        if not is_creator:
            viewer_count = stream.viewer_count + 1
            stream = await streams_repository.update_fields(
                db, stream, viewer_count=viewer_count, max_viewers=max(stream.max_viewers or 0, viewer_count)
            )

        token = self.generate_token(stream.id, user.id, user.display_name or user.username, can_publish=is_creator)
        return LiveStreamJoinResponse(
            stream_id=stream.id,
            room=room_name(stream.id),
            token=token,
            livekit_host=settings.LIVEKIT_HOST,
            role="host" if is_creator else "viewer",
            hls_url=stream.hls_url,
            viewer_count=stream.viewer_count
        )

    async def leave_stream(self, db: AsyncSession, user: models.Profile, stream_id: int) -> LiveStreamResponse:
        stream = await self._get_stream(db, stream_id)
        if stream.creator_id != user.id:
            stream = await streams_repository.update_fields(db, stream, viewer_count=max(0, stream.viewer_count - 1))
        return LiveStreamResponse.model_validate(stream)

    async def get_stream(self, db: AsyncSession, stream_id: int) -> LiveStreamResponse:
        return LiveStreamResponse.model_validate(await self._get_stream(db, stream_id))

    async def get_my_streams(self, db: AsyncSession, creator: models.Profile) -> List[LiveStreamOwnerResponse]:
        streams = await streams_repository.get_by_creator(db, creator.id)
        return [LiveStreamOwnerResponse.model_validate(s) for s in streams]

    async def get_active_streams(self, db: AsyncSession) -> List[LiveStreamResponse]:
        streams = await streams_repository.get_active(db)
        return [LiveStreamResponse.model_validate(s) for s in streams]


live_stream_service = LiveStreamService()
