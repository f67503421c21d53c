# fanvault/database/redis_client.py
import json
import logging
from typing import Optional

import redis.asyncio as redis

from fanvault.config.settings import settings

logger = logging.getLogger(__name__)


def user_channel(user_id: int) -> str:
    """Имя персонального канала пользователя"""
    return f"user_{user_id}"


class RedisManager:
    def __init__(self):
        self.redis_client: Optional[redis.Redis] = None

    async def init_redis(self):
        """Инициализация Redis подключения"""
        self.redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD or None,
            decode_responses=True,
            socket_connect_timeout=5,
            retry_on_timeout=True
        )

        try:
            await self.redis_client.ping()
            logger.info("✅ Redis подключен успешно")
        except Exception as e:
            logger.error(f"❌ Ошибка подключения к Redis: {e}")
            raise

    async def close_redis(self):
        """Закрытие Redis подключения"""
        if self.redis_client:
            await self.redis_client.close()

    async def publish(self, channel: str, message: dict):
        """Публикация в канал"""
        if self.redis_client:
            await self.redis_client.publish(channel, json.dumps(message, default=str))

    async def publish_to_user(self, user_id: int, event: str, table: str, payload: dict):
        """Публикация события изменения строки в канал пользователя"""
        await self.publish(user_channel(user_id), {
            "type": event,
            "table": table,
            "record": payload,
        })

    async def subscribe(self, channel: str):
        """Подписка на канал"""
        if self.redis_client:
            pubsub = self.redis_client.pubsub()
            await pubsub.subscribe(channel)
            return pubsub


# Глобальный экземпляр менеджера Redis
redis_manager = RedisManager()
