# fanvault/websocket/handler.py
import asyncio
import json
import logging

from fastapi import WebSocket, WebSocketDisconnect

from fanvault.database.redis_client import redis_manager, user_channel

logger = logging.getLogger(__name__)


class WebSocketManager:

    async def _forward(self, websocket: WebSocket, pubsub) -> None:
        """Пересылка событий из Redis канала в сокет"""
        async for message in pubsub.listen():
            if message['type'] != 'message':
                continue
            data = message['data']
            if isinstance(data, bytes):
                data = data.decode('utf-8')
            await websocket.send_text(str(data))

    async def _drain(self, websocket: WebSocket) -> None:
        """Чтение входящих кадров, чтобы заметить отключение клиента"""
        while True:
            await websocket.receive_text()

    async def handle_connection(self, websocket: WebSocket, user_id: int) -> None:
        """Обработка подключения WebSocket"""
        channel = user_channel(user_id)
        pubsub = await redis_manager.subscribe(channel)
        if pubsub is None:
            logger.error(f"❌ Redis недоступен, соединение пользователя {user_id} закрыто")
            await websocket.close(code=1011)
            return

        tasks = []
        try:
            await websocket.send_text(json.dumps({
                'type': 'connection_established',
                'message': 'WebSocket connected successfully',
                'user_id': user_id
            }))
            logger.info(f"🔌 WebSocket подключен: пользователь {user_id}")

            tasks = [
                asyncio.create_task(self._forward(websocket, pubsub)),
                asyncio.create_task(self._drain(websocket)),
            ]
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                error = task.exception()
                if error and not isinstance(error, WebSocketDisconnect):
                    logger.warning(f"⚠️ WebSocket ошибка пользователя {user_id}: {error}")

        except WebSocketDisconnect:
            pass
        finally:
            for task in tasks:
                task.cancel()
            try:
                await pubsub.unsubscribe(channel)
                await pubsub.close()
            except Exception as e:
                logger.warning(f"⚠️ Ошибка закрытия pubsub пользователя {user_id}: {e}")
            logger.info(f"🔌 WebSocket отключен: пользователь {user_id}")


manager = WebSocketManager()
