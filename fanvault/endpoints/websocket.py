# fanvault/endpoints/websocket.py
from fastapi import APIRouter, WebSocket

from fanvault.websocket.auth import authenticate_websocket
from fanvault.websocket.handler import manager

realtime_router = APIRouter(tags=["realtime"])


@realtime_router.websocket("/ws/{token}")
async def websocket_endpoint(websocket: WebSocket, token: str):
    """Поток изменений сообщений и уведомлений пользователя"""
    await websocket.accept()

    user_id = await authenticate_websocket(token)
    if not user_id:
        await websocket.close(code=1008)
        return

    await manager.handle_connection(websocket, user_id)
