# tests/tests_realtime/test_websocket.py
import asyncio
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from fanvault.database.redis_client import redis_manager
from fanvault.security.auth import create_access_token
from fanvault.services.message_service import message_service
from fanvault.websocket.auth import authenticate_websocket
from main import app


class InMemoryPubSub:
    """Подписка, читающая уже опубликованные события канала"""

    def __init__(self, broker):
        self.broker = broker
        self.channel = None

    async def subscribe(self, channel):
        self.channel = channel

    async def listen(self):
        yield {"type": "subscribe", "channel": self.channel, "data": 1}
        for data in self.broker.published.get(self.channel, []):
            yield {"type": "message", "channel": self.channel, "data": data}
        # Канал остается открытым до отключения клиента
        await asyncio.Event().wait()

    async def unsubscribe(self, channel):
        self.channel = None

    async def close(self):
        pass


class InMemoryRedis:
    def __init__(self):
        self.published = {}

    async def publish(self, channel, data):
        self.published.setdefault(channel, []).append(data)

    def pubsub(self):
        return InMemoryPubSub(self)


def make_message(**fields):
    data = {
        "id": 1,
        "sender_id": 1,
        "recipient_id": 2,
        "content": "Hi there",
        "message_type": "text",
        "media_url": None,
        "is_ppv": False,
        "ppv_price": None,
        "is_read": False,
        "created_at": datetime(2024, 5, 1, 12, 0),
    }
    data.update(fields)
    return SimpleNamespace(**data)


def token_for(user_id: int) -> str:
    return create_access_token({"sub": str(user_id)})


@pytest.mark.asyncio
class TestWebSocketAuth:
    """Тесты аутентификации WebSocket"""

    async def test_valid_token(self):
        token = create_access_token({"sub": "42"})
        assert await authenticate_websocket(token) == 42

    async def test_invalid_tokens(self):
        assert await authenticate_websocket("") is None
        assert await authenticate_websocket("undefined") is None
        assert await authenticate_websocket("not-a-jwt") is None


class TestWebSocketEndpoint:

    def test_rejects_invalid_token(self):
        client = TestClient(app)
        with client.websocket_connect("/ws/not-a-jwt") as websocket:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                websocket.receive_text()
        assert exc_info.value.code == 1008

    def test_closes_without_redis(self):
        client = TestClient(app)
        with client.websocket_connect(f"/ws/{token_for(1)}") as websocket:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                websocket.receive_text()
        assert exc_info.value.code == 1011


class TestWebSocketForwarding:
    """События канала user_<id> доходят до сокета пользователя"""

    def test_forwards_insert_and_update(self):
        broker = InMemoryRedis()
        with patch.object(redis_manager, "redis_client", broker):
            asyncio.run(message_service._publish(make_message(), "INSERT", 2))
            asyncio.run(message_service._publish(make_message(is_read=True), "UPDATE", 2))

            client = TestClient(app)
            with client.websocket_connect(f"/ws/{token_for(2)}") as websocket:
                hello = websocket.receive_json()
                inserted = websocket.receive_json()
                updated = websocket.receive_json()

        assert hello == {
            "type": "connection_established",
            "message": "WebSocket connected successfully",
            "user_id": 2
        }
        assert set(inserted) == {"type", "table", "record"}
        assert (inserted["type"], inserted["table"]) == ("INSERT", "messages")
        assert inserted["record"]["id"] == 1
        assert inserted["record"]["content"] == "Hi there"
        assert inserted["record"]["is_read"] is False
        assert (updated["type"], updated["table"]) == ("UPDATE", "messages")
        assert updated["record"]["is_read"] is True

    def test_ppv_message_is_locked_for_recipient_socket(self):
        broker = InMemoryRedis()
        message = make_message(
            content="Secret set",
            message_type="image",
            media_url="/media/messages/1/attachments/secret.jpg",
            is_ppv=True,
            ppv_price=500
        )
        with patch.object(redis_manager, "redis_client", broker):
            asyncio.run(message_service._publish(message, "INSERT", 1, 2))

            client = TestClient(app)
            with client.websocket_connect(f"/ws/{token_for(2)}") as websocket:
                websocket.receive_json()
                recipient_event = websocket.receive_json()
            with client.websocket_connect(f"/ws/{token_for(1)}") as websocket:
                websocket.receive_json()
                sender_event = websocket.receive_json()

        assert recipient_event["record"]["content"] is None
        assert recipient_event["record"]["media_url"] is None
        assert recipient_event["record"]["is_locked"] is True
        assert recipient_event["record"]["ppv_price"] == 500
        assert sender_event["record"]["content"] == "Secret set"
        assert sender_event["record"]["is_locked"] is False

    def test_only_own_channel_is_forwarded(self):
        broker = InMemoryRedis()
        with patch.object(redis_manager, "redis_client", broker):
            asyncio.run(message_service._publish(make_message(id=7, recipient_id=3), "INSERT", 3))
            asyncio.run(message_service._publish(make_message(id=8), "INSERT", 2))

            client = TestClient(app)
            with client.websocket_connect(f"/ws/{token_for(2)}") as websocket:
                websocket.receive_json()
                event = websocket.receive_json()

        assert event["record"]["id"] == 8
        assert broker.published.keys() == {"user_2", "user_3"}
