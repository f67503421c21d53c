# tests/tests_messages/test_messages_endpoints.py
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status

from conftest import auth_headers


@pytest.mark.asyncio
class TestDirectMessages:
    """Тесты личных сообщений"""

    async def test_send_message(self, client, fan, creator):
        response = await client.post("/messages", headers=auth_headers(fan), json={
            "recipient_id": creator.id,
            "content": "Hello <b>there</b>"
        })

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["sender_id"] == fan.id
        assert data["content"] == "Hello bthere/b"
        assert data["is_read"] is False

    async def test_cannot_message_self(self, client, fan):
        response = await client.post("/messages", headers=auth_headers(fan), json={
            "recipient_id": fan.id,
            "content": "Me"
        })
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_unknown_recipient(self, client, fan):
        response = await client.post("/messages", headers=auth_headers(fan), json={
            "recipient_id": 9999,
            "content": "Anyone?"
        })
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_empty_text_message(self, client, fan, creator):
        response = await client.post("/messages", headers=auth_headers(fan), json={"recipient_id": creator.id})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_media_message_requires_url(self, client, fan, creator):
        response = await client.post("/messages", headers=auth_headers(fan), json={
            "recipient_id": creator.id,
            "message_type": "image"
        })
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_fan_cannot_send_ppv(self, client, fan, creator):
        response = await client.post("/messages", headers=auth_headers(fan), json={
            "recipient_id": creator.id,
            "content": "Buy this",
            "is_ppv": True,
            "ppv_price": 500
        })
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_conversation_and_read(self, client, fan, creator):
        await client.post("/messages", headers=auth_headers(fan), json={"recipient_id": creator.id, "content": "One"})
        await client.post("/messages", headers=auth_headers(fan), json={"recipient_id": creator.id, "content": "Two"})
        await client.post("/messages", headers=auth_headers(creator), json={"recipient_id": fan.id, "content": "Hi"})

        conversation = (await client.get(f"/messages/conversations/{fan.id}", headers=auth_headers(creator))).json()
        assert [m["content"] for m in conversation] == ["One", "Two", "Hi"]

        summaries = (await client.get("/messages/conversations", headers=auth_headers(creator))).json()
        assert len(summaries) == 1
        assert summaries[0]["user_id"] == fan.id
        assert summaries[0]["unread_count"] == 2
        assert summaries[0]["last_message"]["content"] == "Hi"

        receipt = await client.post(f"/messages/conversations/{fan.id}/read", headers=auth_headers(creator))
        assert receipt.json() == {"updated": 2}

        summaries = (await client.get("/messages/conversations", headers=auth_headers(creator))).json()
        assert summaries[0]["unread_count"] == 0

    async def test_upload_attachment(self, client, fan):
        response = await client.post(
            "/messages/media",
            headers=auth_headers(fan),
            files={"file": ("photo.png", b"\x89PNG\r\n\x1a\n", "image/png")}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message_type"] == "image"
        assert response.json()["url"].startswith(f"/media/messages/{fan.id}/attachments/")


@pytest.mark.asyncio
class TestPPVMessages:
    """PPV сообщения скрыты от получателя до покупки"""

    async def _send_ppv(self, client, creator, fan) -> dict:
        response = await client.post("/messages", headers=auth_headers(creator), json={
            "recipient_id": fan.id,
            "content": "Secret content",
            "message_type": "image",
            "media_url": "/media/messages/1/attachments/secret.jpg",
            "is_ppv": True,
            "ppv_price": 700
        })
        assert response.status_code == status.HTTP_201_CREATED
        return response.json()

    async def test_ppv_hidden_until_purchase(self, client, creator, fan):
        message = await self._send_ppv(client, creator, fan)

        locked = (await client.get(f"/messages/conversations/{creator.id}", headers=auth_headers(fan))).json()
        assert locked[0]["is_locked"] is True
        assert locked[0]["content"] is None
        assert locked[0]["media_url"] is None

        sender_view = (await client.get(f"/messages/conversations/{fan.id}", headers=auth_headers(creator))).json()
        assert sender_view[0]["content"] == "Secret content"

        purchase = await client.post("/payments/ppv/unlock", headers=auth_headers(fan), json={
            "content_kind": "message",
            "content_id": message["id"]
        })
        assert purchase.status_code == status.HTTP_201_CREATED

        unlocked = (await client.get(f"/messages/conversations/{creator.id}", headers=auth_headers(fan))).json()
        assert unlocked[0]["is_locked"] is False
        assert unlocked[0]["media_url"] == "/media/messages/1/attachments/secret.jpg"

    async def test_realtime_push_hides_ppv_from_recipient(self, client, creator, fan):
        """Событие INSERT в канале получателя не раскрывает PPV содержимое"""
        with patch("fanvault.services.message_service.redis_manager.publish_to_user",
                   new_callable=AsyncMock) as mock_publish:
            await self._send_ppv(client, creator, fan)

        pushed = {call.args[0]: call.args for call in mock_publish.call_args_list if call.args[2] == "messages"}
        assert pushed[fan.id][1:3] == ("INSERT", "messages")
        fan_record = pushed[fan.id][3]
        assert fan_record["content"] is None
        assert fan_record["media_url"] is None
        assert fan_record["is_locked"] is True
        assert fan_record["ppv_price"] == 700

        creator_record = pushed[creator.id][3]
        assert creator_record["content"] == "Secret content"
        assert creator_record["is_locked"] is False

    async def test_read_receipt_push_keeps_purchased_content(self, client, creator, fan):
        message = await self._send_ppv(client, creator, fan)
        await client.post("/payments/ppv/unlock", headers=auth_headers(fan), json={
            "content_kind": "message",
            "content_id": message["id"]
        })

        with patch("fanvault.services.message_service.redis_manager.publish_to_user",
                   new_callable=AsyncMock) as mock_publish:
            await client.post(f"/messages/conversations/{creator.id}/read", headers=auth_headers(fan))

        fan_record = next(call.args[3] for call in mock_publish.call_args_list if call.args[0] == fan.id)
        assert fan_record["is_read"] is True
        assert fan_record["content"] == "Secret content"

    async def test_only_recipient_can_buy(self, client, creator, fan, user_factory):
        message = await self._send_ppv(client, creator, fan)
        outsider = await user_factory()

        response = await client.post("/payments/ppv/unlock", headers=auth_headers(outsider), json={
            "content_kind": "message",
            "content_id": message["id"]
        })
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_ppv_requires_paid_fee(self, client, user_factory, fan):
        unpaid = await user_factory(is_creator=True, fee_paid=False)
        response = await client.post("/messages", headers=auth_headers(unpaid), json={
            "recipient_id": fan.id,
            "content": "Buy",
            "is_ppv": True,
            "ppv_price": 500
        })
        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED


@pytest.mark.asyncio
class TestMassMessages:

    async def test_send_to_all_subscribers(self, client, creator, user_factory, subscription_factory):
        first = await user_factory()
        second = await user_factory()
        await subscription_factory(first, creator)
        await subscription_factory(second, creator)

        response = await client.post("/messages/mass", headers=auth_headers(creator), json={"content": "News!"})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json() == {"recipients": 2, "audience": "all"}

        inbox = (await client.get(f"/messages/conversations/{creator.id}", headers=auth_headers(first))).json()
        assert inbox[0]["content"] == "News!"

    async def test_new_subscribers_audience(self, client, creator, user_factory, subscription_factory):
        veteran = await user_factory()
        newcomer = await user_factory()
        await subscription_factory(veteran, creator, start_date=datetime.now() - timedelta(days=20))
        await subscription_factory(newcomer, creator)

        response = await client.post(
            "/messages/mass", headers=auth_headers(creator), json={"content": "Welcome!", "audience": "new"}
        )

        assert response.json()["recipients"] == 1

    async def test_mass_ppv_push_is_locked(self, client, creator, fan, subscription_factory):
        await subscription_factory(fan, creator)

        with patch("fanvault.services.message_service.redis_manager.publish_to_user",
                   new_callable=AsyncMock) as mock_publish:
            response = await client.post("/messages/mass", headers=auth_headers(creator), json={
                "content": "Members only",
                "is_ppv": True,
                "ppv_price": 300
            })

        assert response.status_code == status.HTTP_201_CREATED
        mock_publish.assert_awaited_once()
        user_id, event, table, record = mock_publish.call_args.args
        assert (user_id, event, table) == (fan.id, "INSERT", "messages")
        assert record["content"] is None
        assert record["is_locked"] is True

    async def test_no_subscribers(self, client, creator):
        response = await client.post("/messages/mass", headers=auth_headers(creator), json={"content": "Hello?"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_fan_cannot_send_mass_message(self, client, fan):
        response = await client.post("/messages/mass", headers=auth_headers(fan), json={"content": "Spam"})
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
class TestWelcomeMessages:
    """Тесты цепочки приветственных сообщений"""

    async def _create(self, client, creator, content: str, **fields) -> dict:
        response = await client.post(
            "/welcome-messages", headers=auth_headers(creator), json={"content": content, **fields}
        )
        assert response.status_code == status.HTTP_201_CREATED
        return response.json()

    async def test_create_assigns_sequence(self, client, creator):
        first = await self._create(client, creator, "First")
        second = await self._create(client, creator, "Second", delay_hours=24)

        assert first["sequence_order"] == 1
        assert second["sequence_order"] == 2
        assert second["delay_hours"] == 24

    async def test_move_and_reorder(self, client, creator):
        first = await self._create(client, creator, "First")
        second = await self._create(client, creator, "Second")
        third = await self._create(client, creator, "Third")

        moved = await client.post(
            f"/welcome-messages/{third['id']}/move", headers=auth_headers(creator), params={"direction": "up"}
        )
        assert [m["content"] for m in moved.json()] == ["First", "Third", "Second"]

        reordered = await client.put(
            "/welcome-messages/order",
            headers=auth_headers(creator),
            json={"message_ids": [second["id"], first["id"], third["id"]]}
        )
        assert [m["content"] for m in reordered.json()] == ["Second", "First", "Third"]

    async def test_reorder_requires_all_messages(self, client, creator):
        first = await self._create(client, creator, "First")
        await self._create(client, creator, "Second")

        response = await client.put(
            "/welcome-messages/order", headers=auth_headers(creator), json={"message_ids": [first["id"]]}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_update_to_ppv_requires_price(self, client, creator):
        message = await self._create(client, creator, "Hello")

        response = await client.patch(
            f"/welcome-messages/{message['id']}", headers=auth_headers(creator), json={"is_ppv": True}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        stored = (await client.get("/welcome-messages", headers=auth_headers(creator))).json()
        assert stored[0]["is_ppv"] is False
        assert stored[0]["ppv_price"] is None

    async def test_toggle_and_delete(self, client, creator):
        message = await self._create(client, creator, "Hello")

        toggled = await client.post(f"/welcome-messages/{message['id']}/toggle", headers=auth_headers(creator))
        assert toggled.json()["is_active"] is False

        deleted = await client.delete(f"/welcome-messages/{message['id']}", headers=auth_headers(creator))
        assert deleted.status_code == status.HTTP_200_OK
        assert (await client.get("/welcome-messages", headers=auth_headers(creator))).json() == []

    async def test_foreign_message_not_found(self, client, creator, user_factory):
        message = await self._create(client, creator, "Mine")
        other = await user_factory(is_creator=True)

        response = await client.patch(
            f"/welcome-messages/{message['id']}", headers=auth_headers(other), json={"content": "Stolen"}
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_fan_forbidden(self, client, fan):
        response = await client.get("/welcome-messages", headers=auth_headers(fan))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_scheduled_on_subscription(self, client, creator, fan, mock_welcome_delivery):
        await self._create(client, creator, "Instant")
        await self._create(client, creator, "Later", delay_hours=2)
        inactive = await self._create(client, creator, "Off")
        await client.post(f"/welcome-messages/{inactive['id']}/toggle", headers=auth_headers(creator))

        response = await client.post("/subscriptions", headers=auth_headers(fan), json={"creator_id": creator.id})
        assert response.status_code == status.HTTP_201_CREATED

        countdowns = sorted(call.kwargs["countdown"] for call in mock_welcome_delivery.call_args_list)
        assert countdowns == [0, 7200]
        assert all(call.kwargs["args"][1] == fan.id for call in mock_welcome_delivery.call_args_list)
