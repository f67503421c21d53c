# tests/tests_requests/test_custom_requests_endpoints.py
from datetime import datetime, timedelta

import pytest
from fastapi import status

from conftest import auth_headers
from fanvault.database import models


def request_payload(creator_id: int, **fields) -> dict:
    data = {
        "creator_id": creator_id,
        "title": "Beach photo set",
        "description": "Five photos at sunset",
        "content_type": "photo",
        "price": 2500,
        "deadline": (datetime.now() + timedelta(days=3)).isoformat(),
    }
    data.update(fields)
    return data


@pytest.fixture
def request_factory(db_session):
    """Заказ напрямую в БД, по умолчанию оплаченный"""

    async def create(fan: models.Profile, creator: models.Profile, **fields) -> models.CustomRequest:
        data = {
            "title": "Custom video",
            "description": "Short greeting",
            "content_type": "video",
            "price": 3000,
            "deadline": datetime.now() + timedelta(days=5),
            "status": "pending",
            "payment_status": "paid",
            "payment_intent_id": "pi_sim_test",
        }
        data.update(fields)
        request = models.CustomRequest(fan_id=fan.id, creator_id=creator.id, **data)
        db_session.add(request)
        await db_session.commit()
        await db_session.refresh(request)
        return request

    return create


@pytest.mark.asyncio
class TestRequestCreation:
    """Тесты создания и оплаты заказа"""

    async def test_create_and_pay(self, client, fan, creator):
        response = await client.post("/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id))

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["request"]["status"] == "pending"
        assert data["request"]["payment_status"] == "paid"
        assert data["request"]["fan_username"] == fan.username
        assert data["checkout"]["status"] == "succeeded"
        assert data["checkout"]["payment"]["amount"] == 2500
        assert data["checkout"]["payment"]["payment_type"] == "custom_request"
        assert data["checkout"]["result"]["request_id"] == data["request"]["id"]

        notifications = (await client.get("/notifications", headers=auth_headers(creator))).json()
        assert [n["type"] for n in notifications] == ["custom_request"]
        assert "$25.00" in notifications[0]["message"]

    async def test_payment_is_held_until_delivery(self, client, fan, creator):
        await client.post("/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id))

        summary = (await client.get("/revenue", headers=auth_headers(creator))).json()
        assert summary["total_revenue"] == 0

    async def test_price_limits(self, client, fan, creator):
        too_low = await client.post(
            "/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id, price=400)
        )
        too_high = await client.post(
            "/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id, price=100_001)
        )

        assert too_low.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert too_high.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_deadline_limits(self, client, fan, creator):
        past = (datetime.now() - timedelta(hours=1)).isoformat()
        far = (datetime.now() + timedelta(days=31)).isoformat()

        for deadline in (past, far):
            response = await client.post(
                "/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id, deadline=deadline)
            )
            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_request_to_self(self, client, creator):
        response = await client.post(
            "/custom-requests", headers=auth_headers(creator), json=request_payload(creator.id)
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_request_to_non_creator(self, client, fan, user_factory):
        other = await user_factory()
        response = await client.post("/custom-requests", headers=auth_headers(fan), json=request_payload(other.id))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_paid_request_cannot_be_paid_again(self, client, fan, creator):
        created = await client.post("/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id))

        response = await client.post("/payments/intents", headers=auth_headers(fan), json={
            "payment_type": "custom_request",
            "creator_id": creator.id,
            "content_id": created.json()["request"]["id"]
        })
        assert response.status_code == status.HTTP_409_CONFLICT

    async def test_sent_listing(self, client, fan, creator):
        await client.post("/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id))

        sent = (await client.get("/custom-requests/sent", headers=auth_headers(fan))).json()

        assert len(sent) == 1
        assert sent[0]["fan_id"] == fan.id


@pytest.mark.asyncio
class TestCreatorActions:
    """Тесты обработки заказа автором"""

    async def test_full_flow(self, client, fan, creator):
        created = await client.post("/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id))
        request_id = created.json()["request"]["id"]

        accepted = await client.post(f"/custom-requests/{request_id}/accept", headers=auth_headers(creator))
        assert accepted.json()["status"] == "accepted"

        started = await client.post(f"/custom-requests/{request_id}/start", headers=auth_headers(creator))
        assert started.json()["status"] == "in_progress"

        delivered = await client.post(
            f"/custom-requests/{request_id}/deliver",
            headers=auth_headers(creator),
            json={
                "media_urls": ["/media/messages/1/requests/a.jpg", "/media/messages/1/requests/b.mp4"],
                "note": "Enjoy!"
            }
        )
        assert delivered.status_code == status.HTTP_200_OK
        assert delivered.json()["status"] == "completed"
        assert delivered.json()["completed_at"] is not None
        assert len(delivered.json()["delivered_content"]) == 2

        messages = (await client.get(f"/messages/conversations/{creator.id}", headers=auth_headers(fan))).json()
        assert [m["message_type"] for m in messages] == ["image", "video"]
        assert messages[0]["content"] == "Enjoy!"
        assert messages[1]["media_url"] == "/media/messages/1/requests/b.mp4"

        summary = (await client.get("/revenue", headers=auth_headers(creator))).json()
        assert summary["revenue_by_source"] == {"custom_request": 2375}
        assert summary["total_fees"] == 125

        notifications = (await client.get("/notifications", headers=auth_headers(fan))).json()
        assert {n["data"]["status"] for n in notifications} == {"accepted", "in_progress", "completed"}

    async def test_decline_refunds_payment(self, client, fan, creator):
        created = await client.post("/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id))
        request_id = created.json()["request"]["id"]
        intent_id = created.json()["checkout"]["payment"]["payment_intent_id"]

        declined = await client.post(f"/custom-requests/{request_id}/decline", headers=auth_headers(creator))

        assert declined.json()["status"] == "declined"
        assert declined.json()["payment_status"] == "refunded"

        payment = (await client.get(f"/payments/status/{intent_id}", headers=auth_headers(fan))).json()
        assert payment["status"] == "refunded"

    async def test_accept_unpaid_request(self, client, fan, creator, request_factory):
        request = await request_factory(fan, creator, payment_status="pending", payment_intent_id=None)

        response = await client.post(f"/custom-requests/{request.id}/accept", headers=auth_headers(creator))
        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED

    async def test_accept_after_deadline(self, client, fan, creator, request_factory):
        request = await request_factory(fan, creator, deadline=datetime.now() - timedelta(hours=1))

        response = await client.post(f"/custom-requests/{request.id}/accept", headers=auth_headers(creator))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_invalid_transitions(self, client, fan, creator, request_factory):
        pending = await request_factory(fan, creator)
        completed = await request_factory(fan, creator, status="completed")

        start = await client.post(f"/custom-requests/{pending.id}/start", headers=auth_headers(creator))
        deliver = await client.post(
            f"/custom-requests/{pending.id}/deliver",
            headers=auth_headers(creator),
            json={"media_urls": ["/media/messages/1/requests/a.jpg"]}
        )
        decline = await client.post(f"/custom-requests/{completed.id}/decline", headers=auth_headers(creator))

        assert start.status_code == status.HTTP_409_CONFLICT
        assert deliver.status_code == status.HTTP_409_CONFLICT
        assert decline.status_code == status.HTTP_409_CONFLICT

    async def test_deliver_requires_files(self, client, fan, creator, request_factory):
        request = await request_factory(fan, creator, status="accepted")

        response = await client.post(
            f"/custom-requests/{request.id}/deliver", headers=auth_headers(creator), json={"media_urls": []}
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_foreign_request(self, client, fan, creator, user_factory, request_factory):
        request = await request_factory(fan, creator)
        other = await user_factory(is_creator=True)

        accept = await client.post(f"/custom-requests/{request.id}/accept", headers=auth_headers(other))
        view = await client.get(f"/custom-requests/{request.id}", headers=auth_headers(other))

        assert accept.status_code == status.HTTP_404_NOT_FOUND
        assert view.status_code == status.HTTP_404_NOT_FOUND

    async def test_fan_cannot_accept(self, client, fan, creator, request_factory):
        request = await request_factory(fan, creator)

        response = await client.post(f"/custom-requests/{request.id}/accept", headers=auth_headers(fan))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_accept_requires_paid_platform_fee(self, client, fan, user_factory, request_factory):
        unpaid = await user_factory(is_creator=True, fee_paid=False)
        request = await request_factory(fan, unpaid)

        response = await client.post(f"/custom-requests/{request.id}/accept", headers=auth_headers(unpaid))
        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED

    async def test_anonymous_request_hides_fan(self, client, fan, creator):
        created = await client.post(
            "/custom-requests", headers=auth_headers(fan), json=request_payload(creator.id, is_anonymous=True)
        )
        request_id = created.json()["request"]["id"]

        received = (await client.get("/custom-requests/received", headers=auth_headers(creator))).json()
        as_creator = (await client.get(f"/custom-requests/{request_id}", headers=auth_headers(creator))).json()
        as_fan = (await client.get(f"/custom-requests/{request_id}", headers=auth_headers(fan))).json()

        assert received[0]["fan_id"] is None
        assert received[0]["fan_username"] is None
        assert as_creator["fan_id"] is None
        assert as_fan["fan_id"] == fan.id

        notifications = (await client.get("/notifications", headers=auth_headers(creator))).json()
        assert fan.username not in notifications[0]["message"]

    async def test_received_filter_by_status(self, client, fan, creator, request_factory):
        await request_factory(fan, creator)
        await request_factory(fan, creator, status="accepted")

        pending = (await client.get("/custom-requests/received?status=pending", headers=auth_headers(creator))).json()
        everything = (await client.get("/custom-requests/received", headers=auth_headers(creator))).json()

        assert [r["status"] for r in pending] == ["pending"]
        assert pending[0]["fan_username"] == fan.username
        assert len(everything) == 2


@pytest.mark.asyncio
class TestRating:
    """Тесты оценки выполненного заказа"""

    async def test_rate_completed_request(self, client, fan, creator, request_factory):
        request = await request_factory(fan, creator, status="completed")

        rated = await client.post(
            f"/custom-requests/{request.id}/rate", headers=auth_headers(fan), json={"rating": 5, "feedback": "Great!"}
        )
        again = await client.post(f"/custom-requests/{request.id}/rate", headers=auth_headers(fan), json={"rating": 1})

        assert rated.json()["rating"] == 5
        assert rated.json()["feedback"] == "Great!"
        assert again.status_code == status.HTTP_409_CONFLICT

    async def test_rate_unfinished_request(self, client, fan, creator, request_factory):
        request = await request_factory(fan, creator, status="accepted")

        response = await client.post(f"/custom-requests/{request.id}/rate", headers=auth_headers(fan), json={"rating": 4})
        assert response.status_code == status.HTTP_409_CONFLICT

    async def test_rating_out_of_range(self, client, fan, creator, request_factory):
        request = await request_factory(fan, creator, status="completed")

        response = await client.post(f"/custom-requests/{request.id}/rate", headers=auth_headers(fan), json={"rating": 6})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_creator_cannot_rate(self, client, fan, creator, request_factory):
        request = await request_factory(fan, creator, status="completed")

        response = await client.post(
            f"/custom-requests/{request.id}/rate", headers=auth_headers(creator), json={"rating": 5}
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
