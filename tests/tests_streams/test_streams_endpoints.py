# tests/tests_streams/test_streams_endpoints.py
import pytest
from fastapi import status

from conftest import auth_headers


async def create_stream(client, creator, title: str = "Evening stream") -> dict:
    response = await client.post("/streams", headers=auth_headers(creator), json={"title": title})
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


@pytest.mark.asyncio
class TestStreamLifecycle:
    """Тесты создания, запуска и завершения трансляций"""

    async def test_create_stream(self, client, creator):
        data = await create_stream(client, creator)

        assert data["is_active"] is False
        assert data["stream_key"].startswith("sk_")
        assert data["rtmp_url"].endswith(data["stream_key"])
        assert data["hls_url"].endswith(f"{data['stream_key']}/index.m3u8")

    async def test_public_view_hides_stream_key(self, client, creator):
        stream = await create_stream(client, creator)

        data = (await client.get(f"/streams/{stream['id']}")).json()

        assert "stream_key" not in data
        assert "rtmp_url" not in data

    async def test_unpaid_creator_cannot_stream(self, client, user_factory):
        unpaid = await user_factory(is_creator=True, fee_paid=False)
        response = await client.post("/streams", headers=auth_headers(unpaid), json={"title": "Nope"})
        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED

    async def test_start_notifies_subscribers(self, client, creator, fan, subscription_factory):
        await subscription_factory(fan, creator)
        stream = await create_stream(client, creator)

        started = await client.post(f"/streams/{stream['id']}/start", headers=auth_headers(creator))

        assert started.json()["is_active"] is True
        assert started.json()["actual_start"] is not None

        notifications = (await client.get("/notifications", headers=auth_headers(fan))).json()
        assert notifications[0]["type"] == "live_stream"
        assert notifications[0]["data"]["stream_id"] == stream["id"]

        active = (await client.get("/streams/active")).json()
        assert [s["id"] for s in active] == [stream["id"]]

    async def test_only_one_live_stream(self, client, creator):
        first = await create_stream(client, creator, "First")
        second = await create_stream(client, creator, "Second")
        await client.post(f"/streams/{first['id']}/start", headers=auth_headers(creator))

        response = await client.post(f"/streams/{second['id']}/start", headers=auth_headers(creator))
        assert response.status_code == status.HTTP_409_CONFLICT

    async def test_end_stream(self, client, creator):
        stream = await create_stream(client, creator)
        await client.post(f"/streams/{stream['id']}/start", headers=auth_headers(creator))

        ended = await client.post(f"/streams/{stream['id']}/end", headers=auth_headers(creator))
        assert ended.json()["is_active"] is False
        assert ended.json()["actual_end"] is not None

        again = await client.post(f"/streams/{stream['id']}/end", headers=auth_headers(creator))
        assert again.status_code == status.HTTP_409_CONFLICT

    async def test_foreign_stream_control(self, client, creator, user_factory):
        stream = await create_stream(client, creator)
        other = await user_factory(is_creator=True)

        response = await client.post(f"/streams/{stream['id']}/start", headers=auth_headers(other))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_my_streams(self, client, creator):
        await create_stream(client, creator, "One")
        await create_stream(client, creator, "Two")

        response = await client.get("/streams/me", headers=auth_headers(creator))
        assert {s["title"] for s in response.json()} == {"One", "Two"}


@pytest.mark.asyncio
class TestStreamViewers:

    async def test_subscriber_joins_as_viewer(self, client, creator, fan, subscription_factory):
        await subscription_factory(fan, creator)
        stream = await create_stream(client, creator)
        await client.post(f"/streams/{stream['id']}/start", headers=auth_headers(creator))

        joined = await client.post(f"/streams/{stream['id']}/join", headers=auth_headers(fan))

        data = joined.json()
        assert data["role"] == "viewer"
        assert data["room"] == f"stream_{stream['id']}"
        assert data["viewer_count"] == 1
        assert len(data["token"].split(".")) == 3

        left = await client.post(f"/streams/{stream['id']}/leave", headers=auth_headers(fan))
        assert left.json()["viewer_count"] == 0
        assert left.json()["max_viewers"] == 1

    async def test_creator_joins_as_host(self, client, creator):
        stream = await create_stream(client, creator)
        await client.post(f"/streams/{stream['id']}/start", headers=auth_headers(creator))

        data = (await client.post(f"/streams/{stream['id']}/join", headers=auth_headers(creator))).json()

        assert data["role"] == "host"
        assert data["viewer_count"] == 0

    async def test_non_subscriber_cannot_join(self, client, creator, fan):
        stream = await create_stream(client, creator)
        await client.post(f"/streams/{stream['id']}/start", headers=auth_headers(creator))

        response = await client.post(f"/streams/{stream['id']}/join", headers=auth_headers(fan))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_join_offline_stream(self, client, creator, fan, subscription_factory):
        await subscription_factory(fan, creator)
        stream = await create_stream(client, creator)

        response = await client.post(f"/streams/{stream['id']}/join", headers=auth_headers(fan))
        assert response.status_code == status.HTTP_409_CONFLICT
