# tests/tests_analytics/test_analytics_endpoints.py
import pytest
from fastapi import status

from conftest import auth_headers


@pytest.mark.asyncio
class TestContentAnalytics:
    """Тесты метрик контента"""

    async def test_post_metrics(self, client, creator, fan, post_factory):
        post = await post_factory(creator)
        await client.post(f"/posts/{post.id}/view", headers=auth_headers(fan))
        await client.post(f"/posts/{post.id}/view")
        await client.post(f"/posts/{post.id}/like", headers=auth_headers(fan))

        response = await client.get(f"/analytics/content/post/{post.id}", headers=auth_headers(creator))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["metrics"] == {"view": 2, "like": 1}

    async def test_track_custom_event(self, client, creator, fan, post_factory):
        post = await post_factory(creator)

        tracked = await client.post("/analytics/events", headers=auth_headers(fan), json={
            "content_id": post.id,
            "content_type": "post",
            "metric_type": "share"
        })
        assert tracked.status_code == status.HTTP_201_CREATED

        metrics = (await client.get(f"/analytics/content/post/{post.id}", headers=auth_headers(creator))).json()
        assert metrics["metrics"] == {"share": 1}

    async def test_foreign_post_metrics(self, client, creator, user_factory, post_factory):
        post = await post_factory(creator)
        other = await user_factory(is_creator=True)

        response = await client.get(f"/analytics/content/post/{post.id}", headers=auth_headers(other))
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
class TestCreatorAnalytics:

    async def test_creator_analytics(self, client, creator, fan, post_factory):
        post = await post_factory(creator)
        for _ in range(4):
            await client.post(f"/posts/{post.id}/view")
        await client.post(f"/posts/{post.id}/like", headers=auth_headers(fan))
        await client.post("/payments/tips", headers=auth_headers(fan), json={"creator_id": creator.id, "amount": 1000})

        data = (await client.get("/analytics/creator", headers=auth_headers(creator))).json()

        assert data["total_views"] == 4
        assert data["total_likes"] == 1
        assert data["total_revenue"] == 950
        assert data["engagement_rate"] == 25.0

    async def test_creator_stats(self, client, creator, fan):
        await client.post("/subscriptions", headers=auth_headers(fan), json={"creator_id": creator.id})
        await client.post("/payments/tips", headers=auth_headers(fan), json={"creator_id": creator.id, "amount": 500})

        data = (await client.get("/analytics/creator/stats", headers=auth_headers(creator))).json()

        assert data["total_subscribers"] == 1
        assert data["recent_subscribers"] == 1
        assert data["monthly_earnings"] == 999 + 500
        assert data["total_earnings"] == 950 + 475

    async def test_dashboard_for_fan_and_creator(self, client, creator, fan, post_factory):
        await post_factory(creator, title="Popular")
        await client.post("/subscriptions", headers=auth_headers(fan), json={"creator_id": creator.id})

        fan_dashboard = (await client.get("/analytics/dashboard", headers=auth_headers(fan))).json()
        assert fan_dashboard["total_subscriptions"] == 1
        assert fan_dashboard["total_spent"] == 999
        assert fan_dashboard["favorite_creators"][0]["id"] == creator.id
        assert fan_dashboard["recent_activity"][0]["activity_type"] == "subscribe"
        assert fan_dashboard["creator"] is None

        creator_dashboard = (await client.get("/analytics/dashboard", headers=auth_headers(creator))).json()
        assert creator_dashboard["creator"]["subscriber_count"] == 1
        assert creator_dashboard["creator"]["top_posts"][0]["title"] == "Popular"
        assert len(creator_dashboard["creator"]["monthly_data"]) == 1

    async def test_platform_stats_admin_only(self, client, admin, fan, creator, post_factory):
        await post_factory(creator)

        forbidden = await client.get("/analytics/platform", headers=auth_headers(fan))
        assert forbidden.status_code == status.HTTP_403_FORBIDDEN

        stats = (await client.get("/analytics/platform", headers=auth_headers(admin))).json()
        assert stats["total_users"] == 3
        assert stats["total_creators"] == 1
        assert stats["total_posts"] == 1
