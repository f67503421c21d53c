# tests/test_repositories/test_repositories.py
from datetime import datetime, timedelta

import pytest

from fanvault.repository.likes_repository import likes_repository
from fanvault.repository.posts_repository import posts_repository
from fanvault.repository.ppv_repository import ppv_repository
from fanvault.repository.subscriptions_repository import subscriptions_repository


@pytest.mark.asyncio
class TestLikesRepository:
    """Тесты репозитория лайков"""

    async def test_toggle_like(self, db_session, creator, fan, post_factory):
        post = await post_factory(creator)

        liked = await likes_repository.toggle_like(db_session, fan.id, post.id)
        assert liked["liked"] is True
        assert await likes_repository.get_likes_count(db_session, post.id) == 1

        unliked = await likes_repository.toggle_like(db_session, fan.id, post.id)
        assert unliked["liked"] is False
        assert await likes_repository.user_has_liked(db_session, fan.id, post.id) is False

    async def test_duplicate_like(self, db_session, creator, fan, post_factory):
        post = await post_factory(creator)
        await likes_repository.create(db_session, fan.id, post.id)

        with pytest.raises(ValueError):
            await likes_repository.create(db_session, fan.id, post.id)


@pytest.mark.asyncio
class TestPostsRepository:

    async def test_feed_only_selected_published(self, db_session, creator, user_factory, post_factory):
        other = await user_factory(is_creator=True)
        visible = await post_factory(creator)
        await post_factory(creator, is_published=False)
        await post_factory(other)

        feed = await posts_repository.get_feed(db_session, [creator.id])

        assert [p.id for p in feed] == [visible.id]
        assert await posts_repository.get_feed(db_session, []) == []

    async def test_increment_field(self, db_session, creator, post_factory):
        post = await post_factory(creator)

        await posts_repository.increment_field(db_session, post.id, "view_count", 3)
        await db_session.refresh(post)

        assert post.view_count == 3


@pytest.mark.asyncio
class TestAccessRepositories:
    """Тесты выборок, от которых зависит доступ к контенту"""

    async def test_purchases_by_kind(self, db_session, creator, fan, post_factory):
        post = await post_factory(creator, is_ppv=True, ppv_price=500)
        await ppv_repository.create(db_session, fan.id, creator.id, 500, post_id=post.id)

        assert await ppv_repository.has_purchased(db_session, fan.id, post_id=post.id) is True
        assert await ppv_repository.has_purchased(db_session, fan.id, message_id=post.id) is False
        assert await ppv_repository.get_purchased_post_ids(db_session, fan.id) == [post.id]
        assert await ppv_repository.get_purchased_message_ids(db_session, fan.id) == []

    async def test_expired_subscription_not_active(self, db_session, creator, fan, subscription_factory):
        await subscription_factory(fan, creator, end_date=datetime.now() - timedelta(hours=1))

        assert await subscriptions_repository.get_active(db_session, fan.id, creator.id) is None
        assert await subscriptions_repository.get_subscribed_creator_ids(db_session, fan.id) == []
