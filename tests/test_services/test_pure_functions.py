# tests/test_services/test_pure_functions.py
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from fanvault.services.analytics_service import (
    aggregate_metrics, engagement_rate, summarize_revenue, monthly_series, content_performance, top_posts
)
from fanvault.services.custom_request_service import can_transition, to_request_response
from fanvault.services.message_service import select_audience, to_message_response
from fanvault.services.notification_service import format_cents, truncate_comment, request_status_text
from fanvault.services.payment_service import payment_fee
from fanvault.services.platform_fee_service import add_months, fee_is_active
from fanvault.services.post_service import can_view_post
from fanvault.services.revenue_service import split_amount
from fanvault.services.subscription_service import tier_price


def post(**fields):
    data = {"creator_id": 1, "is_ppv": False, "is_premium": False}
    data.update(fields)
    return SimpleNamespace(**data)


class TestAccessRule:
    """Правило доступа к посту"""

    def test_free_post_open_for_everyone(self):
        assert can_view_post(post(), None, False, False) is True

    def test_owner_always_sees_post(self):
        assert can_view_post(post(is_ppv=True, is_premium=True), 1, False, False) is True

    def test_premium_requires_subscription(self):
        premium = post(is_premium=True)
        assert can_view_post(premium, 2, False, False) is False
        assert can_view_post(premium, 2, True, False) is True

    def test_ppv_requires_purchase_even_for_subscriber(self):
        ppv = post(is_ppv=True, is_premium=True)
        assert can_view_post(ppv, 2, True, False) is False
        assert can_view_post(ppv, 2, False, True) is True


class TestMoney:

    def test_payment_fee(self):
        assert payment_fee(1000) == 50
        assert payment_fee(999) == 49

    def test_split_amount_default_rate(self):
        assert split_amount(1000) == (150, 850)

    def test_split_amount_with_fee(self):
        assert split_amount(1000, 50) == (50, 950)

    def test_format_cents(self):
        assert format_cents(1999) == "$19.99"
        assert format_cents(5) == "$0.05"

    def test_tier_price(self):
        assert tier_price(1000, "monthly") == (1000, 1)
        assert tier_price(1000, "quarterly") == (2700, 3)
        assert tier_price(1000, "yearly") == (10000, 12)

    def test_unknown_tier(self):
        with pytest.raises(HTTPException) as exc_info:
            tier_price(1000, "weekly")
        assert exc_info.value.status_code == 400


class TestDates:

    def test_add_months_simple(self):
        assert add_months(datetime(2024, 3, 15, 10, 30), 1) == datetime(2024, 4, 15, 10, 30)

    def test_add_months_clamps_day(self):
        assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
        assert add_months(datetime(2023, 1, 31), 1) == datetime(2023, 2, 28)

    def test_add_months_over_year(self):
        assert add_months(datetime(2024, 11, 30), 3) == datetime(2025, 2, 28)
        assert add_months(datetime(2024, 5, 1), 12) == datetime(2025, 5, 1)

    def test_fee_is_active(self):
        now = datetime(2024, 6, 1)
        paid = SimpleNamespace(is_platform_fee_active=True, platform_fee_paid_until=now + timedelta(days=1))
        expired = SimpleNamespace(is_platform_fee_active=True, platform_fee_paid_until=now - timedelta(days=1))
        disabled = SimpleNamespace(is_platform_fee_active=False, platform_fee_paid_until=now + timedelta(days=1))

        assert fee_is_active(paid, now) is True
        assert fee_is_active(expired, now) is False
        assert fee_is_active(disabled, now) is False
        assert fee_is_active(None, now) is False


class TestMessages:

    def test_select_audience(self):
        now = datetime(2024, 6, 15)
        subscriptions = [
            SimpleNamespace(subscriber_id=1, start_date=now - timedelta(days=60), end_date=now + timedelta(days=5)),
            SimpleNamespace(subscriber_id=2, start_date=now - timedelta(days=2), end_date=now + timedelta(days=28)),
            SimpleNamespace(subscriber_id=3, start_date=now - timedelta(days=40), end_date=now - timedelta(days=1)),
            SimpleNamespace(subscriber_id=2, start_date=now - timedelta(days=1), end_date=now + timedelta(days=29)),
        ]

        assert select_audience(subscriptions, "all", now) == [1, 2, 3]
        assert select_audience(subscriptions, "active", now) == [1, 2]
        assert select_audience(subscriptions, "new", now) == [2]

    def test_ppv_message_hidden_for_recipient(self):
        message = SimpleNamespace(
            id=10, sender_id=1, recipient_id=2, content="Secret", message_type="image",
            media_url="/media/x.jpg", is_ppv=True, ppv_price=500, is_read=False, created_at=datetime(2024, 1, 1)
        )

        locked = to_message_response(message, 2, set())
        unlocked = to_message_response(message, 2, {10})
        own = to_message_response(message, 1, set())

        assert locked.is_locked is True
        assert locked.content is None
        assert unlocked.content == "Secret"
        assert own.media_url == "/media/x.jpg"

    def test_truncate_comment(self):
        assert truncate_comment("short") == "short"
        assert truncate_comment("x" * 60) == "x" * 50 + "..."


class TestAnalyticsAggregation:
    """Агрегации аналитики"""

    def test_aggregate_metrics(self):
        rows = [
            SimpleNamespace(metric_type="view", value=1),
            SimpleNamespace(metric_type="view", value=None),
            SimpleNamespace(metric_type="tip", value=500),
        ]
        assert aggregate_metrics(rows) == {"view": 2, "tip": 500}

    def test_engagement_rate(self):
        assert engagement_rate(1, 3) == 33.33
        assert engagement_rate(5, 0) == 0.0

    def test_summarize_revenue(self):
        records = [
            SimpleNamespace(net_amount=950, platform_fee=50, source_type="tip"),
            SimpleNamespace(net_amount=850, platform_fee=150, source_type="subscription"),
            SimpleNamespace(net_amount=95, platform_fee=5, source_type="tip"),
        ]

        summary = summarize_revenue(records)

        assert summary["total_revenue"] == 1895
        assert summary["total_fees"] == 205
        assert summary["revenue_by_source"] == {"tip": 1045, "subscription": 850}

    def test_monthly_series_sorted(self):
        records = [
            SimpleNamespace(net_amount=100, processed_at=datetime(2024, 3, 5)),
            SimpleNamespace(net_amount=200, processed_at=datetime(2024, 1, 20)),
            SimpleNamespace(net_amount=50, processed_at=datetime(2024, 3, 28)),
        ]

        assert monthly_series(records) == [
            {"month": "Jan 2024", "earnings": 200},
            {"month": "Mar 2024", "earnings": 150},
        ]

    def test_monthly_series_keeps_years_apart(self):
        records = [
            SimpleNamespace(net_amount=300, processed_at=datetime(2025, 1, 3)),
            SimpleNamespace(net_amount=100, processed_at=datetime(2024, 1, 15)),
        ]

        assert monthly_series(records) == [
            {"month": "Jan 2024", "earnings": 100},
            {"month": "Jan 2025", "earnings": 300},
        ]

    def test_content_performance_and_top_posts(self):
        posts = [
            SimpleNamespace(id=1, content_type="image", view_count=10, like_count=1, comment_count=0),
            SimpleNamespace(id=2, content_type="video", view_count=50, like_count=5, comment_count=2),
            SimpleNamespace(id=3, content_type="image", view_count=10, like_count=3, comment_count=1),
        ]

        performance = content_performance(posts)

        assert performance["image"] == {"posts": 2, "views": 20, "likes": 4, "comments": 1}
        assert [p.id for p in top_posts(posts, limit=2)] == [2, 3]


class TestCustomRequests:
    """Жизненный цикл заказа контента"""

    def test_transitions(self):
        assert can_transition("pending", "accepted") is True
        assert can_transition("accepted", "in_progress") is True
        assert can_transition("in_progress", "completed") is True
        assert can_transition("accepted", "declined") is True
        assert can_transition("pending", "completed") is False
        assert can_transition("completed", "declined") is False
        assert can_transition("expired", "accepted") is False

    def test_anonymous_fan_hidden_from_creator(self):
        request = SimpleNamespace(
            id=1, fan_id=2, creator_id=3, title="Video", description="Hello", content_type="video",
            special_instructions=None, is_anonymous=True, price=1000, deadline=datetime(2024, 6, 1),
            status="pending", payment_status="paid", delivered_content=None, rating=None, feedback=None,
            created_at=datetime(2024, 5, 1), completed_at=None
        )

        for_creator = to_request_response(request, 3, "fan_user")
        for_fan = to_request_response(request, 2, "fan_user")

        assert (for_creator.fan_id, for_creator.fan_username) == (None, None)
        assert (for_fan.fan_id, for_fan.fan_username) == (2, "fan_user")

    def test_status_text(self):
        assert request_status_text("Video", "accepted") == 'Your request "Video" was accepted'
        assert request_status_text("Video", "archived") == 'Your request "Video" is archived'
