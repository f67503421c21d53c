# fanvault/services/analytics_service.py
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Iterable, Dict, List, Any, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.repository.analytics_repository import analytics_repository
from fanvault.repository.creator_repository import creator_repository
from fanvault.repository.posts_repository import posts_repository
from fanvault.repository.revenue_repository import revenue_repository
from fanvault.repository.subscriptions_repository import subscriptions_repository
from fanvault.repository.tips_repository import tips_repository
from fanvault.repository.user_repository import profile_repository
from fanvault.schemas.analytics import (
    ContentAnalyticsResponse, CreatorAnalytics, CreatorStats, UserDashboard, CreatorDashboard,
    ActivityItem, FavoriteCreator, MonthlyPoint, TopPost, PlatformStats
)

logger = logging.getLogger(__name__)


# ==================== АГРЕГАЦИИ ====================

def aggregate_metrics(rows: Iterable[Any]) -> Dict[str, int]:
    """Сумма value по типу метрики, пустое value считается как 1"""
    metrics: Dict[str, int] = {}
    for row in rows:
        metrics[row.metric_type] = metrics.get(row.metric_type, 0) + (row.value or 1)
    return metrics


def engagement_rate(likes: int, views: int) -> float:
    """Доля лайков от просмотров в процентах"""
    if not views:
        return 0.0
    return round(likes / views * 100, 2)


def summarize_revenue(records: Iterable[Any]) -> Dict[str, Any]:
    total_revenue = 0
    total_fees = 0
    by_source: Dict[str, int] = {}
    for record in records:
        total_revenue += record.net_amount
        total_fees += record.platform_fee
        by_source[record.source_type] = by_source.get(record.source_type, 0) + record.net_amount
    return {
        "total_revenue": total_revenue,
        "total_fees": total_fees,
        "revenue_by_source": by_source,
    }


def monthly_series(records: Iterable[Any]) -> List[Dict[str, Any]]:
    """Чистый доход по месяцам в хронологическом порядке, метка с годом"""
    buckets: Dict[tuple, int] = {}
    for record in records:
        stamp = record.processed_at
        key = (stamp.year, stamp.month)
        buckets[key] = buckets.get(key, 0) + record.net_amount

    series = []
    for year, month in sorted(buckets):
        label = datetime(year, month, 1).strftime("%b %Y")
        series.append({"month": label, "earnings": buckets[(year, month)]})
    return series


def content_performance(posts: Iterable[Any]) -> Dict[str, Dict[str, int]]:
    performance: Dict[str, Dict[str, int]] = OrderedDict()
    for post in posts:
        entry = performance.setdefault(post.content_type, {"posts": 0, "views": 0, "likes": 0, "comments": 0})
        entry["posts"] += 1
        entry["views"] += post.view_count or 0
        entry["likes"] += post.like_count or 0
        entry["comments"] += post.comment_count or 0
    return dict(performance)


def top_posts(posts: Iterable[Any], limit: int = 5) -> List[Any]:
    return sorted(
        posts,
        key=lambda p: (p.view_count or 0, p.like_count or 0),
        reverse=True
    )[:limit]


# ==================== СЕРВИС ====================

class AnalyticsService:

    async def track_event(
            self,
            db: AsyncSession,
            content_id: int,
            content_type: str,
            metric_type: str,
            value: int = 1,
            user_id: Optional[int] = None
    ) -> None:
        """Запись события аналитики, ошибки не прерывают основную операцию"""
        try:
            await analytics_repository.add_event(db, content_id, content_type, metric_type, value, user_id)
        except Exception as e:
            logger.error(f"❌ Ошибка записи аналитики {metric_type} для {content_type}:{content_id}: {e}")
            await db.rollback()

    async def track_user_activity(
            self,
            db: AsyncSession,
            user_id: int,
            activity_type: str,
            target_id: Optional[int] = None,
            target_type: Optional[str] = None,
            meta_data: Optional[dict] = None
    ) -> None:
        try:
            await analytics_repository.add_activity(db, user_id, activity_type, target_id, target_type, meta_data)
        except Exception as e:
            logger.error(f"❌ Ошибка записи активности пользователя {user_id}: {e}")
            await db.rollback()

    async def get_content_analytics(
            self,
            db: AsyncSession,
            content_id: int,
            content_type: str,
            start_date: Optional[datetime] = None,
            end_date: Optional[datetime] = None
    ) -> ContentAnalyticsResponse:
        rows = await analytics_repository.get_for_content(db, content_id, content_type, start_date, end_date)
        return ContentAnalyticsResponse(
            content_id=content_id,
            content_type=content_type,
            metrics=aggregate_metrics(rows)
        )

    async def get_creator_analytics(self, db: AsyncSession, creator_id: int) -> CreatorAnalytics:
        posts = await posts_repository.get_all_by_creator(db, creator_id)
        rows = await analytics_repository.get_for_contents(db, [p.id for p in posts], "post")
        metrics = aggregate_metrics(rows)
        revenue = summarize_revenue(await revenue_repository.get_by_creator(db, creator_id))

        views = metrics.get("view", 0)
        likes = metrics.get("like", 0)
        return CreatorAnalytics(
            total_views=views,
            total_likes=likes,
            total_revenue=revenue["total_revenue"],
            engagement_rate=engagement_rate(likes, views)
        )

    async def get_creator_stats(self, db: AsyncSession, creator_id: int) -> CreatorStats:
        creator = await creator_repository.get_by_user(db, creator_id)
        now = datetime.now()

        tips = await tips_repository.get_received(db, creator_id, since=now - timedelta(days=30), limit=10000)
        recent_subs = await subscriptions_repository.get_by_creator(
            db, creator_id, status="active", since=now - timedelta(days=30)
        )
        monthly_earnings = sum(t.amount for t in tips) + sum(s.amount_paid or 0 for s in recent_subs)
        recent_subscribers = len([s for s in recent_subs if s.start_date >= now - timedelta(days=7)])

        posts = await posts_repository.get_all_by_creator(db, creator_id)
        total_likes = sum(p.like_count or 0 for p in posts)

        return CreatorStats(
            total_earnings=creator.total_earnings if creator else 0,
            total_subscribers=creator.total_subscribers if creator else 0,
            total_posts=creator.total_posts if creator else len(posts),
            monthly_earnings=monthly_earnings,
            recent_subscribers=recent_subscribers,
            engagement=round(total_likes / len(posts), 2) if posts else 0.0
        )

    async def _creator_dashboard(self, db: AsyncSession, creator_id: int) -> CreatorDashboard:
        creator = await creator_repository.get_by_user(db, creator_id)
        records = await revenue_repository.get_by_creator(db, creator_id)
        month_ago = datetime.now() - timedelta(days=30)
        posts = await posts_repository.get_all_by_creator(db, creator_id)

        total_views = sum(p.view_count or 0 for p in posts)
        total_likes = sum(p.like_count or 0 for p in posts)
        recent = sorted(records, key=lambda r: r.processed_at, reverse=True)[:10]

        return CreatorDashboard(
            total_earnings=creator.total_earnings if creator else 0,
            monthly_earnings=sum(r.net_amount for r in records if r.processed_at >= month_ago),
            subscriber_count=creator.total_subscribers if creator else 0,
            total_posts=len(posts),
            total_views=total_views,
            engagement_rate=engagement_rate(total_likes, total_views),
            monthly_data=[MonthlyPoint(**point) for point in monthly_series(records)],
            content_performance=content_performance(posts),
            recent_earnings=[
                {
                    "id": r.id,
                    "source_type": r.source_type,
                    "amount": r.amount,
                    "net_amount": r.net_amount,
                    "processed_at": r.processed_at.isoformat(),
                }
                for r in recent
            ],
            top_posts=[
                TopPost(
                    id=p.id,
                    title=p.title,
                    view_count=p.view_count or 0,
                    like_count=p.like_count or 0,
                    comment_count=p.comment_count or 0
                )
                for p in top_posts(posts)
            ]
        )

    async def get_user_dashboard(self, db: AsyncSession, user: models.Profile) -> UserDashboard:
        subscriptions = await subscriptions_repository.get_by_subscriber(db, user.id, status="active")
        creator_ids = []
        for subscription in subscriptions:
            if subscription.creator_id not in creator_ids:
                creator_ids.append(subscription.creator_id)
        favorites = await profile_repository.get_many(db, creator_ids[:5])
        activity = await analytics_repository.get_recent_activity(db, user.id, limit=10)

        return UserDashboard(
            total_subscriptions=len(subscriptions),
            total_spent=await revenue_repository.get_total_spent(db, user.id),
            recent_activity=[ActivityItem.model_validate(a) for a in activity],
            favorite_creators=[
                FavoriteCreator(id=p.id, username=p.username, display_name=p.display_name, avatar_url=p.avatar_url)
                for p in favorites
            ],
            creator=await self._creator_dashboard(db, user.id) if user.is_creator else None
        )

    async def get_platform_stats(self, db: AsyncSession) -> PlatformStats:
        async def count(model, *conditions) -> int:
            stmt = select(func.count(model.id))
            if conditions:
                stmt = stmt.where(*conditions)
            result = await db.execute(stmt)
            return result.scalar() or 0

        total_revenue, total_fees = await revenue_repository.get_platform_totals(db)
        return PlatformStats(
            total_users=await count(models.Profile),
            total_creators=await count(models.Profile, models.Profile.is_creator == True),  # noqa: E712
            total_posts=await count(models.Post),
            active_subscriptions=await count(models.UserSubscription, models.UserSubscription.status == "active"),
            pending_reports=await count(models.ContentReport, models.ContentReport.status == "pending"),
            pending_verifications=await count(
                models.AgeVerificationDocument, models.AgeVerificationDocument.status == "pending"
            ),
            total_revenue=total_revenue,
            total_platform_fees=total_fees
        )


analytics_service = AnalyticsService()
