# fanvault/repository/analytics_repository.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import ContentAnalytics, UserActivity


class AnalyticsRepository:
    async def add_event(
            self,
            db: AsyncSession,
            content_id: int,
            content_type: str,
            metric_type: str,
            value: int = 1,
            user_id: Optional[int] = None
    ) -> ContentAnalytics:
        event = ContentAnalytics(
            content_id=content_id,
            content_type=content_type,
            metric_type=metric_type,
            value=value,
            user_id=user_id
        )
        db.add(event)
        await db.commit()
        await db.refresh(event)
        return event

    async def get_for_content(
            self,
            db: AsyncSession,
            content_id: int,
            content_type: str,
            start_date: Optional[datetime] = None,
            end_date: Optional[datetime] = None
    ) -> List[ContentAnalytics]:
        stmt = select(ContentAnalytics).where(
            ContentAnalytics.content_id == content_id,
            ContentAnalytics.content_type == content_type
        )
        if start_date:
            stmt = stmt.where(ContentAnalytics.created_at >= start_date)
        if end_date:
            stmt = stmt.where(ContentAnalytics.created_at <= end_date)
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_for_contents(
            self,
            db: AsyncSession,
            content_ids: List[int],
            content_type: str = "post"
    ) -> List[ContentAnalytics]:
        if not content_ids:
            return []
        stmt = select(ContentAnalytics).where(
            ContentAnalytics.content_id.in_(content_ids),
            ContentAnalytics.content_type == content_type
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def add_activity(
            self,
            db: AsyncSession,
            user_id: int,
            activity_type: str,
            target_id: Optional[int] = None,
            target_type: Optional[str] = None,
            meta_data: Optional[dict] = None
    ) -> UserActivity:
        activity = UserActivity(
            user_id=user_id,
            activity_type=activity_type,
            target_id=target_id,
            target_type=target_type,
            meta_data=meta_data
        )
        db.add(activity)
        await db.commit()
        await db.refresh(activity)
        return activity

    async def get_recent_activity(self, db: AsyncSession, user_id: int, limit: int = 10) -> List[UserActivity]:
        stmt = (
            select(UserActivity)
            .where(UserActivity.user_id == user_id)
            .order_by(UserActivity.created_at.desc(), UserActivity.id.desc())
            .limit(limit)
        )
        result = await db.execute(stmt)
        return result.scalars().all()


analytics_repository = AnalyticsRepository()
