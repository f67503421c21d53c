# fanvault/services/moderation_service.py
import logging
from datetime import datetime
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.repository.moderation_repository import reports_repository
from fanvault.repository.posts_repository import posts_repository
from fanvault.schemas.moderation import (
    ContentReportCreate, ContentReportResponse, ReviewRequest, ReviewDecision, ReportContentType
)

logger = logging.getLogger(__name__)


class ModerationService:
    """Жалобы на контент и очередь модерации"""

    async def report_content(
            self,
            db: AsyncSession,
            reporter: models.Profile,
            report_data: ContentReportCreate
    ) -> ContentReportResponse:
        report = await reports_repository.create(db, report_data, reporter_id=reporter.id, status="pending")
        logger.info(f"🚩 Жалоба {report.id} на {report.content_type}:{report.reported_content_id} от {reporter.id}")
        return ContentReportResponse.model_validate(report)

    async def get_pending(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> List[ContentReportResponse]:
        return [ContentReportResponse.model_validate(r) for r in await reports_repository.get_pending(db, skip, limit)]

    async def get_reviewed(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> List[ContentReportResponse]:
        return [ContentReportResponse.model_validate(r) for r in await reports_repository.get_reviewed(db, skip, limit)]

    async def review_report(
            self,
            db: AsyncSession,
            admin: models.Profile,
            report_id: int,
            review: ReviewRequest
    ) -> ContentReportResponse:
        """approve оставляет контент, reject снимает пост с публикации"""
        report = await reports_repository.get(db, report_id)
        if not report:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Жалоба не найдена")
        if report.status != "pending":
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Report already reviewed")

        approved = review.decision == ReviewDecision.APPROVE
        report = await reports_repository.update_fields(
            db,
            report,
            status="approved" if approved else "rejected",
            reviewed_by=admin.id,
            reviewed_at=datetime.now()
        )

        if not approved and report.content_type == ReportContentType.POST.value:
            post = await posts_repository.get(db, report.reported_content_id)
            if post:
                await posts_repository.update_fields(db, post, is_published=False)
                logger.info(f"🙈 Пост {post.id} снят с публикации по жалобе {report.id}")

        logger.info(f"⚖️ Жалоба {report.id} рассмотрена администратором {admin.id}: {report.status}")
        return ContentReportResponse.model_validate(report)


moderation_service = ModerationService()
