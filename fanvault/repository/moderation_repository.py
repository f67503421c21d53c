# fanvault/repository/moderation_repository.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database.models import ContentReport, AgeVerificationDocument
from fanvault.repository.base import BaseRepository
from fanvault.schemas.moderation import ContentReportCreate


class ReportsRepository(BaseRepository[ContentReport, ContentReportCreate, ContentReportCreate]):
    def __init__(self):
        super().__init__(ContentReport)

    async def get_pending(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> List[ContentReport]:
        """Очередь модерации, старые жалобы первыми"""
        return await self.get_by_field(
            db,
            field_name='status',
            field_value='pending',
            order_by=ContentReport.created_at.asc(),
            skip=skip,
            limit=limit
        )

    async def get_reviewed(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> List[ContentReport]:
        stmt = (
            select(ContentReport)
            .where(ContentReport.status != 'pending')
            .order_by(ContentReport.reviewed_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return result.scalars().all()


class VerificationRepository(BaseRepository[AgeVerificationDocument, ContentReportCreate, ContentReportCreate]):
    def __init__(self):
        super().__init__(AgeVerificationDocument)

    async def get_latest_for_user(self, db: AsyncSession, user_id: int) -> Optional[AgeVerificationDocument]:
        stmt = (
            select(AgeVerificationDocument)
            .where(AgeVerificationDocument.user_id == user_id)
            .order_by(AgeVerificationDocument.submission_date.desc(), AgeVerificationDocument.id.desc())
            .limit(1)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_status(
            self,
            db: AsyncSession,
            status: Optional[str] = None,
            skip: int = 0,
            limit: int = 100
    ) -> List[AgeVerificationDocument]:
        stmt = select(AgeVerificationDocument)
        if status:
            stmt = stmt.where(AgeVerificationDocument.status == status)
        stmt = stmt.order_by(AgeVerificationDocument.submission_date.asc()).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return result.scalars().all()


reports_repository = ReportsRepository()
verification_repository = VerificationRepository()
