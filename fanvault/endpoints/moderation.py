# fanvault/endpoints/moderation.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import admin_permission
from fanvault.schemas.moderation import ContentReportCreate, ContentReportResponse, ReviewRequest
from fanvault.security.auth import get_current_user
from fanvault.services.moderation_service import moderation_service

moderation_router = APIRouter(
    prefix="/moderation",
    tags=["moderation"],
    responses={404: {"description": "Not found"}}
)


@moderation_router.post("/reports", response_model=ContentReportResponse, status_code=201)
async def report_content(
        report_data: ContentReportCreate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Жалоба на пост, сообщение, профиль или комментарий"""
    return await moderation_service.report_content(db, current_user, report_data)


@moderation_router.get("/reports/pending", response_model=List[ContentReportResponse])
async def get_pending_reports(
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=200),
        current_user: models.Profile = Depends(admin_permission),
        db: AsyncSession = Depends(get_db)
):
    return await moderation_service.get_pending(db, skip, limit)


@moderation_router.get("/reports/reviewed", response_model=List[ContentReportResponse])
async def get_reviewed_reports(
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=200),
        current_user: models.Profile = Depends(admin_permission),
        db: AsyncSession = Depends(get_db)
):
    return await moderation_service.get_reviewed(db, skip, limit)


@moderation_router.post("/reports/{report_id}/review", response_model=ContentReportResponse)
async def review_report(
        report_id: int,
        review: ReviewRequest,
        current_user: models.Profile = Depends(admin_permission),
        db: AsyncSession = Depends(get_db)
):
    return await moderation_service.review_report(db, current_user, report_id, review)
