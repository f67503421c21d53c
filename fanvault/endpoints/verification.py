# fanvault/endpoints/verification.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import admin_permission
from fanvault.schemas.moderation import (
    AgeVerificationResponse, VerificationStatusResponse, ReviewRequest, DocumentType
)
from fanvault.security.auth import get_current_user
from fanvault.services.verification_service import verification_service

verification_router = APIRouter(
    prefix="/verification",
    tags=["verification"],
    responses={404: {"description": "Not found"}}
)


@verification_router.post("/submit", response_model=AgeVerificationResponse, status_code=201)
async def submit_documents(
        document_type: DocumentType = Form(...),
        document_front: UploadFile = File(...),
        selfie_with_id: UploadFile = File(...),
        document_back: Optional[UploadFile] = File(None),
        selfie_with_note: Optional[UploadFile] = File(None),
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """
    Отправка документов для проверки возраста
    """
    return await verification_service.submit_documents(
        db, current_user, document_type, document_front, selfie_with_id, document_back, selfie_with_note
    )


@verification_router.get("/status", response_model=VerificationStatusResponse)
async def get_verification_status(
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await verification_service.get_status(db, current_user)


@verification_router.get("/documents", response_model=List[AgeVerificationResponse])
async def list_documents(
        status_filter: Optional[str] = Query(None, alias="status", pattern="^(pending|approved|rejected)$"),
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=200),
        current_user: models.Profile = Depends(admin_permission),
        db: AsyncSession = Depends(get_db)
):
    return await verification_service.list_documents(db, status_filter, skip, limit)


@verification_router.post("/documents/{document_id}/review", response_model=AgeVerificationResponse)
async def review_document(
        document_id: int,
        review: ReviewRequest,
        current_user: models.Profile = Depends(admin_permission),
        db: AsyncSession = Depends(get_db)
):
    return await verification_service.review_document(db, current_user, document_id, review)
