# fanvault/services/verification_service.py
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.repository.moderation_repository import verification_repository
from fanvault.repository.user_repository import profile_repository
from fanvault.schemas.moderation import (
    AgeVerificationResponse, VerificationStatusResponse, ReviewRequest, ReviewDecision, DocumentType
)
from fanvault.services.notification_service import notification_service
from fanvault.utils.file_utils import save_uploaded_file

logger = logging.getLogger(__name__)

BUCKET = "verification-docs"


class VerificationService:
    """Проверка возраста по документам"""

    async def submit_documents(
            self,
            db: AsyncSession,
            user: models.Profile,
            document_type: DocumentType,
            document_front: UploadFile,
            selfie_with_id: UploadFile,
            document_back: Optional[UploadFile] = None,
            selfie_with_note: Optional[UploadFile] = None
    ) -> AgeVerificationResponse:
        latest = await verification_repository.get_latest_for_user(db, user.id)
        if latest and latest.status in ("pending", "approved"):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Verification already pending" if latest.status == "pending" else "Already verified"
            )

        urls = {
            "document_front_url": await save_uploaded_file(document_front, BUCKET, user.id, "front"),
            "selfie_with_id_url": await save_uploaded_file(selfie_with_id, BUCKET, user.id, "selfie"),
            "document_back_url": None,
            "selfie_with_note_url": None,
        }
        if document_back is not None:
            urls["document_back_url"] = await save_uploaded_file(document_back, BUCKET, user.id, "back")
        if selfie_with_note is not None:
            urls["selfie_with_note_url"] = await save_uploaded_file(selfie_with_note, BUCKET, user.id, "note")

        document = await verification_repository.create_from_dict(db, {
            "user_id": user.id,
            "document_type": document_type.value,
            "status": "pending",
            "submission_date": datetime.now(),
            **urls,
        })
        await profile_repository.update_fields(db, user, verification_status="pending")

        logger.info(f"🪪 Пользователь {user.id} отправил документы на проверку ({document.id})")
        return AgeVerificationResponse.model_validate(document)

    async def get_status(self, db: AsyncSession, user: models.Profile) -> VerificationStatusResponse:
        document = await verification_repository.get_latest_for_user(db, user.id)
        return VerificationStatusResponse(
            verification_status=user.verification_status,
            is_verified=user.is_verified,
            document=AgeVerificationResponse.model_validate(document) if document else None
        )

    async def list_documents(
            self,
            db: AsyncSession,
            status_filter: Optional[str] = None,
            skip: int = 0,
            limit: int = 100
    ) -> List[AgeVerificationResponse]:
        documents = await verification_repository.get_by_status(db, status_filter, skip, limit)
        return [AgeVerificationResponse.model_validate(d) for d in documents]

    async def review_document(
            self,
            db: AsyncSession,
            admin: models.Profile,
            document_id: int,
            review: ReviewRequest
    ) -> AgeVerificationResponse:
        document = await verification_repository.get(db, document_id)
        if not document:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Документ не найден")
        if document.status != "pending":
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Document already reviewed")

        approved = review.decision == ReviewDecision.APPROVE
        document = await verification_repository.update_fields(
            db,
            document,
            status="approved" if approved else "rejected",
            admin_notes=review.admin_notes,
            review_date=datetime.now(),
            reviewed_by=admin.id
        )

        profile = await profile_repository.get(db, document.user_id)
        if profile:
            if approved:
                await profile_repository.update_fields(db, profile, verification_status="verified", is_verified=True)
            else:
                await profile_repository.update_fields(db, profile, verification_status="rejected")

        await notification_service.notify_verification(db, document.user_id, approved, review.admin_notes)

        logger.info(f"🪪 Документ {document.id} рассмотрен администратором {admin.id}: {document.status}")
        return AgeVerificationResponse.model_validate(document)


verification_service = VerificationService()
