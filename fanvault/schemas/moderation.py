# fanvault/schemas/moderation.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fanvault.utils.validators import sanitize_input


class ReportContentType(str, Enum):
    POST = "post"
    MESSAGE = "message"
    COMMENT = "comment"
    PROFILE = "profile"


class ReviewDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class DocumentType(str, Enum):
    PASSPORT = "passport"
    DRIVERS_LICENSE = "drivers_license"
    NATIONAL_ID = "national_id"


class ContentReportCreate(BaseModel):
    content_type: ReportContentType
    reported_content_id: int
    reason: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)

    @field_validator('description')
    def clean_description(cls, v):
        return sanitize_input(v) if v is not None else v


class ContentReportResponse(BaseModel):
    id: int
    reporter_id: int
    content_type: str
    reported_content_id: int
    reason: str
    description: Optional[str] = None
    status: str
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewRequest(BaseModel):
    decision: ReviewDecision
    admin_notes: Optional[str] = Field(None, max_length=1000)


class AgeVerificationResponse(BaseModel):
    id: int
    user_id: int
    document_type: str
    document_front_url: str
    document_back_url: Optional[str] = None
    selfie_with_id_url: str
    selfie_with_note_url: Optional[str] = None
    status: str
    admin_notes: Optional[str] = None
    submission_date: datetime
    review_date: Optional[datetime] = None
    reviewed_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class VerificationStatusResponse(BaseModel):
    verification_status: str
    is_verified: bool
    document: Optional[AgeVerificationResponse] = None
