# fanvault/database/models/models_moderation.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey

from .base import Base


class ContentReport(Base):
    __tablename__ = "content_reports"

    id = Column(Integer, primary_key=True, index=True)
    reporter_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    content_type = Column(String, nullable=False)  # post, message, comment, profile
    reported_content_id = Column(Integer, nullable=False)
    reason = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, default="pending")  # pending, approved, rejected
    reviewed_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.now)


class AgeVerificationDocument(Base):
    __tablename__ = "age_verification_documents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    document_type = Column(String, nullable=False)  # passport, drivers_license, national_id
    document_front_url = Column(String, nullable=False)
    document_back_url = Column(String, nullable=True)
    selfie_with_id_url = Column(String, nullable=False)
    selfie_with_note_url = Column(String, nullable=True)
    status = Column(String, default="pending")  # pending, approved, rejected
    admin_notes = Column(Text, nullable=True)
    submission_date = Column(DateTime, default=datetime.now)
    review_date = Column(DateTime, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
