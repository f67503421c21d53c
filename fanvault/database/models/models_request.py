# fanvault/database/models/models_request.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, JSON

from .base import Base


class CustomRequest(Base):
    """Заказ фаната на индивидуальный контент"""
    __tablename__ = "custom_requests"

    id = Column(Integer, primary_key=True, index=True)
    fan_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    content_type = Column(String, default="photo")  # photo, video, both
    special_instructions = Column(Text, nullable=True)
    is_anonymous = Column(Boolean, default=False)

    price = Column(Integer, nullable=False)  # в центах
    deadline = Column(DateTime, nullable=False)

    # pending, accepted, in_progress, completed, declined, expired
    status = Column(String, default="pending", index=True)
    # pending, paid, refunded
    payment_status = Column(String, default="pending")
    payment_intent_id = Column(String, nullable=True, index=True)

    delivered_content = Column(JSON, nullable=True)
    rating = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
    completed_at = Column(DateTime, nullable=True)
