# fanvault/database/models/models_message.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey

from .base import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    recipient_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    content = Column(Text, nullable=True)
    message_type = Column(String, default="text")  # text, image, video, file
    media_url = Column(String, nullable=True)
    is_ppv = Column(Boolean, default=False)
    ppv_price = Column(Integer, nullable=True)  # в центах
    is_read = Column(Boolean, default=False)
    is_mass_message = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.now)


class WelcomeMessage(Base):
    __tablename__ = "welcome_messages"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    content = Column(Text, nullable=False)
    media_url = Column(String, nullable=True)
    message_type = Column(String, default="text")
    is_ppv = Column(Boolean, default=False)
    ppv_price = Column(Integer, nullable=True)
    delay_hours = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    sequence_order = Column(Integer, default=1)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
