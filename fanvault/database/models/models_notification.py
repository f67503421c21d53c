# fanvault/database/models/models_notification.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON, ForeignKey

from .base import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    type = Column(String, nullable=False)  # tip, subscription, like, comment, live_stream, follow, payout, verification
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.now)


class UserActivity(Base):
    __tablename__ = "user_activity"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    activity_type = Column(String, nullable=False)
    target_id = Column(Integer, nullable=True)
    target_type = Column(String, nullable=True)
    meta_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.now)


class ContentAnalytics(Base):
    __tablename__ = "content_analytics"

    id = Column(Integer, primary_key=True, index=True)
    content_id = Column(Integer, nullable=False, index=True)
    content_type = Column(String, nullable=False)  # post, live_stream, message
    metric_type = Column(String, nullable=False)  # view, like, comment, share, tip
    value = Column(Integer, default=1)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.now)
