# fanvault/database/models/models_stream.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey

from .base import Base


class LiveStream(Base):
    __tablename__ = "live_streams"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    thumbnail_url = Column(String, nullable=True)

    is_active = Column(Boolean, default=False)
    viewer_count = Column(Integer, default=0)
    max_viewers = Column(Integer, default=0)
    total_tips = Column(Integer, default=0)

    stream_key = Column(String, unique=True, index=True)
    rtmp_url = Column(String)
    hls_url = Column(String)

    scheduled_start = Column(DateTime, nullable=True)
    actual_start = Column(DateTime, nullable=True)
    actual_end = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
