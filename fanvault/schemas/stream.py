# fanvault/schemas/stream.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LiveStreamCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    thumbnail_url: Optional[str] = None
    scheduled_start: Optional[datetime] = None


class LiveStreamResponse(BaseModel):
    """Публичная информация о стриме"""
    id: int
    creator_id: int
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_active: bool
    viewer_count: int
    max_viewers: int
    total_tips: int
    hls_url: Optional[str] = None
    scheduled_start: Optional[datetime] = None
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LiveStreamOwnerResponse(LiveStreamResponse):
    """Стрим с ключом трансляции (только для автора)"""
    stream_key: str
    rtmp_url: str


class LiveStreamJoinResponse(BaseModel):
    stream_id: int
    room: str
    token: str
    livekit_host: str
    role: str
    hls_url: Optional[str] = None
    viewer_count: int
