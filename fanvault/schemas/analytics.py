# fanvault/schemas/analytics.py
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, List, Any

from pydantic import BaseModel, ConfigDict


class AnalyticsContentType(str, Enum):
    POST = "post"
    LIVE_STREAM = "live_stream"
    MESSAGE = "message"


class MetricType(str, Enum):
    VIEW = "view"
    LIKE = "like"
    COMMENT = "comment"
    SHARE = "share"
    TIP = "tip"


class AnalyticsEventCreate(BaseModel):
    content_id: int
    content_type: AnalyticsContentType
    metric_type: MetricType
    value: int = 1


class ContentAnalyticsResponse(BaseModel):
    content_id: int
    content_type: str
    metrics: Dict[str, int]


class CreatorAnalytics(BaseModel):
    total_views: int
    total_likes: int
    total_revenue: int
    engagement_rate: float


class CreatorStats(BaseModel):
    total_earnings: int
    total_subscribers: int
    total_posts: int
    monthly_earnings: int
    recent_subscribers: int
    engagement: float


class ActivityItem(BaseModel):
    id: int
    activity_type: str
    target_id: Optional[int] = None
    target_type: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FavoriteCreator(BaseModel):
    id: int
    username: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class MonthlyPoint(BaseModel):
    month: str
    earnings: int


class TopPost(BaseModel):
    id: int
    title: Optional[str] = None
    view_count: int
    like_count: int
    comment_count: int


class CreatorDashboard(BaseModel):
    total_earnings: int
    monthly_earnings: int
    subscriber_count: int
    total_posts: int
    total_views: int
    engagement_rate: float
    monthly_data: List[MonthlyPoint]
    content_performance: Dict[str, Dict[str, int]]
    recent_earnings: List[Dict[str, Any]]
    top_posts: List[TopPost]


class UserDashboard(BaseModel):
    total_subscriptions: int
    total_spent: int
    recent_activity: List[ActivityItem]
    favorite_creators: List[FavoriteCreator]
    creator: Optional[CreatorDashboard] = None


class PlatformStats(BaseModel):
    total_users: int
    total_creators: int
    total_posts: int
    active_subscriptions: int
    pending_reports: int
    pending_verifications: int
    total_revenue: int
    total_platform_fees: int
