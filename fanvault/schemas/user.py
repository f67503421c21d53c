# fanvault/schemas/user.py
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fanvault.schemas.payment import SubscriptionPlanResponse
from fanvault.utils.validators import (
    validate_display_name, validate_url, normalize_handle, sanitize_input
)


class ProfileBase(BaseModel):
    username: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    cover_url: Optional[str] = None
    location: Optional[str] = None
    website_url: Optional[str] = None
    twitter_handle: Optional[str] = None
    instagram_handle: Optional[str] = None


class ProfileResponse(ProfileBase):
    """Публичный профиль"""
    id: int
    is_creator: bool
    is_verified: bool
    verification_status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PrivateProfileResponse(ProfileResponse):
    """Профиль текущего пользователя"""
    email: str
    is_admin: bool
    is_active: bool


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=100)
    website_url: Optional[str] = None
    twitter_handle: Optional[str] = None
    instagram_handle: Optional[str] = None

    @field_validator('display_name')
    def check_display_name(cls, v):
        return validate_display_name(v) if v is not None else v

    @field_validator('bio', 'location')
    def clean_text(cls, v):
        return sanitize_input(v) if v is not None else v

    @field_validator('website_url')
    def check_website(cls, v):
        return validate_url(v)

    @field_validator('twitter_handle', 'instagram_handle')
    def check_handle(cls, v):
        return normalize_handle(v)


class CreatorProfileCreate(BaseModel):
    subscription_price: int = Field(999, ge=0, le=99999)
    content_categories: List[str] = []
    payout_email: Optional[str] = None


class CreatorProfileUpdate(BaseModel):
    subscription_price: Optional[int] = Field(None, ge=0, le=99999)
    content_categories: Optional[List[str]] = None
    payout_email: Optional[str] = None


class CreatorProfileResponse(BaseModel):
    id: int
    user_id: int
    subscription_price: int
    total_earnings: int
    total_subscribers: int
    total_posts: int
    content_categories: Optional[List[str]] = None
    is_platform_fee_active: bool
    platform_fee_paid_until: Optional[datetime] = None
    stripe_onboarding_complete: bool

    model_config = ConfigDict(from_attributes=True)


class CreatorPageResponse(BaseModel):
    """Страница автора: профиль, настройки автора и тарифы"""
    profile: ProfileResponse
    creator: CreatorProfileResponse
    plans: List[SubscriptionPlanResponse] = []
    is_subscribed: bool = False
    is_following: bool = False


class FollowResponse(BaseModel):
    following_id: int
    is_following: bool
