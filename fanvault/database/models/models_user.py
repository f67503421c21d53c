# fanvault/database/models/models_user.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON, ForeignKey, UniqueConstraint

from .base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    username = Column(String(30), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    display_name = Column(String(100))
    bio = Column(Text, nullable=True)
    avatar_url = Column(String, nullable=True)
    cover_url = Column(String, nullable=True)
    location = Column(String(100), nullable=True)
    website_url = Column(String(200), nullable=True)
    twitter_handle = Column(String(50), nullable=True)
    instagram_handle = Column(String(50), nullable=True)

    is_creator = Column(Boolean, default=False)
    is_verified = Column(Boolean, default=False)
    verification_status = Column(String, default="unverified")  # unverified, pending, verified, rejected
    is_admin = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    age_verified = Column(Boolean, default=False)
    terms_accepted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class CreatorProfile(Base):
    __tablename__ = "creator_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False)
    subscription_price = Column(Integer, default=999)  # в центах
    total_earnings = Column(Integer, default=0)
    total_subscribers = Column(Integer, default=0)
    total_posts = Column(Integer, default=0)
    content_categories = Column(JSON, default=list)
    payout_email = Column(String, nullable=True)

    # Ежемесячная плата платформе
    platform_fee_paid_until = Column(DateTime, nullable=True)
    is_platform_fee_active = Column(Boolean, default=False)

    # Stripe Connect
    stripe_account_id = Column(String, nullable=True)
    stripe_account_status = Column(String, default="pending")
    stripe_onboarding_complete = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Follow(Base):
    __tablename__ = "follows"
    __table_args__ = (UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),)

    id = Column(Integer, primary_key=True, index=True)
    follower_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    following_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    created_at = Column(DateTime, default=datetime.now)
