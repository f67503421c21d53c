# fanvault/database/models/models_payment.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON, ForeignKey

from .base import Base


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Integer, nullable=False)  # в центах
    duration_months = Column(Integer, default=1)
    features = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.now)


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    subscriber_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    plan_id = Column(Integer, ForeignKey("subscription_plans.id", ondelete="SET NULL"), nullable=True)
    tier = Column(String, default="monthly")  # monthly, quarterly, yearly
    status = Column(String, default="active")  # active, cancelled, expired
    start_date = Column(DateTime, default=datetime.now)
    end_date = Column(DateTime, nullable=True)
    amount_paid = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Tip(Base):
    __tablename__ = "tips"

    id = Column(Integer, primary_key=True, index=True)
    tipper_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    amount = Column(Integer, nullable=False)
    message = Column(Text, nullable=True)
    live_stream_id = Column(Integer, ForeignKey("live_streams.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.now)


class PPVPurchase(Base):
    __tablename__ = "ppv_purchases"

    id = Column(Integer, primary_key=True, index=True)
    buyer_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    seller_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=True)
    message_id = Column(Integer, ForeignKey("messages.id", ondelete="CASCADE"), nullable=True)
    amount = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.now)


class PaymentIntent(Base):
    __tablename__ = "payment_intents"

    id = Column(Integer, primary_key=True, index=True)
    provider_intent_id = Column(String, unique=True, index=True)  # pi_... от Stripe или симуляции
    client_secret = Column(String, nullable=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    payment_type = Column(String, nullable=False)  # subscription, tip, ppv, live_stream, platform_fee, custom_request
    amount = Column(Integer, nullable=False)
    platform_fee = Column(Integer, default=0)
    currency = Column(String, default="usd")
    status = Column(String, default="pending")  # pending, succeeded, failed, canceled, refunded
    content_id = Column(Integer, nullable=True)
    content_kind = Column(String, nullable=True)  # post, message
    subscription_tier = Column(String, nullable=True)
    tip_message = Column(Text, nullable=True)
    meta_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    completed_at = Column(DateTime, nullable=True)


class RevenueRecord(Base):
    __tablename__ = "revenue_records"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    buyer_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    source_type = Column(String, nullable=False)  # subscription, tip, ppv, live_stream
    source_id = Column(Integer, nullable=True)
    amount = Column(Integer, nullable=False)
    platform_fee = Column(Integer, default=0)
    net_amount = Column(Integer, nullable=False)
    currency = Column(String, default="usd")
    processed_at = Column(DateTime, default=datetime.now)
    created_at = Column(DateTime, default=datetime.now)


class Payout(Base):
    __tablename__ = "payouts"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    amount = Column(Integer, nullable=False)
    status = Column(String, default="pending")  # pending, processing, completed, failed
    payout_method = Column(String, default="stripe")
    payout_details = Column(JSON, nullable=True)
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
