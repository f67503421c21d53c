# fanvault/schemas/payment.py
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PaymentType(str, Enum):
    SUBSCRIPTION = "subscription"
    TIP = "tip"
    PPV = "ppv"
    LIVE_STREAM = "live_stream"
    PLATFORM_FEE = "platform_fee"
    CUSTOM_REQUEST = "custom_request"


class SubscriptionTier(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"
    REFUNDED = "refunded"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ContentKind(str, Enum):
    POST = "post"
    MESSAGE = "message"


# Платежные намерения
class PaymentIntentCreate(BaseModel):
    """Запрос на создание платежа"""
    payment_type: PaymentType
    amount: int = 0  # учитывается только для чаевых и стримов, остальное считает сервер
    creator_id: int
    content_id: Optional[int] = None
    content_kind: Optional[ContentKind] = None
    subscription_tier: Optional[SubscriptionTier] = None
    plan_id: Optional[int] = None
    tip_message: Optional[str] = Field(None, max_length=500)
    live_stream_id: Optional[int] = None


class PaymentIntentResponse(BaseModel):
    client_secret: str
    payment_intent_id: str
    amount: int
    platform_fee: int
    currency: str
    payment_type: PaymentType
    simulated: bool


class PaymentConfirm(BaseModel):
    payment_intent_id: str


class PaymentResult(BaseModel):
    status: str
    payment_intent_id: str
    payment_type: PaymentType
    result: Dict[str, Any] = {}


class PaymentStatusResponse(BaseModel):
    payment_intent_id: str
    status: str
    amount: int
    payment_type: str
    created_at: datetime
    completed_at: Optional[datetime] = None


class WebhookResponse(BaseModel):
    status: str
    event_type: Optional[str] = None
    payment_intent: Optional[str] = None


class ConnectOnboardingResponse(BaseModel):
    account_id: str
    onboarding_url: str
    simulated: bool


# Подписки
class SubscriptionPlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    price: int = Field(..., ge=100, le=1_000_000)
    duration_months: int = Field(1, ge=1, le=12)
    features: List[str] = []


class SubscriptionPlanResponse(BaseModel):
    id: int
    creator_id: int
    name: str
    description: Optional[str] = None
    price: int
    duration_months: int
    features: Optional[List[str]] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class SubscribeRequest(BaseModel):
    creator_id: int
    tier: SubscriptionTier = SubscriptionTier.MONTHLY
    plan_id: Optional[int] = None


class SubscriptionResponse(BaseModel):
    id: int
    subscriber_id: int
    creator_id: int
    plan_id: Optional[int] = None
    tier: str
    status: str
    start_date: datetime
    end_date: Optional[datetime] = None
    amount_paid: int

    model_config = ConfigDict(from_attributes=True)


class SubscriptionStatusResponse(BaseModel):
    creator_id: int
    is_subscribed: bool
    subscription: Optional[SubscriptionResponse] = None


# Чаевые и PPV
class TipCreate(BaseModel):
    creator_id: int
    amount: int = Field(..., gt=0)
    message: Optional[str] = Field(None, max_length=500)
    live_stream_id: Optional[int] = None


class TipResponse(BaseModel):
    id: int
    tipper_id: int
    creator_id: int
    amount: int
    message: Optional[str] = None
    live_stream_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PPVUnlockRequest(BaseModel):
    content_kind: ContentKind
    content_id: int


class PPVPurchaseResponse(BaseModel):
    id: int
    buyer_id: int
    seller_id: int
    post_id: Optional[int] = None
    message_id: Optional[int] = None
    amount: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Доход и выплаты
class RevenueRecordResponse(BaseModel):
    id: int
    creator_id: int
    buyer_id: Optional[int] = None
    source_type: str
    source_id: Optional[int] = None
    amount: int
    platform_fee: int
    net_amount: int
    currency: str
    processed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RevenueSummary(BaseModel):
    total_revenue: int
    total_fees: int
    revenue_by_source: Dict[str, int]
    records: List[RevenueRecordResponse]


class PayoutCreate(BaseModel):
    amount: int = Field(..., gt=0)
    payout_method: str = "stripe"
    payout_details: Optional[Dict[str, Any]] = None

    @field_validator('payout_method')
    def check_method(cls, v):
        if v not in ("stripe", "bank_transfer", "paypal"):
            raise ValueError('Unsupported payout method')
        return v


class PayoutResponse(BaseModel):
    id: int
    creator_id: int
    amount: int
    status: str
    payout_method: str
    processed_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EarningsSummary(BaseModel):
    total_revenue: int
    total_fees: int
    paid_out: int
    available_balance: int
    revenue_by_source: Dict[str, int]
    payouts: List[PayoutResponse]


class PlatformFeeStatus(BaseModel):
    is_active: bool
    paid_until: Optional[datetime] = None
    is_expired: bool
    amount: int


class CheckoutResponse(BaseModel):
    """Результат оплаты: намерение и, если платеж завершен, результат выполнения"""
    payment: PaymentIntentResponse
    status: str
    result: Dict[str, Any] = {}
