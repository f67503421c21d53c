# fanvault/schemas/request.py
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fanvault.schemas.payment import CheckoutResponse
from fanvault.utils.validators import sanitize_input

MIN_REQUEST_PRICE = 500  # $5.00
MAX_REQUEST_PRICE = 100_000  # $1000.00
MAX_DEADLINE_DAYS = 30


class RequestContentType(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"
    BOTH = "both"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DECLINED = "declined"
    EXPIRED = "expired"


class RequestPaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class CustomRequestCreate(BaseModel):
    creator_id: int
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    content_type: RequestContentType = RequestContentType.PHOTO
    price: int = Field(..., ge=MIN_REQUEST_PRICE, le=MAX_REQUEST_PRICE)
    deadline: datetime
    is_anonymous: bool = False
    special_instructions: Optional[str] = Field(None, max_length=300)

    @field_validator('title', 'description')
    def clean_text(cls, v):
        v = sanitize_input(v)
        if not v:
            raise ValueError('Field cannot be empty')
        return v

    @field_validator('special_instructions')
    def clean_instructions(cls, v):
        return sanitize_input(v) if v is not None else v

    @field_validator('deadline')
    def check_deadline(cls, v):
        now = datetime.now(v.tzinfo)
        if v <= now:
            raise ValueError('Deadline must be in the future')
        if v > now + timedelta(days=MAX_DEADLINE_DAYS):
            raise ValueError(f'Deadline must be within {MAX_DEADLINE_DAYS} days')
        # В базе время хранится без зоны
        return v.replace(tzinfo=None) if v.tzinfo else v


class CustomRequestResponse(BaseModel):
    id: int
    fan_id: Optional[int] = None
    creator_id: int
    title: str
    description: str
    content_type: str
    special_instructions: Optional[str] = None
    is_anonymous: bool
    price: int
    deadline: datetime
    status: str
    payment_status: str
    delivered_content: Optional[List[str]] = None
    rating: Optional[int] = None
    feedback: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    fan_username: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CustomRequestCheckout(BaseModel):
    """Созданный заказ и результат его оплаты"""
    request: CustomRequestResponse
    checkout: CheckoutResponse


class RequestDelivery(BaseModel):
    media_urls: List[str] = Field(..., min_length=1, max_length=10)
    note: Optional[str] = Field(None, max_length=500)

    @field_validator('note')
    def clean_note(cls, v):
        return sanitize_input(v) if v is not None else v


class RequestRating(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = Field(None, max_length=500)

    @field_validator('feedback')
    def clean_feedback(cls, v):
        return sanitize_input(v) if v is not None else v
