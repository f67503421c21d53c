# fanvault/schemas/message.py
from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fanvault.utils.validators import sanitize_input, validate_ppv_price


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    FILE = "file"


class MassAudience(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    NEW = "new"


class MessageCreate(BaseModel):
    recipient_id: int
    content: Optional[str] = Field(None, max_length=2000)
    message_type: MessageType = MessageType.TEXT
    media_url: Optional[str] = None
    is_ppv: bool = False
    ppv_price: Optional[int] = None

    @field_validator('content')
    def clean_content(cls, v):
        return sanitize_input(v) if v is not None else v

    @model_validator(mode='after')
    def check_message(self):
        if self.message_type == MessageType.TEXT and not self.content:
            raise ValueError('Message cannot be empty')
        if self.message_type != MessageType.TEXT and not self.media_url:
            raise ValueError('Media URL is required for media messages')
        validate_ppv_price(self.ppv_price, self.is_ppv)
        return self


class MessageResponse(BaseModel):
    id: int
    sender_id: int
    recipient_id: int
    content: Optional[str] = None
    message_type: str
    media_url: Optional[str] = None
    is_ppv: bool
    ppv_price: Optional[int] = None
    is_read: bool
    created_at: datetime
    is_locked: bool = False

    model_config = ConfigDict(from_attributes=True)


class ConversationSummary(BaseModel):
    """Последнее сообщение диалога и количество непрочитанных"""
    user_id: int
    username: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    last_message: MessageResponse
    unread_count: int


class MassMessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    audience: MassAudience = MassAudience.ALL
    media_url: Optional[str] = None
    message_type: MessageType = MessageType.TEXT
    is_ppv: bool = False
    ppv_price: Optional[int] = None

    @field_validator('content')
    def clean_content(cls, v):
        return sanitize_input(v)

    @model_validator(mode='after')
    def check_ppv(self):
        validate_ppv_price(self.ppv_price, self.is_ppv)
        return self


class MassMessageResult(BaseModel):
    recipients: int
    audience: MassAudience


class ReadReceipt(BaseModel):
    updated: int


# Приветственные сообщения
class WelcomeMessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    media_url: Optional[str] = None
    message_type: MessageType = MessageType.TEXT
    is_ppv: bool = False
    ppv_price: Optional[int] = None
    delay_hours: int = Field(0, ge=0, le=720)
    is_active: bool = True

    @model_validator(mode='after')
    def check_ppv(self):
        validate_ppv_price(self.ppv_price, self.is_ppv)
        return self


class WelcomeMessageUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=1, max_length=2000)
    media_url: Optional[str] = None
    message_type: Optional[MessageType] = None
    is_ppv: Optional[bool] = None
    ppv_price: Optional[int] = None
    delay_hours: Optional[int] = Field(None, ge=0, le=720)
    is_active: Optional[bool] = None


class WelcomeMessageResponse(BaseModel):
    id: int
    creator_id: int
    content: str
    media_url: Optional[str] = None
    message_type: str
    is_ppv: bool
    ppv_price: Optional[int] = None
    delay_hours: int
    is_active: bool
    sequence_order: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WelcomeMessageReorder(BaseModel):
    message_ids: List[int] = Field(..., min_length=1)
