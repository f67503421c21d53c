# fanvault/schemas/content.py
from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fanvault.utils.validators import sanitize_input, validate_ppv_price


class ContentType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"


class PostBase(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    content_type: ContentType = ContentType.TEXT
    media_urls: List[str] = []
    thumbnail_url: Optional[str] = None
    is_premium: bool = False
    is_ppv: bool = False
    ppv_price: Optional[int] = None

    @field_validator('title', 'description')
    def clean_text(cls, v):
        return sanitize_input(v) if v is not None else v


class PostCreate(PostBase):
    is_published: bool = True

    @model_validator(mode='after')
    def check_ppv(self):
        validate_ppv_price(self.ppv_price, self.is_ppv)
        return self


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    media_urls: Optional[List[str]] = None
    thumbnail_url: Optional[str] = None
    is_premium: Optional[bool] = None
    is_ppv: Optional[bool] = None
    ppv_price: Optional[int] = None
    is_published: Optional[bool] = None

    @field_validator('title', 'description')
    def clean_text(cls, v):
        return sanitize_input(v) if v is not None else v

    @field_validator('ppv_price')
    def check_price(cls, v):
        return validate_ppv_price(v, False)


class PostResponse(PostBase):
    id: int
    creator_id: int
    is_published: bool
    like_count: int
    comment_count: int
    view_count: int
    created_at: datetime
    updated_at: datetime
    is_locked: bool = False
    is_purchased: bool = False

    model_config = ConfigDict(from_attributes=True)


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    parent_id: Optional[int] = None

    @field_validator('content')
    def clean_content(cls, v):
        v = sanitize_input(v)
        if not v:
            raise ValueError('Comment cannot be empty')
        return v


class CommentResponse(BaseModel):
    id: int
    post_id: int
    user_id: int
    content: str
    parent_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LikeToggleResponse(BaseModel):
    post_id: int
    liked: bool
    like_count: int


# Коллекции
class CollectionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    thumbnail_url: Optional[str] = None
    is_public: bool = True
    price: Optional[int] = Field(None, ge=0, le=99999)


class CollectionResponse(BaseModel):
    id: int
    creator_id: int
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_public: bool
    price: Optional[int] = None
    created_at: datetime
    post_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class CollectionPostAdd(BaseModel):
    post_id: int
