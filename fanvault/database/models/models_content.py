# fanvault/database/models/models_content.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON, ForeignKey, UniqueConstraint

from .base import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    title = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    content_type = Column(String, default="text")  # text, image, video
    media_urls = Column(JSON, default=list)
    thumbnail_url = Column(String, nullable=True)

    is_premium = Column(Boolean, default=False)
    is_ppv = Column(Boolean, default=False)
    ppv_price = Column(Integer, nullable=True)  # в центах
    is_published = Column(Boolean, default=True)

    # Статистика
    like_count = Column(Integer, default=0)
    comment_count = Column(Integer, default=0)
    view_count = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class PostLike(Base):
    __tablename__ = "post_likes"
    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_post_like"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"))
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), index=True)
    created_at = Column(DateTime, default=datetime.now)


class PostComment(Base):
    __tablename__ = "post_comments"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"))
    content = Column(Text, nullable=False)
    parent_id = Column(Integer, ForeignKey("post_comments.id", ondelete="CASCADE"), nullable=True)  # Для вложенных комментариев
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class ContentCollection(Base):
    __tablename__ = "content_collections"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    is_public = Column(Boolean, default=True)
    price = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class CollectionPost(Base):
    __tablename__ = "collection_posts"
    __table_args__ = (UniqueConstraint("collection_id", "post_id", name="uq_collection_post"),)

    id = Column(Integer, primary_key=True, index=True)
    collection_id = Column(Integer, ForeignKey("content_collections.id", ondelete="CASCADE"), index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"))
    order_index = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.now)
