# fanvault/endpoints/posts.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.database.postgres import get_db
from fanvault.dependencies.rbac import active_creator_permission, creator_permission
from fanvault.schemas.content import (
    PostCreate, PostUpdate, PostResponse, CommentCreate, CommentResponse, LikeToggleResponse
)
from fanvault.security.auth import get_current_user, get_current_user_optional
from fanvault.services.post_service import post_service

posts_router = APIRouter(
    prefix="/posts",
    tags=["posts"],
    responses={404: {"description": "Not found"}}
)


@posts_router.post("", response_model=PostResponse, status_code=201)
async def create_post(
        post_data: PostCreate,
        current_user: models.Profile = Depends(active_creator_permission),
        db: AsyncSession = Depends(get_db)
):
    """Создание поста (только автор с оплаченной платой платформы)"""
    return await post_service.create_post(db, current_user, post_data)


@posts_router.post("/media")
async def upload_post_media(
        file: UploadFile = File(...),
        current_user: models.Profile = Depends(creator_permission)
):
    return await post_service.upload_media(current_user, file)


@posts_router.get("/feed", response_model=List[PostResponse])
async def get_feed(
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=100),
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Лента постов авторов, на которых подписан пользователь"""
    return await post_service.get_feed(db, current_user, skip, limit)


@posts_router.get("/creator/{creator_id}", response_model=List[PostResponse])
async def get_creator_posts(
        creator_id: int,
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=100),
        viewer: Optional[models.Profile] = Depends(get_current_user_optional),
        db: AsyncSession = Depends(get_db)
):
    return await post_service.get_creator_posts(db, creator_id, viewer, skip, limit)


@posts_router.delete("/comments/{comment_id}")
async def delete_comment(
        comment_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Удалить комментарий может автор комментария или автор поста"""
    return await post_service.delete_comment(db, current_user, comment_id)


@posts_router.get("/{post_id}", response_model=PostResponse)
async def get_post(
        post_id: int,
        viewer: Optional[models.Profile] = Depends(get_current_user_optional),
        db: AsyncSession = Depends(get_db)
):
    return await post_service.get_post(db, post_id, viewer)


@posts_router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
        post_id: int,
        post_data: PostUpdate,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await post_service.update_post(db, current_user, post_id, post_data)


@posts_router.post("/{post_id}/publish", response_model=PostResponse)
async def publish_post(
        post_id: int,
        current_user: models.Profile = Depends(active_creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await post_service.publish_post(db, current_user, post_id)


@posts_router.delete("/{post_id}")
async def delete_post(
        post_id: int,
        current_user: models.Profile = Depends(creator_permission),
        db: AsyncSession = Depends(get_db)
):
    return await post_service.delete_post(db, current_user, post_id)


# Взаимодействия
@posts_router.post("/{post_id}/view")
async def track_view(
        post_id: int,
        viewer: Optional[models.Profile] = Depends(get_current_user_optional),
        db: AsyncSession = Depends(get_db)
):
    return await post_service.track_view(db, post_id, viewer)


@posts_router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
        post_id: int,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Поставить или снять лайк"""
    return await post_service.toggle_like(db, current_user, post_id)


@posts_router.get("/{post_id}/comments", response_model=List[CommentResponse])
async def get_comments(
        post_id: int,
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=200),
        db: AsyncSession = Depends(get_db)
):
    return await post_service.get_comments(db, post_id, skip, limit)


@posts_router.post("/{post_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
        post_id: int,
        comment_data: CommentCreate,
        current_user: models.Profile = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    return await post_service.add_comment(db, current_user, post_id, comment_data)
