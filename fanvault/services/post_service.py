# fanvault/services/post_service.py
import logging
from typing import List, Optional, Iterable

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from fanvault.database import models
from fanvault.repository.comments_repository import comments_repository
from fanvault.repository.creator_repository import creator_repository
from fanvault.repository.follows_repository import follows_repository
from fanvault.repository.likes_repository import likes_repository
from fanvault.repository.posts_repository import posts_repository
from fanvault.repository.ppv_repository import ppv_repository
from fanvault.repository.subscriptions_repository import subscriptions_repository
from fanvault.schemas.content import (
    PostCreate, PostUpdate, PostResponse, CommentCreate, CommentResponse, LikeToggleResponse
)
from fanvault.services.analytics_service import analytics_service
from fanvault.services.notification_service import notification_service
from fanvault.utils.file_utils import save_uploaded_file

logger = logging.getLogger(__name__)


def can_view_post(post, viewer_id: Optional[int], is_subscribed: bool, is_purchased: bool) -> bool:
    """Правило доступа к содержимому поста"""
    if viewer_id is not None and post.creator_id == viewer_id:
        return True
    if post.is_ppv:
        return is_purchased
    if post.is_premium:
        return is_subscribed
    return True


def to_post_response(post, viewer_id: Optional[int], is_subscribed: bool, is_purchased: bool) -> PostResponse:
    """Пост для зрителя: закрытый пост отдается без медиа"""
    response = PostResponse.model_validate(post)
    response.is_purchased = is_purchased
    if not can_view_post(post, viewer_id, is_subscribed, is_purchased):
        response.media_urls = []
        response.is_locked = True
    return response


class PostService:

    async def _get_post(self, db: AsyncSession, post_id: int) -> models.Post:
        post = await posts_repository.get(db, post_id)
        if not post:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Пост не найден")
        return post

    async def _get_own_post(self, db: AsyncSession, post_id: int, user_id: int) -> models.Post:
        post = await self._get_post(db, post_id)
        if post.creator_id != user_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
        return post

    async def _get_visible_post(self, db: AsyncSession, post_id: int, viewer_id: Optional[int]) -> models.Post:
        post = await self._get_post(db, post_id)
        if not post.is_published and post.creator_id != viewer_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Пост не найден")
        return post

    async def present(
            self,
            db: AsyncSession,
            posts: Iterable[models.Post],
            viewer: Optional[models.Profile]
    ) -> List[PostResponse]:
        """Применение правила доступа к списку постов"""
        viewer_id = viewer.id if viewer else None
        subscribed_ids = set()
        purchased_ids = set()
        if viewer:
            subscribed_ids = set(await subscriptions_repository.get_subscribed_creator_ids(db, viewer.id))
            purchased_ids = set(await ppv_repository.get_purchased_post_ids(db, viewer.id))

        return [
            to_post_response(post, viewer_id, post.creator_id in subscribed_ids, post.id in purchased_ids)
            for post in posts
        ]

    # ==================== CRUD ====================

    async def create_post(self, db: AsyncSession, creator: models.Profile, post_data: PostCreate) -> PostResponse:
        post = await posts_repository.create(db, post_data, creator_id=creator.id)
        await creator_repository.change_posts(db, creator.id, 1)
        logger.info(f"📝 Автор {creator.id} создал пост {post.id}")
        return to_post_response(post, creator.id, False, False)

    async def update_post(
            self,
            db: AsyncSession,
            creator: models.Profile,
            post_id: int,
            post_data: PostUpdate
    ) -> PostResponse:
        post = await self._get_own_post(db, post_id, creator.id)
        changes = post_data.model_dump(exclude_unset=True)
        if changes.get("is_ppv", post.is_ppv) and not changes.get("ppv_price", post.ppv_price):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="PPV price is required")

        post = await posts_repository.update(db, post, post_data)
        return to_post_response(post, creator.id, False, False)

    async def publish_post(self, db: AsyncSession, creator: models.Profile, post_id: int) -> PostResponse:
        post = await self._get_own_post(db, post_id, creator.id)
        post = await posts_repository.update_fields(db, post, is_published=True)
        return to_post_response(post, creator.id, False, False)

    async def delete_post(self, db: AsyncSession, creator: models.Profile, post_id: int) -> dict:
        await self._get_own_post(db, post_id, creator.id)
        await posts_repository.delete(db, post_id)
        await creator_repository.change_posts(db, creator.id, -1)
        logger.info(f"🗑️ Пост {post_id} удален автором {creator.id}")
        return {"message": "Post deleted successfully"}

    async def upload_media(self, creator: models.Profile, file: UploadFile) -> dict:
        url = await save_uploaded_file(file, "posts", creator.id, subfolder="media")
        return {"url": url}

    # ==================== ЧТЕНИЕ ====================

    async def get_post(self, db: AsyncSession, post_id: int, viewer: Optional[models.Profile]) -> PostResponse:
        post = await self._get_visible_post(db, post_id, viewer.id if viewer else None)
        return (await self.present(db, [post], viewer))[0]

    async def get_creator_posts(
            self,
            db: AsyncSession,
            creator_id: int,
            viewer: Optional[models.Profile],
            skip: int = 0,
            limit: int = 50
    ) -> List[PostResponse]:
        own = viewer is not None and viewer.id == creator_id
        posts = await posts_repository.get_by_creator(db, creator_id, published_only=not own, skip=skip, limit=limit)
        return await self.present(db, posts, viewer)

    async def get_feed(
            self,
            db: AsyncSession,
            viewer: models.Profile,
            skip: int = 0,
            limit: int = 50
    ) -> List[PostResponse]:
        """Лента авторов, на которых пользователь подписан или платно подписан"""
        creator_ids = set(await follows_repository.get_following_ids(db, viewer.id))
        creator_ids.update(await subscriptions_repository.get_subscribed_creator_ids(db, viewer.id))
        posts = await posts_repository.get_feed(db, sorted(creator_ids), skip, limit)
        return await self.present(db, posts, viewer)

    # ==================== ВЗАИМОДЕЙСТВИЯ ====================

    async def track_view(self, db: AsyncSession, post_id: int, viewer: Optional[models.Profile]) -> dict:
        post = await self._get_visible_post(db, post_id, viewer.id if viewer else None)
        await posts_repository.increment_field(db, post.id, "view_count")
        await analytics_service.track_event(db, post.id, "post", "view", user_id=viewer.id if viewer else None)
        await db.refresh(post)
        return {"post_id": post.id, "view_count": post.view_count}

    async def toggle_like(self, db: AsyncSession, user: models.Profile, post_id: int) -> LikeToggleResponse:
        post = await self._get_visible_post(db, post_id, user.id)
        result = await likes_repository.toggle_like(db, user.id, post.id)

        await posts_repository.increment_field(db, post.id, "like_count", 1 if result["liked"] else -1)
        if result["liked"]:
            await analytics_service.track_event(db, post.id, "post", "like", user_id=user.id)
            await analytics_service.track_user_activity(db, user.id, "like", post.id, "post")
            if post.creator_id != user.id:
                await notification_service.notify_like(
                    db, post.creator_id, user.display_name or user.username, post.title or "Untitled"
                )

        return LikeToggleResponse(
            post_id=post_id,
            liked=result["liked"],
            like_count=await likes_repository.get_likes_count(db, post_id)
        )

    async def add_comment(
            self,
            db: AsyncSession,
            user: models.Profile,
            post_id: int,
            comment_data: CommentCreate
    ) -> CommentResponse:
        post = await self._get_visible_post(db, post_id, user.id)

        if comment_data.parent_id is not None:
            parent = await comments_repository.get(db, comment_data.parent_id)
            if not parent or parent.post_id != post.id:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Комментарий не найден")

        comment = await comments_repository.create(db, comment_data, post_id=post.id, user_id=user.id)
        await posts_repository.increment_field(db, post.id, "comment_count")
        await analytics_service.track_event(db, post.id, "post", "comment", user_id=user.id)

        if post.creator_id != user.id:
            await notification_service.notify_comment(
                db, post.creator_id, user.display_name or user.username, post.title or "Untitled", comment.content
            )
        return CommentResponse.model_validate(comment)

    async def get_comments(self, db: AsyncSession, post_id: int, skip: int = 0, limit: int = 100) -> List[CommentResponse]:
        await self._get_post(db, post_id)
        comments = await comments_repository.get_by_post(db, post_id, skip, limit)
        return [CommentResponse.model_validate(c) for c in comments]

    async def delete_comment(self, db: AsyncSession, user: models.Profile, comment_id: int) -> dict:
        comment = await comments_repository.get(db, comment_id)
        if not comment:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Комментарий не найден")

        post = await self._get_post(db, comment.post_id)
        if comment.user_id != user.id and post.creator_id != user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")

        await comments_repository.delete(db, comment_id)
        await posts_repository.increment_field(db, post.id, "comment_count", -1)
        return {"message": "Comment deleted successfully"}


post_service = PostService()
