"""
User accounts, credentials and channel profiles.
"""
import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import and_, exists, func, or_, select

from shared_lib.s3 import BlobStorage, UploadFailed
from shared_lib.security import (
    TokenError, create_access_token, create_refresh_token, decode_token,
    hash_password, verify_password,
)
from ..config import Settings, get_settings
from ..exceptions import NotFound, Unauthorized, UploadError, ValidationError
from ..models import Subscription, User, Video, WatchHistoryEntry
from .base_service import BaseService
from .pagination import Page, fetch_one, paginate
from .video_service import VIDEO_SUMMARY_FIELDS, owner_lookup
from .view_pipeline import Lookup, ViewPipeline

logger = logging.getLogger(__name__)

USER_FIELDS = ("id", "username", "email", "full_name", "avatar", "cover_image", "created_at", "updated_at")
CHANNEL_FIELDS = ("id", "username", "email", "full_name", "avatar", "cover_image", "created_at")


def user_to_dict(user: User) -> Dict[str, Any]:
    return {name: getattr(user, name) for name in USER_FIELDS}


class UserService(BaseService):
    """Service for accounts, sessions and channel profiles."""

    def __init__(self, db, settings: Optional[Settings] = None):
        super().__init__(db)
        self.settings = settings or get_settings()

    async def _upload(self, storage: BlobStorage, local_path: str, folder: str, label: str) -> str:
        try:
            result = await storage.upload(local_path, folder=folder)
        except UploadFailed as e:
            logger.error(f"{label} upload failed: {e}")
            raise UploadError(f"{label} upload failed. Please try again.")
        return result.url

    def _issue_tokens(self, user: User) -> Dict[str, str]:
        access_token = create_access_token(
            str(user.id),
            self.settings.ACCESS_TOKEN_SECRET,
            self.settings.ACCESS_TOKEN_EXPIRE_MINUTES,
            username=user.username,
            email=user.email,
        )
        refresh_token = create_refresh_token(
            str(user.id),
            self.settings.REFRESH_TOKEN_SECRET,
            self.settings.REFRESH_TOKEN_EXPIRE_DAYS,
        )
        user.refresh_token = refresh_token
        return {"access_token": access_token, "refresh_token": refresh_token}

    async def register(
        self,
        username: str,
        email: str,
        full_name: str,
        password: str,
        avatar_path: Optional[str],
        storage: BlobStorage,
        cover_image_path: Optional[str] = None
    ) -> Dict[str, Any]:
        username = username.lower()
        email = email.lower()
        existing = await self.db.execute(
            select(User.id).where(or_(User.username == username, User.email == email))
        )
        if existing.first() is not None:
            raise ValidationError("User already exists with this email or username")
        if not avatar_path:
            raise ValidationError("Avatar image is required")

        avatar = await self._upload(storage, avatar_path, "avatars", "Avatar")
        cover_image = ""
        if cover_image_path:
            cover_image = await self._upload(storage, cover_image_path, "covers", "Cover image")

        user = User(
            username=username,
            email=email,
            full_name=full_name,
            password_hash=hash_password(password, self.settings.BCRYPT_ROUNDS),
            avatar=avatar,
            cover_image=cover_image,
        )
        await self.save(user)
        logger.info(f"Registered user {user.id} ({username})")
        return user_to_dict(user)

    async def login(self, identifier: str, password: str) -> Dict[str, Any]:
        """Authenticate by username or email and issue a fresh token pair."""
        identifier = identifier.strip().lower()
        result = await self.db.execute(
            select(User).where(or_(User.username == identifier, User.email == identifier))
        )
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {identifier}")
            raise Unauthorized("Invalid credentials")

        tokens = self._issue_tokens(user)
        await self.save(user)
        return {"user": user_to_dict(user), **tokens}

    async def logout(self, actor_id: uuid.UUID) -> None:
        user = await self.db.get(User, actor_id)
        if user is not None:
            user.refresh_token = None
            await self.db.commit()

    async def refresh_access_token(self, token: Optional[str]) -> Dict[str, str]:
        """Exchange a valid refresh token for a new pair; the old one stops working."""
        if not token:
            raise Unauthorized("Unauthorized access - No token")
        try:
            payload = decode_token(token, self.settings.REFRESH_TOKEN_SECRET)
            user_id = uuid.UUID(payload["sub"])
        except (TokenError, ValueError):
            raise Unauthorized("Unauthorized access - Invalid token")

        user = await self.db.get(User, user_id)
        if user is None:
            raise Unauthorized("Unauthorized access - No user")
        if user.refresh_token != token:
            raise Unauthorized("Refresh token mismatch")

        tokens = self._issue_tokens(user)
        await self.db.commit()
        return tokens

    async def change_password(self, actor_id: uuid.UUID, old_password: str, new_password: str) -> None:
        user = await self.get_or_404(User, actor_id, "user")
        if not verify_password(old_password, user.password_hash):
            raise ValidationError("Old password is incorrect")
        user.password_hash = hash_password(new_password, self.settings.BCRYPT_ROUNDS)
        await self.db.commit()
        logger.info(f"User {actor_id} changed password")

    async def get_current_user(self, actor_id: uuid.UUID) -> Dict[str, Any]:
        return user_to_dict(await self.get_or_404(User, actor_id, "user"))

    async def update_account_details(
        self,
        actor_id: uuid.UUID,
        full_name: Optional[str] = None,
        email: Optional[str] = None
    ) -> Dict[str, Any]:
        if full_name is None and email is None:
            raise ValidationError("At least one field is required to update")
        user = await self.get_or_404(User, actor_id, "user")

        if email is not None:
            email = email.lower()
            taken = await self.db.execute(
                select(User.id).where(User.email == email, User.id != actor_id)
            )
            if taken.first() is not None:
                raise ValidationError("Email is already in use")
            user.email = email
        if full_name is not None:
            user.full_name = full_name

        await self.save(user)
        return user_to_dict(user)

    async def update_avatar(self, actor_id: uuid.UUID, avatar_path: Optional[str], storage: BlobStorage) -> Dict[str, Any]:
        if not avatar_path:
            raise ValidationError("Avatar image is required")
        user = await self.get_or_404(User, actor_id, "user")
        user.avatar = await self._upload(storage, avatar_path, "avatars", "Avatar")
        await self.save(user)
        return user_to_dict(user)

    async def update_cover_image(self, actor_id: uuid.UUID, cover_path: Optional[str], storage: BlobStorage) -> Dict[str, Any]:
        if not cover_path:
            raise ValidationError("Cover image is required")
        user = await self.get_or_404(User, actor_id, "user")
        user.cover_image = await self._upload(storage, cover_path, "covers", "Cover image")
        await self.save(user)
        return user_to_dict(user)

    async def get_channel_profile(self, username: str, viewer_id: Optional[uuid.UUID] = None) -> Dict[str, Any]:
        """Public channel profile with subscription counts for ``username``."""
        if not username or not username.strip():
            raise ValidationError("Username is required")

        subscribers_count = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == User.id)
            .scalar_subquery()
        )
        subscribed_to_count = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == User.id)
            .scalar_subquery()
        )
        pipeline = (
            ViewPipeline(User, CHANNEL_FIELDS)
            .where(User.username == username.strip().lower())
            .add_field("subscribers_count", subscribers_count, int)
            .add_field("subscribed_to_count", subscribed_to_count, int)
        )
        if viewer_id is not None:
            is_subscribed = exists().where(
                and_(Subscription.channel_id == User.id, Subscription.subscriber_id == viewer_id)
            )
            pipeline.add_field("is_subscribed", is_subscribed, bool)

        document = await fetch_one(self.db, pipeline)
        if document is None:
            raise NotFound("Channel not found")
        document.setdefault("is_subscribed", False)
        return document

    async def get_watch_history(self, actor_id: uuid.UUID, page: Any = None, limit: Any = None) -> Page:
        """Videos the actor has opened, most recent first."""
        pipeline = (
            ViewPipeline(WatchHistoryEntry, ("watched_at",), sortable=("watched_at",), default_sort="watched_at")
            .where(WatchHistoryEntry.user_id == actor_id)
            .lookup(Lookup(
                "video", Video, "video_id", VIDEO_SUMMARY_FIELDS,
                required=True, lookups=[owner_lookup()]
            ))
        )
        return await paginate(self.db, pipeline, page, limit)
