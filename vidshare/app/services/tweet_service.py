"""
Short text posts ("tweets") on a user's channel.
"""
import uuid
from typing import Any, Dict

from sqlalchemy import delete, func, select

from ..models import Like, LikeTargetType, Tweet, User
from .base_service import BaseService
from .ownership import ensure_can_mutate
from .pagination import Page, paginate
from .view_pipeline import ViewPipeline, public_profile
from .video_service import owner_lookup

TWEET_FIELDS = ("id", "content", "created_at", "updated_at")


def tweet_to_dict(tweet: Tweet, owner: User) -> Dict[str, Any]:
    document = {name: getattr(tweet, name) for name in TWEET_FIELDS}
    document["owner"] = public_profile(owner)
    return document


class TweetService(BaseService):

    async def create_tweet(self, actor_id: uuid.UUID, content: str) -> Dict[str, Any]:
        tweet = await self.save(Tweet(owner_id=actor_id, content=content))
        return tweet_to_dict(tweet, await self.db.get(User, actor_id))

    async def get_user_tweets(self, user_id: uuid.UUID, page: Any = None, limit: Any = None) -> Page:
        await self.get_or_404(User, user_id, "user")
        likes_count = (
            select(func.count(Like.id))
            .where(Like.target_type == LikeTargetType.tweet, Like.target_id == Tweet.id)
            .scalar_subquery()
        )
        pipeline = (
            ViewPipeline(Tweet, TWEET_FIELDS, sortable=("created_at", "updated_at"))
            .where(Tweet.owner_id == user_id)
            .lookup(owner_lookup())
            .add_field("likes_count", likes_count, int)
        )
        return await paginate(self.db, pipeline, page, limit)

    async def update_tweet(self, actor_id: uuid.UUID, tweet_id: uuid.UUID, content: str) -> Dict[str, Any]:
        tweet = ensure_can_mutate(actor_id, await self.db.get(Tweet, tweet_id), "tweet", "update")
        tweet.content = content
        await self.save(tweet)
        return tweet_to_dict(tweet, await self.db.get(User, actor_id))

    async def delete_tweet(self, actor_id: uuid.UUID, tweet_id: uuid.UUID) -> None:
        tweet = ensure_can_mutate(actor_id, await self.db.get(Tweet, tweet_id), "tweet", "delete")
        await self.db.execute(
            delete(Like).where(Like.target_type == LikeTargetType.tweet, Like.target_id == tweet_id)
        )
        await self.db.delete(tweet)
        await self.db.commit()
