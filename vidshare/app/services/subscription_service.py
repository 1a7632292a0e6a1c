"""
Channel subscriptions.
"""
import logging
import uuid
from typing import Any, Dict, Optional

from ..exceptions import InvalidOperation
from ..models import Subscription, User
from .base_service import BaseService
from .pagination import Page, paginate
from .toggle_service import ToggleService
from .view_pipeline import Lookup, ViewPipeline

logger = logging.getLogger(__name__)

SUBSCRIPTION_FIELDS = [("created_at", "subscribed_at")]


def subscription_to_dict(subscription: Optional[Subscription]) -> Optional[Dict[str, Any]]:
    if subscription is None:
        return None
    return {
        "id": subscription.id,
        "subscriber": subscription.subscriber_id,
        "channel": subscription.channel_id,
        "created_at": subscription.created_at,
    }


class SubscriptionService(BaseService):
    """Service for subscribing to channels and listing subscription graphs."""

    async def toggle_subscription(self, actor_id: uuid.UUID, channel_id: uuid.UUID) -> Dict[str, Any]:
        if actor_id == channel_id:
            raise InvalidOperation("You cannot subscribe to your own channel")
        await self.get_or_404(User, channel_id, "channel")

        result = await ToggleService(self.db).toggle(
            Subscription, subscriber_id=actor_id, channel_id=channel_id
        )
        logger.info(f"User {actor_id} {result.state.value} subscription to {channel_id}")
        return {
            "subscription": subscription_to_dict(result.record),
            "is_subscribed": result.added,
            "message": "Subscribed successfully" if result.added else "Unsubscribed successfully",
        }

    async def get_channel_subscribers(self, channel_id: uuid.UUID, page: Any = None, limit: Any = None) -> Page:
        """Users subscribed to ``channel_id``, newest first."""
        await self.get_or_404(User, channel_id, "channel")
        pipeline = (
            ViewPipeline(Subscription, SUBSCRIPTION_FIELDS)
            .where(Subscription.channel_id == channel_id)
            .lookup(Lookup("subscriber", User, "subscriber_id", required=True))
        )
        return await paginate(self.db, pipeline, page, limit)

    async def get_subscribed_channels(self, subscriber_id: uuid.UUID, page: Any = None, limit: Any = None) -> Page:
        """Channels ``subscriber_id`` follows, newest first."""
        await self.get_or_404(User, subscriber_id, "user")
        pipeline = (
            ViewPipeline(Subscription, SUBSCRIPTION_FIELDS)
            .where(Subscription.subscriber_id == subscriber_id)
            .lookup(Lookup("channel", User, "channel_id", required=True))
        )
        return await paginate(self.db, pipeline, page, limit)
