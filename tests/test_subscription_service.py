import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.app.exceptions import InvalidOperation, NotFound
from vidshare.app.models import Subscription
from vidshare.app.services.subscription_service import SubscriptionService


async def _subscription_count(session: AsyncSession) -> int:
    result = await session.execute(select(func.count(Subscription.id)))
    return result.scalar_one()


class TestSubscriptionService:

    async def test_self_subscription_is_rejected_without_writing(self, db_session: AsyncSession, user):
        with pytest.raises(InvalidOperation) as exc_info:
            await SubscriptionService(db_session).toggle_subscription(user.id, user.id)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "You cannot subscribe to your own channel"
        assert await _subscription_count(db_session) == 0

    async def test_toggle_subscription(self, db_session: AsyncSession, user, other_user):
        service = SubscriptionService(db_session)

        result = await service.toggle_subscription(user.id, other_user.id)
        assert result["is_subscribed"] is True
        assert result["message"] == "Subscribed successfully"
        assert result["subscription"]["subscriber"] == user.id
        assert result["subscription"]["channel"] == other_user.id

        result = await service.toggle_subscription(user.id, other_user.id)
        assert result == {"subscription": None, "is_subscribed": False, "message": "Unsubscribed successfully"}
        assert await _subscription_count(db_session) == 0

    async def test_unknown_channel(self, db_session: AsyncSession, user):
        with pytest.raises(NotFound) as exc_info:
            await SubscriptionService(db_session).toggle_subscription(user.id, uuid.uuid4())
        assert exc_info.value.message == "Channel not found"

    async def test_subscriber_and_channel_lists(self, db_session: AsyncSession, user, other_user, make_user):
        carol = await make_user("carol")
        service = SubscriptionService(db_session)
        await service.toggle_subscription(user.id, other_user.id)
        await service.toggle_subscription(carol.id, other_user.id)
        await service.toggle_subscription(user.id, carol.id)

        subscribers = await service.get_channel_subscribers(other_user.id)
        assert subscribers.total_items == 2
        assert {item["subscriber"]["username"] for item in subscribers.items} == {"alice", "carol"}
        assert all("subscribed_at" in item for item in subscribers.items)

        channels = await service.get_subscribed_channels(user.id)
        assert channels.total_items == 2
        assert {item["channel"]["username"] for item in channels.items} == {"bob", "carol"}

    async def test_empty_lists_are_success(self, db_session: AsyncSession, user):
        page = await SubscriptionService(db_session).get_channel_subscribers(user.id)
        assert page.items == []
        assert page.total_pages == 0
