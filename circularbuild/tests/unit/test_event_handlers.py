# circularbuild/tests/unit/test_event_handlers.py
import json
from datetime import datetime
from unittest.mock import AsyncMock, Mock

import pytest

from circularbuild.domain.events import ChatsClosed, MessageCreated, UnreadStateUpdated
from circularbuild.infrastructure.event_handlers import EventHandlers


@pytest.fixture
def redis_client():
    client = Mock()
    client.publish = AsyncMock(return_value=1)
    return client


@pytest.fixture
def event_handlers(redis_client):
    return EventHandlers(redis_client)


@pytest.mark.asyncio
async def test_publish_message_created(event_handlers, redis_client):
    event = MessageCreated(
        message_id=7,
        chat_id=3,
        sender_id="buyer-1",
        recipient_id="seller-1",
        body="Can I pick up Friday?",
        created_at=datetime(2024, 5, 1, 12, 0, 0),
        recipient_email="seller@example.com",
    )

    await event_handlers.publish_message_created(event)

    redis_client.publish.assert_awaited_once()
    channel, payload = redis_client.publish.call_args[0]
    assert channel == "chat:3"
    assert json.loads(payload) == {
        "id": 7,
        "chat_id": 3,
        "sender_id": "buyer-1",
        "body": "Can I pick up Friday?",
        "created_at": "2024-05-01 12:00:00",
    }


@pytest.mark.asyncio
async def test_publish_chats_closed_hits_every_chat(event_handlers, redis_client):
    event = ChatsClosed(listing_id=5, listing_status="procured", chat_ids=[1, 2])

    await event_handlers.publish_chats_closed(event)

    assert redis_client.publish.await_count == 2
    calls = [call[0] for call in redis_client.publish.call_args_list]
    assert [channel for channel, _ in calls] == ["chat:1:status", "chat:2:status"]
    assert json.loads(calls[1][1]) == {
        "chat_id": 2,
        "listing_id": 5,
        "listing_status": "procured",
        "is_active": False,
    }


@pytest.mark.asyncio
async def test_publish_unread_state_updated(event_handlers, redis_client):
    event = UnreadStateUpdated(chat_id=4, user_id="seller-1", has_unread=True)

    await event_handlers.publish_unread_state_updated(event)

    channel, payload = redis_client.publish.call_args[0]
    assert channel == "user:seller-1:unread"
    assert json.loads(payload) == {"chat_id": 4, "user_id": "seller-1", "has_unread": True}
