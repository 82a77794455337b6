# circularbuild/infrastructure/event_handlers.py
import json

from circularbuild.domain.events import ChatsClosed, MessageCreated, UnreadStateUpdated


class EventHandlers:
    """Publishes realtime notifications to Redis channels.

    ``chat:{id}`` carries new messages, ``chat:{id}:status`` carries closure
    of a chat and ``user:{id}:unread`` carries the unread flag of one
    participant.
    """

    def __init__(self, redis_client):
        self.redis_client = redis_client

    async def publish_message_created(self, event: MessageCreated):
        channel_name = f"chat:{event.chat_id}"
        message_data = {
            "id": event.message_id,
            "chat_id": event.chat_id,
            "sender_id": event.sender_id,
            "body": event.body,
            "created_at": event.created_at,
        }
        await self.redis_client.publish(
            channel_name, json.dumps(message_data, default=str)
        )

    async def publish_chats_closed(self, event: ChatsClosed):
        for chat_id in event.chat_ids:
            status_data = json.dumps(
                {
                    "chat_id": chat_id,
                    "listing_id": event.listing_id,
                    "listing_status": event.listing_status,
                    "is_active": False,
                }
            )
            await self.redis_client.publish(f"chat:{chat_id}:status", status_data)

    async def publish_unread_state_updated(self, event: UnreadStateUpdated):
        channel_name = f"user:{event.user_id}:unread"
        unread_data = json.dumps(
            {
                "chat_id": event.chat_id,
                "user_id": event.user_id,
                "has_unread": event.has_unread,
            }
        )
        await self.redis_client.publish(channel_name, unread_data)
