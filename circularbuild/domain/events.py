# circularbuild/domain/events.py
from datetime import datetime

from pydantic import BaseModel


class Event(BaseModel):
    pass


class MessageCreated(Event):
    message_id: int
    chat_id: int
    sender_id: str
    recipient_id: str
    body: str
    created_at: datetime
    sender_name: str | None = None
    recipient_email: str | None = None
    recipient_name: str | None = None
    listing_title: str | None = None


class ChatsClosed(Event):
    listing_id: int
    listing_status: str
    chat_ids: list[int]


class UnreadStateUpdated(Event):
    chat_id: int
    user_id: str
    has_unread: bool
