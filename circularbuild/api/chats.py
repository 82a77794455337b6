# circularbuild/api/chats.py
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from circularbuild.api.dependencies import (
    get_chat_interactor,
    get_current_user,
    get_event_dispatcher,
    get_message_interactor,
)
from circularbuild.domain.entities import AuthUser
from circularbuild.domain.events import MessageCreated, UnreadStateUpdated
from circularbuild.infrastructure import schemas
from circularbuild.infrastructure.event_dispatcher import EventDispatcher
from circularbuild.interactors.chat_interactor import ChatInteractor
from circularbuild.interactors.message_interactor import MessageInteractor

router = APIRouter()


@router.post("/start", response_model=schemas.ChatStartResult)
async def start_chat(
    chat_start: schemas.ChatStart,
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await chat_interactor.start_chat(chat_start.listing_id, current_user.id)


@router.get("", response_model=List[schemas.ChatListItem])
async def read_chats(
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await chat_interactor.list_chats_for_user(current_user.id)


@router.get("/{chat_id}", response_model=schemas.ChatDetail)
async def read_chat(
    chat_id: int,
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await chat_interactor.get_chat_detail(chat_id, current_user.id)


@router.get("/{chat_id}/messages", response_model=List[schemas.Message])
async def read_messages(
    chat_id: int,
    after_id: Optional[int] = Query(None, description="Only messages newer than this id"),
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await message_interactor.get_messages(chat_id, current_user.id, after_id)


@router.post("/{chat_id}/messages", response_model=schemas.Message, status_code=201)
async def send_message(
    chat_id: int,
    message: schemas.MessageCreate,
    background_tasks: BackgroundTasks,
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    current_user: AuthUser = Depends(get_current_user),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    delivery = await message_interactor.send_message(chat_id, current_user.id, message.body)
    sent = delivery.message

    background_tasks.add_task(
        event_dispatcher.dispatch_all,
        [
            MessageCreated(
                message_id=sent.id,
                chat_id=sent.chat_id,
                sender_id=sent.sender_id,
                recipient_id=delivery.recipient_id,
                body=sent.body,
                created_at=sent.created_at,
                sender_name=delivery.sender_name or current_user.name,
                recipient_email=delivery.recipient_email,
                recipient_name=delivery.recipient_name,
                listing_title=delivery.listing_title,
            ),
            UnreadStateUpdated(
                chat_id=sent.chat_id, user_id=delivery.recipient_id, has_unread=True
            ),
        ],
    )
    return sent


@router.post("/{chat_id}/read", response_model=schemas.Participant)
async def mark_chat_read(
    chat_id: int,
    background_tasks: BackgroundTasks,
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    current_user: AuthUser = Depends(get_current_user),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    participant = await chat_interactor.mark_read(chat_id, current_user.id)
    background_tasks.add_task(
        event_dispatcher.dispatch,
        UnreadStateUpdated(chat_id=chat_id, user_id=current_user.id, has_unread=False),
    )
    return participant
