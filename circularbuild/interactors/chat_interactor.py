# circularbuild/interactors/chat_interactor.py
from typing import List, Optional

from circularbuild.domain.entities import ListingStatus
from circularbuild.domain.errors import AuthorizationError, NotFoundError, ValidationError
from circularbuild.domain.listing_rules import utc_now
from circularbuild.gateways.chat_gateway import ChatGateway
from circularbuild.gateways.listing_gateway import ListingGateway
from circularbuild.gateways.message_gateway import MessageGateway
from circularbuild.gateways.profile_gateway import ProfileGateway
from circularbuild.infrastructure import schemas
from circularbuild.infrastructure.uow import UnitOfWork, UoWModel


async def require_participant(chat_gateway: ChatGateway, chat_id: int, user_id: str) -> UoWModel:
    chat = await chat_gateway.get_chat(chat_id)
    if chat is None:
        raise NotFoundError("Chat not found.")
    if user_id not in (chat.buyer_id, chat.seller_id):
        raise AuthorizationError("Access denied.")
    return chat


class ChatInteractor:
    def __init__(
        self,
        uow: UnitOfWork,
        chat_gateway: ChatGateway,
        listing_gateway: ListingGateway,
        profile_gateway: ProfileGateway,
        message_gateway: MessageGateway,
    ):
        self.uow = uow
        self.chat_gateway = chat_gateway
        self.listing_gateway = listing_gateway
        self.profile_gateway = profile_gateway
        self.message_gateway = message_gateway

    async def start_chat(self, listing_id: int, buyer_id: str) -> schemas.ChatStartResult:
        listing = await self.listing_gateway.get_listing(listing_id)
        if listing is None:
            raise NotFoundError("Listing not found.")
        seller_id = listing.owner_id
        if seller_id == buyer_id:
            raise ValidationError("You cannot start a chat with your own listing.")

        chat = await self.chat_gateway.find_chat(listing_id, buyer_id, seller_id)
        if chat is None:
            chat = await self.chat_gateway.create_chat(
                listing_id,
                buyer_id,
                seller_id,
                is_active=listing.status == ListingStatus.ACTIVE.value,
            )

        # existing read-state rows are left as they are
        await self.chat_gateway.add_participant(
            chat.id, buyer_id, has_unread=False, last_read_at=utc_now()
        )
        await self.chat_gateway.add_participant(
            chat.id, seller_id, has_unread=False, last_read_at=None
        )

        return schemas.ChatStartResult(chat_id=chat.id)

    async def mark_read(self, chat_id: int, user_id: str) -> schemas.Participant:
        await require_participant(self.chat_gateway, chat_id, user_id)
        await self.chat_gateway.add_participant(chat_id, user_id)
        participant = await self.chat_gateway.get_participant(chat_id, user_id)
        participant.has_unread = False
        participant.last_read_at = utc_now()
        await self.uow.commit()
        return schemas.Participant.model_validate(participant)

    async def list_chats_for_user(self, user_id: str) -> List[schemas.ChatListItem]:
        chats = await self.chat_gateway.get_chats_for_user(user_id)
        chat_ids = [chat.id for chat in chats]

        listings = await self.listing_gateway.get_listings([chat.listing_id for chat in chats])
        counterpart_ids = [
            chat.seller_id if chat.buyer_id == user_id else chat.buyer_id for chat in chats
        ]
        profiles = await self.profile_gateway.get_profiles(counterpart_ids)
        unread = await self.chat_gateway.get_unread_flags(user_id, chat_ids)
        last_message_at = await self.chat_gateway.get_latest_message_times(chat_ids)

        items = []
        for chat, counterpart_id in zip(chats, counterpart_ids):
            item = schemas.ChatListItem.model_validate(chat)
            listing = listings.get(chat.listing_id)
            profile = profiles.get(counterpart_id)
            item.listing = schemas.ListingSummary.model_validate(listing) if listing else None
            item.counterpart = (
                schemas.ProfileBasic.model_validate(profile)
                if profile
                else schemas.ProfileBasic(id=counterpart_id)
            )
            item.has_unread = unread.get(chat.id, False)
            item.last_message_at = last_message_at.get(chat.id)
            items.append(item)
        return items

    async def get_chat_detail(self, chat_id: int, user_id: str) -> schemas.ChatDetail:
        chat = await require_participant(self.chat_gateway, chat_id, user_id)

        listing = await self.listing_gateway.get_listing(chat.listing_id)
        participants = await self.chat_gateway.get_participants(chat_id)
        profiles = await self.profile_gateway.get_profiles([chat.buyer_id, chat.seller_id])
        messages = await self.message_gateway.get_messages(chat_id)

        return schemas.ChatDetail(
            chat=schemas.Chat.model_validate(chat),
            listing=schemas.ListingSummary.model_validate(listing) if listing else None,
            participants=[schemas.Participant.model_validate(p) for p in participants],
            buyer=self._basic_profile(profiles.get(chat.buyer_id), chat.buyer_id),
            seller=self._basic_profile(profiles.get(chat.seller_id), chat.seller_id),
            messages=[schemas.Message.model_validate(m) for m in messages],
        )

    @staticmethod
    def _basic_profile(profile, user_id: str) -> schemas.ProfileBasic:
        if profile is None:
            return schemas.ProfileBasic(id=user_id)
        return schemas.ProfileBasic.model_validate(profile)

    async def has_unread_chats(self, user_id: str) -> bool:
        return await self.chat_gateway.has_unread(user_id)

    async def get_chat(self, chat_id: int, user_id: str) -> Optional[schemas.Chat]:
        chat = await require_participant(self.chat_gateway, chat_id, user_id)
        return schemas.Chat.model_validate(chat)
