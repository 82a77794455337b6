# circularbuild/interactors/message_interactor.py
from typing import List, Optional

from circularbuild.domain.errors import ClosedChatError, ValidationError
from circularbuild.gateways.chat_gateway import ChatGateway
from circularbuild.gateways.listing_gateway import ListingGateway
from circularbuild.gateways.message_gateway import MessageGateway
from circularbuild.gateways.profile_gateway import ProfileGateway
from circularbuild.infrastructure import schemas
from circularbuild.infrastructure.uow import UnitOfWork
from circularbuild.interactors.chat_interactor import require_participant


class MessageInteractor:
    def __init__(
        self,
        uow: UnitOfWork,
        message_gateway: MessageGateway,
        chat_gateway: ChatGateway,
        listing_gateway: ListingGateway,
        profile_gateway: ProfileGateway,
    ):
        self.uow = uow
        self.message_gateway = message_gateway
        self.chat_gateway = chat_gateway
        self.listing_gateway = listing_gateway
        self.profile_gateway = profile_gateway

    async def send_message(
        self, chat_id: int, sender_id: str, body: str
    ) -> schemas.MessageDelivery:
        text = (body or "").strip()
        if not text:
            raise ValidationError("Message body is required.")

        chat = await require_participant(self.chat_gateway, chat_id, sender_id)
        if not chat.is_active:
            raise ClosedChatError("This chat is closed; the listing is no longer active.")

        message = await self.message_gateway.create_message(chat_id, sender_id, text)

        recipient_id = chat.seller_id if sender_id == chat.buyer_id else chat.buyer_id
        await self.chat_gateway.add_participant(chat_id, recipient_id, has_unread=True)
        recipient = await self.chat_gateway.get_participant(chat_id, recipient_id)
        recipient.has_unread = True
        await self.uow.commit()

        profiles = await self.profile_gateway.get_profiles([sender_id, recipient_id])
        listing = await self.listing_gateway.get_listing(chat.listing_id)
        sender_profile = profiles.get(sender_id)
        recipient_profile = profiles.get(recipient_id)

        return schemas.MessageDelivery(
            message=schemas.Message.model_validate(message),
            recipient_id=recipient_id,
            recipient_email=recipient_profile.email if recipient_profile else None,
            recipient_name=recipient_profile.name if recipient_profile else None,
            sender_name=sender_profile.name if sender_profile else None,
            listing_title=listing.title if listing else None,
        )

    async def get_messages(
        self, chat_id: int, user_id: str, after_id: Optional[int] = None
    ) -> List[schemas.Message]:
        await require_participant(self.chat_gateway, chat_id, user_id)
        messages = await self.message_gateway.get_messages(chat_id, after_id)
        return [schemas.Message.model_validate(message) for message in messages]
