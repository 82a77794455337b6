# circularbuild/gateways/chat_gateway.py
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from circularbuild.domain.entities import ListingStatus
from circularbuild.domain.listing_rules import utc_now
from circularbuild.gateways.interfaces import IChatGateway
from circularbuild.infrastructure import models
from circularbuild.infrastructure.data_mappers import ChatMapper, ChatParticipantMapper
from circularbuild.infrastructure.database import insert_or_ignore
from circularbuild.infrastructure.uow import UnitOfWork, UoWModel


class ChatGateway(IChatGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.Chat] = ChatMapper(session)
        uow.mappers[models.ChatParticipant] = ChatParticipantMapper(session)

    async def get_chat(self, chat_id: int) -> Optional[UoWModel]:
        stmt = select(models.Chat).filter(models.Chat.id == chat_id)
        result = await self.session.execute(stmt)
        chat = result.scalar_one_or_none()
        return UoWModel(chat, self.uow) if chat else None

    async def find_chat(self, listing_id: int, buyer_id: str, seller_id: str) -> Optional[UoWModel]:
        stmt = select(models.Chat).filter(
            models.Chat.listing_id == listing_id,
            models.Chat.buyer_id == buyer_id,
            models.Chat.seller_id == seller_id,
        )
        result = await self.session.execute(stmt)
        chat = result.scalar_one_or_none()
        return UoWModel(chat, self.uow) if chat else None

    async def create_chat(
        self, listing_id: int, buyer_id: str, seller_id: str, is_active: bool
    ) -> UoWModel:
        """Insert the chat for (listing, buyer), or return the one a concurrent request made."""
        stmt = insert_or_ignore(
            self.session,
            models.Chat,
            {
                "listing_id": listing_id,
                "buyer_id": buyer_id,
                "seller_id": seller_id,
                "is_active": is_active,
            },
            ("listing_id", "buyer_id"),
        )
        await self.session.execute(stmt)
        chat = await self.find_chat(listing_id, buyer_id, seller_id)
        if chat is None:
            raise LookupError(f"chat for listing {listing_id} and buyer {buyer_id} was not stored")
        return chat

    async def get_participant(self, chat_id: int, user_id: str) -> Optional[UoWModel]:
        stmt = select(models.ChatParticipant).filter(
            models.ChatParticipant.chat_id == chat_id,
            models.ChatParticipant.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        participant = result.scalar_one_or_none()
        return UoWModel(participant, self.uow) if participant else None

    async def get_participants(self, chat_id: int) -> List[models.ChatParticipant]:
        stmt = (
            select(models.ChatParticipant)
            .filter(models.ChatParticipant.chat_id == chat_id)
            .order_by(models.ChatParticipant.user_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add_participant(
        self,
        chat_id: int,
        user_id: str,
        has_unread: bool = False,
        last_read_at: Optional[datetime] = None,
    ) -> None:
        # an existing read-state row wins over the new one
        stmt = insert_or_ignore(
            self.session,
            models.ChatParticipant,
            {
                "chat_id": chat_id,
                "user_id": user_id,
                "has_unread": has_unread,
                "last_read_at": last_read_at,
            },
            ("chat_id", "user_id"),
        )
        await self.session.execute(stmt)

    async def get_chats_for_user(self, user_id: str) -> List[models.Chat]:
        stmt = (
            select(models.Chat)
            .filter(or_(models.Chat.buyer_id == user_id, models.Chat.seller_id == user_id))
            .order_by(models.Chat.created_at.desc(), models.Chat.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_unread_flags(self, user_id: str, chat_ids: Sequence[int]) -> Dict[int, bool]:
        if not chat_ids:
            return {}
        stmt = select(models.ChatParticipant.chat_id, models.ChatParticipant.has_unread).filter(
            models.ChatParticipant.user_id == user_id,
            models.ChatParticipant.chat_id.in_(set(chat_ids)),
        )
        result = await self.session.execute(stmt)
        return {row.chat_id: bool(row.has_unread) for row in result}

    async def get_latest_message_times(self, chat_ids: Sequence[int]) -> Dict[int, datetime]:
        if not chat_ids:
            return {}
        stmt = (
            select(models.Message.chat_id, func.max(models.Message.created_at).label("last_at"))
            .filter(models.Message.chat_id.in_(set(chat_ids)))
            .group_by(models.Message.chat_id)
        )
        result = await self.session.execute(stmt)
        return {row.chat_id: row.last_at for row in result}

    async def _deactivate(self, chat_ids: List[int]) -> None:
        if not chat_ids:
            return
        stmt = (
            update(models.Chat)
            .where(models.Chat.id.in_(chat_ids))
            .values(is_active=False, updated_at=utc_now())
        )
        await self.session.execute(stmt)

    async def deactivate_for_listing(self, listing_id: int) -> List[int]:
        stmt = select(models.Chat.id).filter(
            models.Chat.listing_id == listing_id,
            models.Chat.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        chat_ids = list(result.scalars().all())
        await self._deactivate(chat_ids)
        return chat_ids

    async def deactivate_stale_chats(self) -> List[Tuple[int, int, str]]:
        """Close active chats whose listing has already left the active state."""
        stmt = (
            select(models.Chat.id, models.Chat.listing_id, models.Listing.status)
            .join(models.Listing, models.Listing.id == models.Chat.listing_id)
            .filter(
                models.Chat.is_active.is_(True),
                models.Listing.status != ListingStatus.ACTIVE.value,
            )
            .order_by(models.Chat.id)
        )
        result = await self.session.execute(stmt)
        stale = [(row.id, row.listing_id, row.status) for row in result]
        await self._deactivate([chat_id for chat_id, _, _ in stale])
        return stale

    async def get_buyer_listing_ids(self, user_ids: Sequence[str]) -> List[int]:
        if not user_ids:
            return []
        stmt = (
            select(models.Chat.listing_id)
            .filter(models.Chat.buyer_id.in_(set(user_ids)))
            .distinct()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def has_unread(self, user_id: str) -> bool:
        stmt = (
            select(models.ChatParticipant.chat_id)
            .filter(
                models.ChatParticipant.user_id == user_id,
                models.ChatParticipant.has_unread.is_(True),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None
