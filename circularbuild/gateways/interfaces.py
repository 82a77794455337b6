# circularbuild/gateways/interfaces.py
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from circularbuild.domain.entities import AuthUser
from circularbuild.infrastructure import models
from circularbuild.infrastructure.uow import UoWModel


class IProfileGateway(ABC):
    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def ensure_profile(self, user: AuthUser) -> UoWModel:
        pass

    @abstractmethod
    async def get_profiles(self, user_ids: Sequence[str]) -> Dict[str, models.Profile]:
        pass

    @abstractmethod
    async def get_member_ids(self, organization_slug: str) -> List[str]:
        pass

    @abstractmethod
    async def update_profile(self, profile: UoWModel, values: Dict[str, Any]) -> UoWModel:
        pass


class IListingGateway(ABC):
    @abstractmethod
    async def get_listing(self, listing_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_listings(self, listing_ids: Sequence[int]) -> Dict[int, models.Listing]:
        pass

    @abstractmethod
    async def create_listing(self, values: Dict[str, Any]) -> UoWModel:
        pass

    @abstractmethod
    async def update_listing(self, listing: UoWModel, values: Dict[str, Any]) -> UoWModel:
        pass

    @abstractmethod
    async def get_by_owner(self, owner_id: str) -> List[models.Listing]:
        pass

    @abstractmethod
    async def get_active_listings(self, material_type: Optional[str] = None) -> List[models.Listing]:
        pass

    @abstractmethod
    async def get_expired_active(self, today: date) -> List[UoWModel]:
        pass

    @abstractmethod
    async def get_procured(
        self,
        owner_ids: Optional[Sequence[str]] = None,
        listing_ids: Optional[Sequence[int]] = None,
    ) -> List[models.Listing]:
        pass

    @abstractmethod
    async def count_active_by_owner(self, owner_id: str) -> int:
        pass


class IChatGateway(ABC):
    @abstractmethod
    async def get_chat(self, chat_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def find_chat(self, listing_id: int, buyer_id: str, seller_id: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def create_chat(
        self, listing_id: int, buyer_id: str, seller_id: str, is_active: bool
    ) -> UoWModel:
        pass

    @abstractmethod
    async def get_participant(self, chat_id: int, user_id: str) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_participants(self, chat_id: int) -> List[models.ChatParticipant]:
        pass

    @abstractmethod
    async def add_participant(
        self,
        chat_id: int,
        user_id: str,
        has_unread: bool = False,
        last_read_at: Optional[datetime] = None,
    ) -> None:
        pass

    @abstractmethod
    async def get_chats_for_user(self, user_id: str) -> List[models.Chat]:
        pass

    @abstractmethod
    async def get_unread_flags(self, user_id: str, chat_ids: Sequence[int]) -> Dict[int, bool]:
        pass

    @abstractmethod
    async def get_latest_message_times(self, chat_ids: Sequence[int]) -> Dict[int, datetime]:
        pass

    @abstractmethod
    async def deactivate_for_listing(self, listing_id: int) -> List[int]:
        pass

    @abstractmethod
    async def deactivate_stale_chats(self) -> List[Tuple[int, int, str]]:
        pass

    @abstractmethod
    async def get_buyer_listing_ids(self, user_ids: Sequence[str]) -> List[int]:
        pass

    @abstractmethod
    async def has_unread(self, user_id: str) -> bool:
        pass


class IMessageGateway(ABC):
    @abstractmethod
    async def create_message(self, chat_id: int, sender_id: str, body: str) -> UoWModel:
        pass

    @abstractmethod
    async def get_messages(self, chat_id: int, after_id: Optional[int] = None) -> List[models.Message]:
        pass


class IWishlistGateway(ABC):
    @abstractmethod
    async def get_entry(self, user_id: str, listing_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def add(self, user_id: str, listing_id: int) -> UoWModel:
        pass

    @abstractmethod
    async def remove(self, user_id: str, listing_id: int) -> bool:
        pass

    @abstractmethod
    async def get_listing_ids(self, user_id: str) -> List[int]:
        pass

    @abstractmethod
    async def get_entries(self, user_id: str) -> List[Tuple[models.Wishlist, models.Listing]]:
        pass

    @abstractmethod
    async def count(self, user_id: str) -> int:
        pass


class INewsGateway(ABC):
    @abstractmethod
    async def get_post(self, post_id: int) -> Optional[UoWModel]:
        pass

    @abstractmethod
    async def get_posts(self) -> List[models.NewsPost]:
        pass

    @abstractmethod
    async def create_post(self, values: Dict[str, Any]) -> UoWModel:
        pass

    @abstractmethod
    async def update_post(self, post: UoWModel, values: Dict[str, Any]) -> UoWModel:
        pass

    @abstractmethod
    async def get_like_counts(self, post_ids: Sequence[int]) -> Dict[int, int]:
        pass

    @abstractmethod
    async def get_comment_counts(self, post_ids: Sequence[int]) -> Dict[int, int]:
        pass

    @abstractmethod
    async def has_liked(self, post_id: int, user_id: str) -> bool:
        pass

    @abstractmethod
    async def add_like(self, post_id: int, user_id: str) -> None:
        pass

    @abstractmethod
    async def remove_like(self, post_id: int, user_id: str) -> None:
        pass

    @abstractmethod
    async def add_comment(self, post_id: int, user_id: str, comment: str) -> UoWModel:
        pass

    @abstractmethod
    async def get_comments(
        self, post_id: int
    ) -> List[Tuple[models.NewsComment, Optional[models.Profile]]]:
        pass
