# circularbuild/interactors/profile_interactor.py
from typing import List

from circularbuild.domain.errors import NotFoundError, ValidationError
from circularbuild.domain.organizations import (
    ORGANIZATION_PARTNERS,
    OrganizationPartner,
    get_organization_by_slug,
)
from circularbuild.gateways.chat_gateway import ChatGateway
from circularbuild.gateways.listing_gateway import ListingGateway
from circularbuild.gateways.profile_gateway import ProfileGateway
from circularbuild.gateways.wishlist_gateway import WishlistGateway
from circularbuild.infrastructure import schemas


class ProfileInteractor:
    def __init__(
        self,
        profile_gateway: ProfileGateway,
        listing_gateway: ListingGateway,
        wishlist_gateway: WishlistGateway,
        chat_gateway: ChatGateway,
    ):
        self.profile_gateway = profile_gateway
        self.listing_gateway = listing_gateway
        self.wishlist_gateway = wishlist_gateway
        self.chat_gateway = chat_gateway

    async def get_account_profile(self, user_id: str) -> schemas.AccountProfile:
        profile = await self.profile_gateway.get_profile(user_id)
        if profile is None:
            raise NotFoundError("Profile not found.")
        stats = schemas.AccountStats(
            active_listings=await self.listing_gateway.count_active_by_owner(user_id),
            wishlist_count=await self.wishlist_gateway.count(user_id),
        )
        return schemas.AccountProfile(
            profile=schemas.Profile.model_validate(profile), stats=stats
        )

    async def update_profile(
        self, user_id: str, profile_update: schemas.ProfileUpdate
    ) -> schemas.Profile:
        profile = await self.profile_gateway.get_profile(user_id)
        if profile is None:
            raise NotFoundError("Profile not found.")

        values = {}
        for key, value in profile_update.model_dump(exclude_unset=True).items():
            # blank strings clear the field
            values[key] = (value.strip() or None) if isinstance(value, str) else value

        slug = values.get("organization_slug")
        if slug and get_organization_by_slug(slug) is None:
            raise ValidationError("Unknown organization.")

        if values:
            profile = await self.profile_gateway.update_profile(profile, values)
        return schemas.Profile.model_validate(profile)

    async def get_me(self, user_id: str) -> schemas.MeSummary:
        profile = await self.profile_gateway.get_profile(user_id)
        return schemas.MeSummary(
            profile=schemas.ProfileBasic.model_validate(profile) if profile else None,
            has_unread_chats=await self.chat_gateway.has_unread(user_id),
        )

    @staticmethod
    def list_organizations() -> List[OrganizationPartner]:
        return list(ORGANIZATION_PARTNERS)
