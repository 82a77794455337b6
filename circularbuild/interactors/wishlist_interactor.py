# circularbuild/interactors/wishlist_interactor.py
from typing import List

from circularbuild.domain.errors import NotFoundError
from circularbuild.gateways.listing_gateway import ListingGateway
from circularbuild.gateways.wishlist_gateway import WishlistGateway
from circularbuild.infrastructure import schemas


class WishlistInteractor:
    def __init__(self, wishlist_gateway: WishlistGateway, listing_gateway: ListingGateway):
        self.wishlist_gateway = wishlist_gateway
        self.listing_gateway = listing_gateway

    async def add(self, user_id: str, listing_id: int) -> schemas.WishlistIds:
        listing = await self.listing_gateway.get_listing(listing_id)
        if listing is None:
            raise NotFoundError("Listing not found.")
        await self.wishlist_gateway.add(user_id, listing_id)
        return await self.list_ids(user_id)

    async def remove(self, user_id: str, listing_id: int) -> schemas.OperationResult:
        # removing an entry that is not there still succeeds
        await self.wishlist_gateway.remove(user_id, listing_id)
        return schemas.OperationResult(ok=True)

    async def list_ids(self, user_id: str) -> schemas.WishlistIds:
        listing_ids = await self.wishlist_gateway.get_listing_ids(user_id)
        return schemas.WishlistIds(listing_ids=listing_ids)

    async def list_entries(self, user_id: str) -> List[schemas.WishlistEntry]:
        entries = await self.wishlist_gateway.get_entries(user_id)
        result = []
        for entry, listing in entries:
            item = schemas.WishlistEntry.model_validate(entry)
            item.listing = schemas.ListingSummary.model_validate(listing)
            result.append(item)
        return result
