# circularbuild/gateways/wishlist_gateway.py
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from circularbuild.gateways.interfaces import IWishlistGateway
from circularbuild.infrastructure import models
from circularbuild.infrastructure.data_mappers import WishlistMapper
from circularbuild.infrastructure.database import insert_or_ignore
from circularbuild.infrastructure.uow import UnitOfWork, UoWModel


class WishlistGateway(IWishlistGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.Wishlist] = WishlistMapper(session)

    async def get_entry(self, user_id: str, listing_id: int) -> Optional[UoWModel]:
        stmt = select(models.Wishlist).filter(
            models.Wishlist.user_id == user_id,
            models.Wishlist.listing_id == listing_id,
        )
        result = await self.session.execute(stmt)
        entry = result.scalar_one_or_none()
        return UoWModel(entry, self.uow) if entry else None

    async def add(self, user_id: str, listing_id: int) -> UoWModel:
        stmt = insert_or_ignore(
            self.session,
            models.Wishlist,
            {"user_id": user_id, "listing_id": listing_id},
            ("user_id", "listing_id"),
        )
        await self.session.execute(stmt)
        return await self.get_entry(user_id, listing_id)

    async def remove(self, user_id: str, listing_id: int) -> bool:
        entry = await self.get_entry(user_id, listing_id)
        if not entry:
            return False
        self.uow.register_deleted(entry._model)
        await self.uow.commit()
        return True

    async def get_listing_ids(self, user_id: str) -> List[int]:
        stmt = (
            select(models.Wishlist.listing_id)
            .filter(models.Wishlist.user_id == user_id)
            .order_by(models.Wishlist.created_at.desc(), models.Wishlist.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_entries(self, user_id: str) -> List[Tuple[models.Wishlist, models.Listing]]:
        stmt = (
            select(models.Wishlist, models.Listing)
            .join(models.Listing, models.Listing.id == models.Wishlist.listing_id)
            .filter(models.Wishlist.user_id == user_id)
            .order_by(models.Wishlist.created_at.desc(), models.Wishlist.id.desc())
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def count(self, user_id: str) -> int:
        stmt = select(func.count(models.Wishlist.id)).filter(
            models.Wishlist.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
