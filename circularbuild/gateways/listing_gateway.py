# circularbuild/gateways/listing_gateway.py
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from circularbuild.domain.entities import ListingStatus
from circularbuild.domain.listing_rules import utc_now
from circularbuild.gateways.interfaces import IListingGateway
from circularbuild.infrastructure import models
from circularbuild.infrastructure.data_mappers import ListingMapper
from circularbuild.infrastructure.uow import UnitOfWork, UoWModel


class ListingGateway(IListingGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.Listing] = ListingMapper(session)

    async def get_listing(self, listing_id: int) -> Optional[UoWModel]:
        stmt = select(models.Listing).filter(models.Listing.id == listing_id)
        result = await self.session.execute(stmt)
        listing = result.scalar_one_or_none()
        return UoWModel(listing, self.uow) if listing else None

    async def get_listings(self, listing_ids: Sequence[int]) -> Dict[int, models.Listing]:
        ids = set(listing_ids)
        if not ids:
            return {}
        stmt = select(models.Listing).filter(models.Listing.id.in_(ids))
        result = await self.session.execute(stmt)
        return {listing.id: listing for listing in result.scalars().all()}

    async def create_listing(self, values: Dict[str, Any]) -> UoWModel:
        db_listing = models.Listing(**values)
        uow_listing = self.uow.register_new(db_listing)
        await self.uow.commit()
        return uow_listing

    async def update_listing(self, listing: UoWModel, values: Dict[str, Any]) -> UoWModel:
        for key, value in values.items():
            setattr(listing, key, value)
        listing.updated_at = utc_now()
        await self.uow.commit()
        return listing

    async def get_by_owner(self, owner_id: str) -> List[models.Listing]:
        stmt = (
            select(models.Listing)
            .filter(models.Listing.owner_id == owner_id)
            .order_by(models.Listing.created_at.desc(), models.Listing.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active_listings(self, material_type: Optional[str] = None) -> List[models.Listing]:
        stmt = select(models.Listing).filter(
            models.Listing.status == ListingStatus.ACTIVE.value
        )
        if material_type:
            stmt = stmt.filter(models.Listing.material_type == material_type)
        stmt = stmt.order_by(models.Listing.created_at.desc(), models.Listing.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_expired_active(self, today: date) -> List[UoWModel]:
        stmt = (
            select(models.Listing)
            .filter(
                models.Listing.status == ListingStatus.ACTIVE.value,
                models.Listing.available_until < today,
            )
            .order_by(models.Listing.id)
        )
        result = await self.session.execute(stmt)
        return [UoWModel(listing, self.uow) for listing in result.scalars().all()]

    async def get_procured(
        self,
        owner_ids: Optional[Sequence[str]] = None,
        listing_ids: Optional[Sequence[int]] = None,
    ) -> List[models.Listing]:
        if owner_ids is None and listing_ids is None:
            return []
        stmt = select(models.Listing).filter(
            models.Listing.status == ListingStatus.PROCURED.value
        )
        if owner_ids is not None:
            if not owner_ids:
                return []
            stmt = stmt.filter(models.Listing.owner_id.in_(set(owner_ids)))
        if listing_ids is not None:
            if not listing_ids:
                return []
            stmt = stmt.filter(models.Listing.id.in_(set(listing_ids)))
        result = await self.session.execute(stmt.order_by(models.Listing.id))
        return list(result.scalars().all())

    async def count_active_by_owner(self, owner_id: str) -> int:
        stmt = select(func.count(models.Listing.id)).filter(
            models.Listing.owner_id == owner_id,
            models.Listing.status == ListingStatus.ACTIVE.value,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
