# circularbuild/gateways/profile_gateway.py
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from circularbuild.domain.entities import AuthUser
from circularbuild.domain.listing_rules import utc_now
from circularbuild.gateways.interfaces import IProfileGateway
from circularbuild.infrastructure import models
from circularbuild.infrastructure.data_mappers import ProfileMapper
from circularbuild.infrastructure.database import insert_or_ignore
from circularbuild.infrastructure.uow import UnitOfWork, UoWModel


class ProfileGateway(IProfileGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.Profile] = ProfileMapper(session)

    async def get_profile(self, user_id: str) -> Optional[UoWModel]:
        stmt = select(models.Profile).filter(models.Profile.id == user_id)
        result = await self.session.execute(stmt)
        profile = result.scalar_one_or_none()
        return UoWModel(profile, self.uow) if profile else None

    async def ensure_profile(self, user: AuthUser) -> UoWModel:
        profile = await self.get_profile(user.id)
        if profile is None:
            # two first requests from one user may race here
            stmt = insert_or_ignore(
                self.session,
                models.Profile,
                {"id": user.id, "email": user.email or None, "name": user.name},
                ("id",),
            )
            await self.session.execute(stmt)
            return await self.get_profile(user.id)

        # keep contact details in sync with the identity provider
        changes: Dict[str, Any] = {}
        if user.email and profile.email != user.email:
            changes["email"] = user.email
        if user.name and not profile.name:
            changes["name"] = user.name
        if changes:
            return await self.update_profile(profile, changes)
        return profile

    async def get_profiles(self, user_ids: Sequence[str]) -> Dict[str, models.Profile]:
        ids = {user_id for user_id in user_ids if user_id}
        if not ids:
            return {}
        stmt = select(models.Profile).filter(models.Profile.id.in_(ids))
        result = await self.session.execute(stmt)
        return {profile.id: profile for profile in result.scalars().all()}

    async def get_member_ids(self, organization_slug: str) -> List[str]:
        stmt = select(models.Profile.id).filter(
            models.Profile.organization_slug == organization_slug
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_profile(self, profile: UoWModel, values: Dict[str, Any]) -> UoWModel:
        for key, value in values.items():
            setattr(profile, key, value)
        profile.updated_at = utc_now()
        await self.uow.commit()
        return profile
