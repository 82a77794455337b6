# circularbuild/interactors/diversion_interactor.py
from typing import Optional, Sequence

from circularbuild.domain.diversion import reduce_metrics, unique_by_id
from circularbuild.domain.errors import NotFoundError
from circularbuild.domain.organizations import get_organization_by_slug
from circularbuild.gateways.chat_gateway import ChatGateway
from circularbuild.gateways.listing_gateway import ListingGateway
from circularbuild.gateways.profile_gateway import ProfileGateway
from circularbuild.infrastructure import schemas


class DiversionInteractor:
    """Read-side diversion totals, recomputed from procured listings on every call.

    ``donated`` covers procured listings owned by the members, ``accepted``
    covers procured listings the members asked about as buyers. The total
    counts each listing once even when it appears in both sets.
    """

    def __init__(
        self,
        listing_gateway: ListingGateway,
        chat_gateway: ChatGateway,
        profile_gateway: ProfileGateway,
    ):
        self.listing_gateway = listing_gateway
        self.chat_gateway = chat_gateway
        self.profile_gateway = profile_gateway

    async def _totals_for(self, user_ids: Sequence[str]) -> schemas.PersonalDiversion:
        donated = await self.listing_gateway.get_procured(owner_ids=user_ids)
        accepted_ids = await self.chat_gateway.get_buyer_listing_ids(user_ids)
        accepted = await self.listing_gateway.get_procured(listing_ids=accepted_ids)

        return schemas.PersonalDiversion(
            donated=schemas.DiversionMetrics.model_validate(reduce_metrics(donated)),
            accepted=schemas.DiversionMetrics.model_validate(reduce_metrics(accepted)),
            total=schemas.DiversionMetrics.model_validate(
                reduce_metrics(unique_by_id(donated, accepted))
            ),
        )

    async def compute_personal_totals(self, user_id: str) -> schemas.PersonalDiversion:
        return await self._totals_for([user_id])

    async def compute_organization_totals(self, org_slug: str) -> schemas.OrganizationDiversion:
        organization = get_organization_by_slug(org_slug)
        member_ids = await self.profile_gateway.get_member_ids(org_slug)
        if organization is None and not member_ids:
            raise NotFoundError("Organization not found.")

        totals = await self._totals_for(member_ids)
        return schemas.OrganizationDiversion(
            slug=org_slug,
            name=organization.name if organization else org_slug,
            member_count=len(member_ids),
            **totals.model_dump(),
        )

    async def get_account_diversion(self, user_id: str) -> schemas.AccountDiversion:
        personal = await self.compute_personal_totals(user_id)

        organization: Optional[schemas.OrganizationDiversion] = None
        profile = await self.profile_gateway.get_profile(user_id)
        if profile is not None and profile.organization_slug:
            organization = await self.compute_organization_totals(profile.organization_slug)

        return schemas.AccountDiversion(personal=personal, organization=organization)
