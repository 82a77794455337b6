# circularbuild/api/organizations.py
from typing import List

from fastapi import APIRouter, Depends

from circularbuild.api.dependencies import get_diversion_interactor
from circularbuild.domain.organizations import OrganizationPartner
from circularbuild.infrastructure import schemas
from circularbuild.interactors.diversion_interactor import DiversionInteractor
from circularbuild.interactors.profile_interactor import ProfileInteractor

router = APIRouter()


@router.get("", response_model=List[OrganizationPartner])
async def read_organizations():
    return ProfileInteractor.list_organizations()


@router.get("/{slug}/diversion", response_model=schemas.OrganizationDiversion)
async def read_organization_diversion(
    slug: str,
    diversion_interactor: DiversionInteractor = Depends(get_diversion_interactor),
):
    return await diversion_interactor.compute_organization_totals(slug)
