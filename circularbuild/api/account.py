# circularbuild/api/account.py
from typing import List

from fastapi import APIRouter, Depends

from circularbuild.api.dependencies import (
    get_current_user,
    get_diversion_interactor,
    get_listing_interactor,
    get_profile_interactor,
    get_wishlist_interactor,
)
from circularbuild.domain.entities import AuthUser
from circularbuild.infrastructure import schemas
from circularbuild.interactors.diversion_interactor import DiversionInteractor
from circularbuild.interactors.listing_interactor import ListingInteractor
from circularbuild.interactors.profile_interactor import ProfileInteractor
from circularbuild.interactors.wishlist_interactor import WishlistInteractor

router = APIRouter()
me_router = APIRouter()


@router.get("/profile", response_model=schemas.AccountProfile)
async def read_account_profile(
    profile_interactor: ProfileInteractor = Depends(get_profile_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await profile_interactor.get_account_profile(current_user.id)


@router.put("/profile", response_model=schemas.Profile)
async def update_account_profile(
    profile_update: schemas.ProfileUpdate,
    profile_interactor: ProfileInteractor = Depends(get_profile_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await profile_interactor.update_profile(current_user.id, profile_update)


@router.get("/listings", response_model=List[schemas.Listing])
async def read_account_listings(
    listing_interactor: ListingInteractor = Depends(get_listing_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await listing_interactor.get_owner_listings(current_user.id)


@router.get("/wishlist", response_model=List[schemas.WishlistEntry])
async def read_account_wishlist(
    wishlist_interactor: WishlistInteractor = Depends(get_wishlist_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await wishlist_interactor.list_entries(current_user.id)


@router.get("/diversion", response_model=schemas.AccountDiversion)
async def read_account_diversion(
    diversion_interactor: DiversionInteractor = Depends(get_diversion_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await diversion_interactor.get_account_diversion(current_user.id)


@me_router.get("", response_model=schemas.MeSummary)
async def read_me(
    profile_interactor: ProfileInteractor = Depends(get_profile_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await profile_interactor.get_me(current_user.id)
