# circularbuild/api/wishlist.py
from fastapi import APIRouter, Depends

from circularbuild.api.dependencies import get_current_user, get_wishlist_interactor
from circularbuild.domain.entities import AuthUser
from circularbuild.infrastructure import schemas
from circularbuild.interactors.wishlist_interactor import WishlistInteractor

router = APIRouter()


@router.get("", response_model=schemas.WishlistIds)
async def read_wishlist_ids(
    wishlist_interactor: WishlistInteractor = Depends(get_wishlist_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await wishlist_interactor.list_ids(current_user.id)


@router.post("", response_model=schemas.WishlistIds)
async def add_to_wishlist(
    change: schemas.WishlistChange,
    wishlist_interactor: WishlistInteractor = Depends(get_wishlist_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await wishlist_interactor.add(current_user.id, change.listing_id)


@router.delete("/{listing_id}", response_model=schemas.OperationResult)
async def remove_from_wishlist(
    listing_id: int,
    wishlist_interactor: WishlistInteractor = Depends(get_wishlist_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await wishlist_interactor.remove(current_user.id, listing_id)
