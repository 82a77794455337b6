# circularbuild/api/listings.py
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from circularbuild.api.dependencies import (
    get_current_user,
    get_event_dispatcher,
    get_listing_interactor,
    get_optional_user,
)
from circularbuild.domain.entities import AuthUser
from circularbuild.domain.events import ChatsClosed
from circularbuild.infrastructure import schemas
from circularbuild.infrastructure.event_dispatcher import EventDispatcher
from circularbuild.interactors.listing_interactor import ListingInteractor

router = APIRouter()


@router.post("", response_model=schemas.Listing, status_code=201)
async def create_listing(
    listing: schemas.ListingCreate,
    listing_interactor: ListingInteractor = Depends(get_listing_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await listing_interactor.create_listing(current_user.id, listing)


@router.post("/search", response_model=List[schemas.ListingWithOwner])
async def search_listings(
    search: schemas.ListingSearch,
    listing_interactor: ListingInteractor = Depends(get_listing_interactor),
):
    return await listing_interactor.search(search)


@router.get("/{listing_id}", response_model=schemas.ListingDetail)
async def read_listing(
    listing_id: int,
    listing_interactor: ListingInteractor = Depends(get_listing_interactor),
    viewer: Optional[AuthUser] = Depends(get_optional_user),
):
    return await listing_interactor.get_listing_detail(
        listing_id, viewer.id if viewer else None
    )


@router.patch("/{listing_id}", response_model=schemas.Listing)
async def update_listing(
    listing_id: int,
    listing_update: schemas.ListingUpdate,
    listing_interactor: ListingInteractor = Depends(get_listing_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await listing_interactor.update_listing(
        listing_id, current_user.id, listing_update
    )


@router.post("/{listing_id}/status", response_model=schemas.StatusTransition)
async def transition_listing_status(
    listing_id: int,
    status_update: schemas.ListingStatusUpdate,
    background_tasks: BackgroundTasks,
    listing_interactor: ListingInteractor = Depends(get_listing_interactor),
    current_user: AuthUser = Depends(get_current_user),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    transition = await listing_interactor.transition_status(
        listing_id, current_user.id, status_update.status
    )
    if transition.closed_chat_ids:
        background_tasks.add_task(
            event_dispatcher.dispatch,
            ChatsClosed(
                listing_id=transition.listing.id,
                listing_status=transition.listing.status,
                chat_ids=transition.closed_chat_ids,
            ),
        )
    return transition
