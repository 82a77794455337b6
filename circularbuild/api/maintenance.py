# circularbuild/api/maintenance.py
from fastapi import APIRouter, BackgroundTasks, Depends

from circularbuild.api.dependencies import (
    get_event_dispatcher,
    get_listing_interactor,
    require_maintenance_key,
)
from circularbuild.domain.events import ChatsClosed
from circularbuild.infrastructure import schemas
from circularbuild.infrastructure.event_dispatcher import EventDispatcher
from circularbuild.interactors.listing_interactor import ListingInteractor

router = APIRouter()


@router.post(
    "/sweep",
    response_model=schemas.SweepResult,
    dependencies=[Depends(require_maintenance_key)],
)
async def sweep_expired_listings(
    background_tasks: BackgroundTasks,
    listing_interactor: ListingInteractor = Depends(get_listing_interactor),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    result = await listing_interactor.sweep_expired()
    events = [
        ChatsClosed(
            listing_id=closure.listing_id,
            listing_status=closure.listing_status,
            chat_ids=closure.chat_ids,
        )
        for closure in result.closures
        if closure.chat_ids
    ]
    if events:
        background_tasks.add_task(event_dispatcher.dispatch_all, events)
    return result
