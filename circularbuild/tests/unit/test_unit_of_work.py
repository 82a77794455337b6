# circularbuild/tests/unit/test_unit_of_work.py

from unittest.mock import AsyncMock

import pytest

from circularbuild.infrastructure import models
from circularbuild.infrastructure.data_mappers import ListingMapper
from circularbuild.infrastructure.uow import UnitOfWork, UoWModel


@pytest.fixture
def mock_session():
    return AsyncMock()


@pytest.fixture
def uow(mock_session):
    """
    Initializes the UnitOfWork with a mocked ListingMapper.
    """
    uow = UnitOfWork()
    listing_mapper = ListingMapper(mock_session)
    listing_mapper.insert = AsyncMock()
    listing_mapper.update = AsyncMock()
    listing_mapper.delete = AsyncMock()
    uow.mappers[models.Listing] = listing_mapper
    return uow


def make_listing(title="Steel beams"):
    return models.Listing(owner_id="seller-1", title=title, shape="I-beam")


async def test_register_new_model(uow):
    listing = make_listing()
    uow_model = uow.register_new(listing)

    assert id(listing) in uow.new
    assert isinstance(uow_model, UoWModel)
    assert uow.has_pending


async def test_modify_new_model_does_not_register_dirty(uow):
    listing = make_listing()
    uow_model = uow.register_new(listing)

    uow_model.title = "Reclaimed beams"

    assert len(uow.dirty) == 0
    assert id(listing) in uow.new
    assert listing.title == "Reclaimed beams"


async def test_modify_existing_model_registers_dirty(uow):
    listing = make_listing()
    uow_model = uow.wrap(listing)

    uow_model.status = "procured"

    assert id(listing) in uow.dirty
    assert listing.status == "procured"


async def test_wrap_none_returns_none(uow):
    assert uow.wrap(None) is None


async def test_delete_new_model_never_reaches_database(uow):
    listing = make_listing()
    uow_model = uow.register_new(listing)

    uow.register_deleted(uow_model)

    assert id(listing) not in uow.new
    assert id(listing) not in uow.deleted
    assert not uow.has_pending


async def test_delete_dirty_model(uow):
    listing = make_listing()
    uow.register_dirty(listing)

    uow.register_deleted(listing)

    assert id(listing) not in uow.dirty
    assert id(listing) in uow.deleted


async def test_commit_flushes_in_order(uow):
    new_listing = make_listing("new")
    dirty_listing = make_listing("dirty")
    deleted_listing = make_listing("deleted")
    uow.register_new(new_listing)
    uow.register_dirty(dirty_listing)
    uow.register_deleted(deleted_listing)

    await uow.commit()

    mapper = uow.mappers[models.Listing]
    mapper.insert.assert_awaited_once_with(new_listing)
    mapper.update.assert_awaited_once_with(dirty_listing)
    mapper.delete.assert_awaited_once_with(deleted_listing)
    assert not uow.has_pending


async def test_commit_without_mapper_raises():
    uow = UnitOfWork()
    uow.register_new(models.Wishlist(user_id="buyer-1", listing_id=1))

    with pytest.raises(LookupError, match="Wishlist"):
        await uow.commit()
