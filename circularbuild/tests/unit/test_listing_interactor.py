# circularbuild/tests/unit/test_listing_interactor.py
import logging
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from circularbuild.domain.entities import Coordinates
from circularbuild.domain.errors import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from circularbuild.domain.listing_rules import utc_today
from circularbuild.gateways.interfaces import (
    IChatGateway,
    IListingGateway,
    IProfileGateway,
    IWishlistGateway,
)
from circularbuild.infrastructure import schemas
from circularbuild.infrastructure.geocoding import MapboxGeocoder
from circularbuild.interactors.listing_interactor import ListingInteractor


def make_row(**kwargs):
    values = {
        "id": 1,
        "owner_id": "seller-1",
        "title": "Steel beams",
        "material_type": "Steel (structural, generic carbon)",
        "shape": "I-beam",
        "count": 4,
        "approximate_weight_lbs": 500.0,
        "materials": None,
        "available_until": utc_today() + timedelta(days=30),
        "location_text": "Oakland, CA",
        "lat": 37.8044,
        "lng": -122.2712,
        "description": "",
        "photos": [],
        "is_deconstruction": False,
        "sale_type": "donation",
        "sale_price": None,
        "status": "active",
        "created_at": datetime.now(UTC),
        "updated_at": None,
    }
    values.update(kwargs)
    return SimpleNamespace(**values)


def apply_values(row, values):
    for key, value in values.items():
        setattr(row, key, value)
    return row


@pytest.fixture
def mock_listing_gateway():
    gateway = Mock(spec=IListingGateway)
    gateway.create_listing.side_effect = lambda values: make_row(**values)
    gateway.update_listing.side_effect = apply_values
    return gateway


@pytest.fixture
def mock_chat_gateway():
    gateway = Mock(spec=IChatGateway)
    gateway.deactivate_for_listing.return_value = []
    gateway.deactivate_stale_chats.return_value = []
    return gateway


@pytest.fixture
def mock_geocoder():
    return Mock(spec=MapboxGeocoder)


@pytest.fixture
def listing_interactor(mock_listing_gateway, mock_chat_gateway, mock_geocoder):
    return ListingInteractor(
        mock_listing_gateway,
        mock_chat_gateway,
        Mock(spec=IProfileGateway),
        Mock(spec=IWishlistGateway),
        mock_geocoder,
        logging.getLogger("test_listings"),
    )


def make_create(**overrides):
    values = {
        "title": "Steel beams",
        "material_type": "Steel",
        "shape": "I-beam",
        "count": 4,
        "approximate_weight_lbs": 500,
        "available_until": utc_today() + timedelta(days=30),
        "location_text": "Oakland, CA",
        "lat": 37.8044,
        "lng": -122.2712,
        "donor_signature": "Sam Seller",
        "consent_contact": True,
    }
    values.update(overrides)
    return schemas.ListingCreate(**values)


class TestCreateListing:
    @pytest.mark.asyncio
    async def test_create_listing(self, listing_interactor, mock_listing_gateway):
        result = await listing_interactor.create_listing("seller-1", make_create())

        assert isinstance(result, schemas.Listing)
        assert result.status == "active"
        assert result.material_type == "Steel (structural, generic carbon)"
        assert result.approximate_weight_lbs == 500
        values = mock_listing_gateway.create_listing.call_args[0][0]
        assert values["owner_id"] == "seller-1"
        assert values["consent_contact"] is True
        assert values["materials"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"title": "  "}, "Missing required fields."),
            ({"available_until": None}, "Missing required fields."),
            ({"donor_signature": ""}, "Missing required fields."),
            ({"consent_contact": False}, "Consent to be contacted is required."),
            ({"sale_type": "resale"}, "A positive resale price is required."),
            ({"sale_type": "resale", "sale_price": -3}, "A positive resale price is required."),
            ({"approximate_weight_lbs": None}, "Approximate weight is required."),
            ({"approximate_weight_lbs": 0}, "Approximate weight is required."),
        ],
    )
    async def test_create_listing_rejected(
        self, listing_interactor, mock_listing_gateway, overrides, message
    ):
        with pytest.raises(ValidationError) as exc_info:
            await listing_interactor.create_listing("seller-1", make_create(**overrides))

        assert exc_info.value.message == message
        mock_listing_gateway.create_listing.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_fields_checked_before_consent(self, listing_interactor):
        with pytest.raises(ValidationError, match="Missing required fields."):
            await listing_interactor.create_listing(
                "seller-1", make_create(title="", consent_contact=False)
            )

    @pytest.mark.asyncio
    async def test_past_date_rejected(self, listing_interactor):
        with pytest.raises(ValidationError, match="past"):
            await listing_interactor.create_listing(
                "seller-1", make_create(available_until=utc_today() - timedelta(days=1))
            )

    @pytest.mark.asyncio
    async def test_resale_price_rounded(self, listing_interactor):
        result = await listing_interactor.create_listing(
            "seller-1", make_create(sale_type="resale", sale_price=12.349)
        )
        assert result.sale_type == "resale"
        assert result.sale_price == 12.35

    @pytest.mark.asyncio
    async def test_materials_weight_wins(self, listing_interactor, mock_listing_gateway):
        result = await listing_interactor.create_listing(
            "seller-1",
            make_create(
                material_type="",
                approximate_weight_lbs=None,
                materials=[
                    {"material": "Wood", "weightLbs": 100},
                    {"type": "Glass (soda-lime)", "weight_lbs": 200},
                ],
            ),
        )

        assert result.approximate_weight_lbs == 300
        assert result.material_type == "Wood (dimensional lumber)"
        assert [entry.type for entry in result.materials] == [
            "Wood (dimensional lumber)",
            "Glass (soda-lime)",
        ]

    @pytest.mark.asyncio
    async def test_geocodes_missing_coordinates(self, listing_interactor, mock_geocoder):
        mock_geocoder.geocode.return_value = Coordinates(lat=37.8, lng=-122.27)

        result = await listing_interactor.create_listing(
            "seller-1", make_create(lat=None, lng=None)
        )

        mock_geocoder.geocode.assert_called_once_with("Oakland, CA")
        assert (result.lat, result.lng) == (37.8, -122.27)

    @pytest.mark.asyncio
    async def test_geocoding_failure_keeps_listing(self, listing_interactor, mock_geocoder):
        mock_geocoder.geocode.side_effect = UpstreamError("Geocoding failed with HTTP 500")

        result = await listing_interactor.create_listing(
            "seller-1", make_create(lat=None, lng=None)
        )

        assert result.lat is None
        assert result.lng is None


class TestTransitionStatus:
    @pytest.mark.asyncio
    async def test_procure_closes_chats(
        self, listing_interactor, mock_listing_gateway, mock_chat_gateway
    ):
        mock_listing_gateway.get_listing.return_value = make_row()
        mock_chat_gateway.deactivate_for_listing.return_value = [3, 4]

        result = await listing_interactor.transition_status(1, "seller-1", "procured")

        assert result.listing.status == "procured"
        assert result.closed_chat_ids == [3, 4]
        mock_chat_gateway.deactivate_for_listing.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_not_owner(self, listing_interactor, mock_listing_gateway, mock_chat_gateway):
        mock_listing_gateway.get_listing.return_value = make_row(owner_id="someone-else")

        with pytest.raises(AuthorizationError):
            await listing_interactor.transition_status(1, "seller-1", "removed")
        mock_chat_gateway.deactivate_for_listing.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_listing(self, listing_interactor, mock_listing_gateway):
        mock_listing_gateway.get_listing.return_value = None

        with pytest.raises(NotFoundError):
            await listing_interactor.transition_status(1, "seller-1", "removed")

    @pytest.mark.asyncio
    async def test_bad_status_checked_first(self, listing_interactor, mock_listing_gateway):
        with pytest.raises(InvalidTransitionError):
            await listing_interactor.transition_status(1, "seller-1", "active")
        mock_listing_gateway.get_listing.assert_not_called()

    @pytest.mark.asyncio
    async def test_terminal_listing_cannot_change(
        self, listing_interactor, mock_listing_gateway, mock_chat_gateway
    ):
        mock_listing_gateway.get_listing.return_value = make_row(status="procured")

        with pytest.raises(InvalidTransitionError):
            await listing_interactor.transition_status(1, "seller-1", "removed")
        mock_listing_gateway.update_listing.assert_not_called()
        mock_chat_gateway.deactivate_for_listing.assert_not_called()


class TestUpdateListing:
    @pytest.mark.asyncio
    async def test_update_ignores_non_editable_fields(
        self, listing_interactor, mock_listing_gateway
    ):
        mock_listing_gateway.get_listing.return_value = make_row()

        result = await listing_interactor.update_listing(
            1,
            "seller-1",
            schemas.ListingUpdate.model_validate(
                {"count": 2, "description": " Pick up at dock 3 ", "title": "Changed"}
            ),
        )

        assert result.count == 2
        assert result.description == "Pick up at dock 3"
        assert result.title == "Steel beams"

    @pytest.mark.asyncio
    async def test_update_non_active_listing(self, listing_interactor, mock_listing_gateway):
        mock_listing_gateway.get_listing.return_value = make_row(status="removed")

        with pytest.raises(InvalidTransitionError):
            await listing_interactor.update_listing(
                1, "seller-1", schemas.ListingUpdate(count=2)
            )

    @pytest.mark.asyncio
    async def test_empty_update(self, listing_interactor, mock_listing_gateway):
        mock_listing_gateway.get_listing.return_value = make_row()

        with pytest.raises(ValidationError, match="No updates provided."):
            await listing_interactor.update_listing(1, "seller-1", schemas.ListingUpdate())

    @pytest.mark.asyncio
    async def test_non_positive_count(self, listing_interactor, mock_listing_gateway):
        mock_listing_gateway.get_listing.return_value = make_row()

        with pytest.raises(ValidationError):
            await listing_interactor.update_listing(
                1, "seller-1", schemas.ListingUpdate(count=0)
            )


class TestSweepExpired:
    @pytest.mark.asyncio
    async def test_sweep_removes_expired_and_reconciles(
        self, listing_interactor, mock_listing_gateway, mock_chat_gateway
    ):
        expired = make_row(id=2, available_until=utc_today() - timedelta(days=1))
        mock_listing_gateway.get_expired_active.return_value = [expired]
        mock_chat_gateway.deactivate_for_listing.return_value = [5]
        mock_chat_gateway.deactivate_stale_chats.return_value = [(9, 3, "procured")]

        result = await listing_interactor.sweep_expired()

        assert expired.status == "removed"
        assert result.expired_listing_ids == [2]
        assert result.closed_chat_ids == [5]
        assert result.reconciled_chat_ids == [9]
        assert [(c.listing_id, c.listing_status, c.chat_ids) for c in result.closures] == [
            (2, "removed", [5]),
            (3, "procured", [9]),
        ]

    @pytest.mark.asyncio
    async def test_sweep_with_nothing_to_do(self, listing_interactor, mock_listing_gateway):
        mock_listing_gateway.get_expired_active.return_value = []

        result = await listing_interactor.sweep_expired()

        assert result.expired_listing_ids == []
        assert result.closures == []
