# circularbuild/interactors/listing_interactor.py
import logging
import math
from datetime import date
from typing import List, Optional

from circularbuild.domain.diversion import normalize_material_label, normalize_materials
from circularbuild.domain.entities import Coordinates, ListingStatus, SaleType
from circularbuild.domain.errors import (
    AuthorizationError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from circularbuild.domain.listing_rules import (
    EDITABLE_FIELDS,
    ensure_editable,
    ensure_transition_allowed,
    miles_between,
    parse_target_status,
    utc_today,
)
from circularbuild.domain.organizations import get_organization_by_slug
from circularbuild.gateways.chat_gateway import ChatGateway
from circularbuild.gateways.listing_gateway import ListingGateway
from circularbuild.gateways.profile_gateway import ProfileGateway
from circularbuild.gateways.wishlist_gateway import WishlistGateway
from circularbuild.infrastructure import schemas
from circularbuild.infrastructure.geocoding import MapboxGeocoder
from circularbuild.infrastructure.uow import UoWModel


def _finite_positive(value) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


class ListingInteractor:
    """Listing lifecycle: creation, owner edits, terminal transitions and expiry.

    A status change and the deactivation of every chat on the listing are
    flushed into the same session transaction, so readers never observe a
    non-active listing with an open chat once the request commits.
    """

    def __init__(
        self,
        listing_gateway: ListingGateway,
        chat_gateway: ChatGateway,
        profile_gateway: ProfileGateway,
        wishlist_gateway: WishlistGateway,
        geocoder: Optional[MapboxGeocoder],
        logger: logging.Logger,
        default_radius_miles: float = 25.0,
    ):
        self.listing_gateway = listing_gateway
        self.chat_gateway = chat_gateway
        self.profile_gateway = profile_gateway
        self.wishlist_gateway = wishlist_gateway
        self.geocoder = geocoder
        self.logger = logger
        self.default_radius_miles = default_radius_miles

    async def _geocode(self, query: Optional[str]) -> Optional[Coordinates]:
        if self.geocoder is None:
            return None
        try:
            return await self.geocoder.geocode(query)
        except UpstreamError as e:
            self.logger.warning(f"Geocoding '{query}' failed: {e.message}")
            return None

    async def _get_owned(self, listing_id: int, owner_id: str) -> UoWModel:
        listing = await self.listing_gateway.get_listing(listing_id)
        if listing is None:
            raise NotFoundError("Listing not found.")
        if listing.owner_id != owner_id:
            raise AuthorizationError("You do not own this listing.")
        return listing

    async def create_listing(
        self, owner_id: str, listing_in: schemas.ListingCreate
    ) -> schemas.Listing:
        title = listing_in.title.strip()
        shape = listing_in.shape.strip()
        location_text = listing_in.location_text.strip()
        signature = listing_in.donor_signature.strip()
        if (
            not title
            or not shape
            or listing_in.available_until is None
            or not location_text
            or not signature
        ):
            raise ValidationError("Missing required fields.")

        if not listing_in.consent_contact:
            raise ValidationError("Consent to be contacted is required.")

        sale_type = (
            SaleType.RESALE
            if (listing_in.sale_type or "").strip().lower() == SaleType.RESALE.value
            else SaleType.DONATION
        )
        sale_price = None
        if sale_type is SaleType.RESALE:
            sale_price = _finite_positive(listing_in.sale_price)
            if sale_price is None:
                raise ValidationError("A positive resale price is required.")
            sale_price = round(sale_price, 2)

        materials = normalize_materials(listing_in.materials)
        materials_weight = sum(entry.weight_lbs for entry in materials)
        weight = (
            materials_weight
            if materials_weight > 0
            else _finite_positive(listing_in.approximate_weight_lbs)
        )
        if not weight:
            raise ValidationError("Approximate weight is required.")

        count = listing_in.count if listing_in.count and listing_in.count > 0 else 1

        if listing_in.available_until < utc_today():
            raise ValidationError("Availability date cannot be in the past.")

        lat, lng = listing_in.lat, listing_in.lng
        if lat is None or lng is None:
            coordinates = await self._geocode(location_text)
            lat = coordinates.lat if coordinates else None
            lng = coordinates.lng if coordinates else None

        material_type = normalize_material_label(listing_in.material_type)
        if material_type is None and materials:
            material_type = materials[0].type

        listing = await self.listing_gateway.create_listing(
            {
                "owner_id": owner_id,
                "title": title,
                "material_type": material_type,
                "shape": shape,
                "count": count,
                "approximate_weight_lbs": round(weight, 2),
                "materials": [entry.as_dict() for entry in materials] or None,
                "available_until": listing_in.available_until,
                "location_text": location_text,
                "lat": lat,
                "lng": lng,
                "description": listing_in.description.strip(),
                "photos": [url.strip() for url in listing_in.photos if url and url.strip()],
                "donor_signature": signature,
                "consent_contact": True,
                "is_deconstruction": listing_in.is_deconstruction,
                "sale_type": sale_type.value,
                "sale_price": sale_price,
                "status": ListingStatus.ACTIVE.value,
            }
        )
        self.logger.info(f"Listing {listing.id} created by {owner_id}")
        return schemas.Listing.model_validate(listing)

    async def update_listing(
        self, listing_id: int, owner_id: str, listing_update: schemas.ListingUpdate
    ) -> schemas.Listing:
        listing = await self._get_owned(listing_id, owner_id)
        ensure_editable(listing.status)

        values = {
            key: value
            for key, value in listing_update.model_dump(exclude_unset=True).items()
            if key in EDITABLE_FIELDS and value is not None
        }
        if not values:
            raise ValidationError("No updates provided.")
        if "count" in values and values["count"] <= 0:
            raise ValidationError("Count must be a positive number.")
        if "available_until" in values and values["available_until"] < utc_today():
            raise ValidationError("Availability date cannot be in the past.")
        if "description" in values:
            values["description"] = values["description"].strip()

        listing = await self.listing_gateway.update_listing(listing, values)
        return schemas.Listing.model_validate(listing)

    async def _close(self, listing: UoWModel, target: ListingStatus) -> List[int]:
        await self.listing_gateway.update_listing(listing, {"status": target.value})
        chat_ids = await self.chat_gateway.deactivate_for_listing(listing.id)
        self.logger.info(
            f"Listing {listing.id} marked {target.value}; closed chats {chat_ids}"
        )
        return chat_ids

    async def transition_status(
        self, listing_id: int, owner_id: str, new_status: str
    ) -> schemas.StatusTransition:
        target = parse_target_status(new_status)
        listing = await self._get_owned(listing_id, owner_id)
        ensure_transition_allowed(listing.status, target)

        chat_ids = await self._close(listing, target)
        return schemas.StatusTransition(
            listing=schemas.Listing.model_validate(listing),
            closed_chat_ids=chat_ids,
        )

    async def sweep_expired(self, today: Optional[date] = None) -> schemas.SweepResult:
        today = today or utc_today()
        expired = await self.listing_gateway.get_expired_active(today)

        closures: List[schemas.ChatClosure] = []
        for listing in expired:
            chat_ids = await self._close(listing, ListingStatus.REMOVED)
            closures.append(
                schemas.ChatClosure(
                    listing_id=listing.id,
                    listing_status=ListingStatus.REMOVED.value,
                    chat_ids=chat_ids,
                )
            )

        # chats left open by writes that bypassed the cascade
        stale = await self.chat_gateway.deactivate_stale_chats()
        stale_by_listing: dict[int, schemas.ChatClosure] = {}
        for chat_id, listing_id, status in stale:
            closure = stale_by_listing.setdefault(
                listing_id,
                schemas.ChatClosure(listing_id=listing_id, listing_status=status, chat_ids=[]),
            )
            closure.chat_ids.append(chat_id)
        if stale:
            self.logger.warning(f"Reconciled {len(stale)} stale active chats")

        return schemas.SweepResult(
            expired_listing_ids=[listing.id for listing in expired],
            closed_chat_ids=[chat_id for c in closures for chat_id in c.chat_ids],
            reconciled_chat_ids=[chat_id for chat_id, _, _ in stale],
            closures=closures + list(stale_by_listing.values()),
        )

    def _owner_schema(self, profile) -> Optional[schemas.OwnerProfile]:
        if profile is None:
            return None
        organization = get_organization_by_slug(profile.organization_slug)
        owner = schemas.OwnerProfile.model_validate(profile)
        owner.organization_name = organization.name if organization else None
        return owner

    async def get_listing_detail(
        self, listing_id: int, viewer_id: Optional[str] = None
    ) -> schemas.ListingDetail:
        listing = await self.listing_gateway.get_listing(listing_id)
        if listing is None:
            raise NotFoundError("Listing not found.")

        owners = await self.profile_gateway.get_profiles([listing.owner_id])
        detail = schemas.ListingWithOwner.model_validate(listing)
        detail.owner = self._owner_schema(owners.get(listing.owner_id))

        is_saved = False
        if viewer_id:
            is_saved = (
                await self.wishlist_gateway.get_entry(viewer_id, listing_id)
            ) is not None
        return schemas.ListingDetail(listing=detail, is_saved=is_saved)

    async def get_owner_listings(self, owner_id: str) -> List[schemas.Listing]:
        listings = await self.listing_gateway.get_by_owner(owner_id)
        return [schemas.Listing.model_validate(listing) for listing in listings]

    async def search(self, search: schemas.ListingSearch) -> List[schemas.ListingWithOwner]:
        origin: Optional[Coordinates] = None
        if search.origin_lat is not None and search.origin_lng is not None:
            origin = Coordinates(lat=search.origin_lat, lng=search.origin_lng)
        elif search.address and search.address.strip():
            origin = await self._geocode(search.address)

        material_type = normalize_material_label(search.type)
        listings = await self.listing_gateway.get_active_listings(material_type)

        # listings past their date stay hidden until the sweep removes them
        today = utc_today()
        results = [listing for listing in listings if listing.available_until >= today]

        query = (search.q or "").strip().lower()
        if query:
            results = [
                listing
                for listing in results
                if query in (listing.title or "").lower()
                or query in (listing.shape or "").lower()
                or query in (listing.description or "").lower()
            ]

        if origin is not None:
            radius = _finite_positive(search.radius_miles) or self.default_radius_miles
            results = [
                listing
                for listing in results
                if listing.lat is not None
                and listing.lng is not None
                and miles_between(origin.lat, origin.lng, listing.lat, listing.lng) <= radius
            ]

        owners = await self.profile_gateway.get_profiles(
            [listing.owner_id for listing in results]
        )
        enriched = []
        for listing in results:
            item = schemas.ListingWithOwner.model_validate(listing)
            item.owner = self._owner_schema(owners.get(listing.owner_id))
            enriched.append(item)
        return enriched
