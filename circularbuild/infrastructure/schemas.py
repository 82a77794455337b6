# circularbuild/infrastructure/schemas.py
from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# Profiles


class ProfileBasic(BaseModel):
    id: str
    name: str | None = None
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class Profile(ProfileBasic):
    email: str | None = None
    bio: str | None = None
    organization_slug: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OwnerProfile(ProfileBasic):
    bio: str | None = None
    organization_slug: str | None = None
    organization_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    organization_slug: str | None = None


class AccountStats(BaseModel):
    active_listings: int
    wishlist_count: int


class AccountProfile(BaseModel):
    profile: Profile
    stats: AccountStats


class MeSummary(BaseModel):
    profile: ProfileBasic | None = None
    has_unread_chats: bool = False


# Listings


class MaterialEntryIn(BaseModel):
    type: str | None = Field(default=None, validation_alias=AliasChoices("type", "material"))
    weight_lbs: float | None = Field(
        default=None, validation_alias=AliasChoices("weight_lbs", "weightLbs")
    )


class MaterialEntry(BaseModel):
    type: str
    weight_lbs: float
    co2e_kg: float

    model_config = ConfigDict(from_attributes=True)


class ListingCreate(BaseModel):
    title: str = ""
    material_type: str = ""
    shape: str = ""
    count: int | None = None
    approximate_weight_lbs: float | None = None
    materials: list[MaterialEntryIn] = Field(default_factory=list)
    available_until: date | None = None
    location_text: str = ""
    lat: float | None = None
    lng: float | None = None
    description: str = ""
    photos: list[str] = Field(default_factory=list)
    donor_signature: str = ""
    consent_contact: bool = False
    is_deconstruction: bool = False
    sale_type: str = "donation"
    sale_price: float | None = None


class ListingUpdate(BaseModel):
    available_until: date | None = None
    count: int | None = None
    description: str | None = None

    # anything else in the payload is dropped silently
    model_config = ConfigDict(extra="ignore")


class ListingStatusUpdate(BaseModel):
    status: str


class Listing(BaseModel):
    id: int
    owner_id: str
    title: str
    material_type: str | None = None
    shape: str
    count: int
    approximate_weight_lbs: float | None = None
    materials: list[MaterialEntry] | None = None
    available_until: date
    location_text: str
    lat: float | None = None
    lng: float | None = None
    description: str
    photos: list[str] = Field(default_factory=list)
    is_deconstruction: bool
    sale_type: str
    sale_price: float | None = None
    status: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ListingSummary(BaseModel):
    id: int
    title: str
    material_type: str | None = None
    shape: str
    status: str
    location_text: str
    available_until: date
    photos: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ListingWithOwner(Listing):
    owner: OwnerProfile | None = None


class ListingDetail(BaseModel):
    listing: ListingWithOwner
    is_saved: bool = False


class ListingSearch(BaseModel):
    q: str | None = None
    type: str | None = None
    address: str | None = None
    radius_miles: float | None = None
    origin_lat: float | None = None
    origin_lng: float | None = None


class ChatClosure(BaseModel):
    listing_id: int
    listing_status: str
    chat_ids: list[int]


class StatusTransition(BaseModel):
    listing: Listing
    closed_chat_ids: list[int] = Field(default_factory=list)


class SweepResult(BaseModel):
    expired_listing_ids: list[int]
    closed_chat_ids: list[int]
    reconciled_chat_ids: list[int]
    closures: list[ChatClosure] = Field(default_factory=list)


# Chats and messages


class ChatStart(BaseModel):
    listing_id: int


class ChatStartResult(BaseModel):
    chat_id: int


class Chat(BaseModel):
    id: int
    listing_id: int
    buyer_id: str
    seller_id: str
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Participant(BaseModel):
    chat_id: int
    user_id: str
    has_unread: bool
    last_read_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class MessageCreate(BaseModel):
    body: str = ""


class Message(BaseModel):
    id: int
    chat_id: int
    sender_id: str
    body: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageDelivery(BaseModel):
    message: Message
    recipient_id: str
    recipient_email: str | None = None
    recipient_name: str | None = None
    sender_name: str | None = None
    listing_title: str | None = None


class ChatListItem(Chat):
    listing: ListingSummary | None = None
    counterpart: ProfileBasic | None = None
    last_message_at: datetime | None = None
    has_unread: bool = False


class ChatDetail(BaseModel):
    chat: Chat
    listing: ListingSummary | None = None
    participants: list[Participant] = Field(default_factory=list)
    buyer: ProfileBasic | None = None
    seller: ProfileBasic | None = None
    messages: list[Message] = Field(default_factory=list)


# Wishlist


class WishlistChange(BaseModel):
    listing_id: int


class WishlistIds(BaseModel):
    listing_ids: list[int]


class WishlistEntry(BaseModel):
    id: int
    listing_id: int
    created_at: datetime
    listing: ListingSummary | None = None

    model_config = ConfigDict(from_attributes=True)


# Diversion


class DiversionMetrics(BaseModel):
    pounds: float = 0.0
    co2e_kg: float = 0.0
    listings: int = 0

    model_config = ConfigDict(from_attributes=True)


class PersonalDiversion(BaseModel):
    donated: DiversionMetrics
    accepted: DiversionMetrics
    total: DiversionMetrics


class OrganizationDiversion(PersonalDiversion):
    slug: str
    name: str
    member_count: int


class AccountDiversion(BaseModel):
    personal: PersonalDiversion
    organization: OrganizationDiversion | None = None


# News


class NewsPostIn(BaseModel):
    title: str = ""
    body: str = ""
    cover_image_url: str | None = Field(
        default=None, validation_alias=AliasChoices("cover_image_url", "coverImageUrl")
    )


class NewsPost(BaseModel):
    id: int
    author_id: str
    title: str
    body: str
    cover_image_url: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class NewsPostSummary(BaseModel):
    id: int
    title: str
    excerpt: str
    read_minutes: int
    cover_image_url: str | None = None
    created_at: datetime
    likes: int = 0
    comments: int = 0


class NewsCommentIn(BaseModel):
    comment: str = ""


class NewsComment(BaseModel):
    id: int
    comment: str
    created_at: datetime
    user_id: str
    user_name: str


class NewsLikeState(BaseModel):
    likes: int
    liked: bool


class NewsPostDetail(BaseModel):
    post: NewsPost
    read_minutes: int
    likes: int = 0
    liked: bool = False
    comments: list[NewsComment] = []


class OperationResult(BaseModel):
    ok: bool = True
