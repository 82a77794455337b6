# circularbuild/infrastructure/models.py
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from circularbuild.domain.entities import ListingStatus, SaleType
from circularbuild.domain.listing_rules import utc_now
from circularbuild.infrastructure.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    # opaque id issued by the auth provider
    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String, index=True, nullable=True)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    organization_slug: Mapped[Optional[str]] = mapped_column(
        String, index=True, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Listing(Base):
    __tablename__ = "listings"

    __table_args__ = (
        Index("ix_listings_status_available", "status", "available_until"),
        Index("ix_listings_owner_status", "owner_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    owner_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id"), index=True)
    title: Mapped[str] = mapped_column(String)
    material_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    shape: Mapped[str] = mapped_column(String)
    count: Mapped[int] = mapped_column(Integer, default=1)
    approximate_weight_lbs: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    materials: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    available_until: Mapped[date] = mapped_column(Date)
    location_text: Mapped[str] = mapped_column(String)
    lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    description: Mapped[str] = mapped_column(Text, default="")
    photos: Mapped[list] = mapped_column(JSON, default=list)
    donor_signature: Mapped[str] = mapped_column(String)
    consent_contact: Mapped[bool] = mapped_column(Boolean, default=False)
    is_deconstruction: Mapped[bool] = mapped_column(Boolean, default=False)
    sale_type: Mapped[str] = mapped_column(String, default=SaleType.DONATION.value)
    sale_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(
        String, default=ListingStatus.ACTIVE.value, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Chat(Base):
    __tablename__ = "chats"

    __table_args__ = (
        UniqueConstraint("listing_id", "buyer_id", name="uq_chats_listing_buyer"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    listing_id: Mapped[int] = mapped_column(Integer, ForeignKey("listings.id"), index=True)
    buyer_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id"), index=True)
    seller_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id"), index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class ChatParticipant(Base):
    __tablename__ = "chat_participants"

    __table_args__ = (Index("ix_chat_participants_user_unread", "user_id", "has_unread"),)

    chat_id: Mapped[int] = mapped_column(Integer, ForeignKey("chats.id"), primary_key=True)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id"), primary_key=True)
    has_unread: Mapped[bool] = mapped_column(Boolean, default=False)
    last_read_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Message(Base):
    __tablename__ = "messages"

    __table_args__ = (Index("ix_messages_chat_created", "chat_id", "created_at"),)

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    chat_id: Mapped[int] = mapped_column(Integer, ForeignKey("chats.id"), index=True)
    sender_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id"), index=True)
    body: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )


class Wishlist(Base):
    __tablename__ = "wishlists"

    __table_args__ = (
        UniqueConstraint("user_id", "listing_id", name="uq_wishlists_user_listing"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    user_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id"), index=True)
    listing_id: Mapped[int] = mapped_column(Integer, ForeignKey("listings.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class NewsPost(Base):
    __tablename__ = "news_posts"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    author_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id"), index=True)
    title: Mapped[str] = mapped_column(String)
    body: Mapped[str] = mapped_column(Text)
    cover_image_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class NewsComment(Base):
    __tablename__ = "news_comments"

    __table_args__ = (Index("ix_news_comments_post_created", "post_id", "created_at"),)

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    post_id: Mapped[int] = mapped_column(Integer, ForeignKey("news_posts.id"), index=True)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id"), index=True)
    comment: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class NewsLike(Base):
    __tablename__ = "news_likes"

    post_id: Mapped[int] = mapped_column(Integer, ForeignKey("news_posts.id"), primary_key=True)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("profiles.id"), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
