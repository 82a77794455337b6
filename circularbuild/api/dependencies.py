# circularbuild/api/dependencies.py
import logging
import secrets
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from circularbuild.config import AppConfig
from circularbuild.domain.entities import AuthUser
from circularbuild.gateways.chat_gateway import ChatGateway
from circularbuild.gateways.listing_gateway import ListingGateway
from circularbuild.gateways.message_gateway import MessageGateway
from circularbuild.gateways.news_gateway import NewsGateway
from circularbuild.gateways.profile_gateway import ProfileGateway
from circularbuild.gateways.wishlist_gateway import WishlistGateway
from circularbuild.infrastructure.event_dispatcher import EventDispatcher
from circularbuild.infrastructure.geocoding import MapboxGeocoder
from circularbuild.infrastructure.security import SecurityService
from circularbuild.infrastructure.uow import UnitOfWork
from circularbuild.interactors.chat_interactor import ChatInteractor
from circularbuild.interactors.diversion_interactor import DiversionInteractor
from circularbuild.interactors.listing_interactor import ListingInteractor
from circularbuild.interactors.message_interactor import MessageInteractor
from circularbuild.interactors.news_interactor import NewsInteractor
from circularbuild.interactors.profile_interactor import ProfileInteractor
from circularbuild.interactors.wishlist_interactor import WishlistInteractor

# tokens are issued by the external auth provider
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def get_security_service(request: Request) -> SecurityService:
    return request.app.state.security_service


def get_event_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.event_dispatcher


def get_geocoder(request: Request) -> Optional[MapboxGeocoder]:
    return request.app.state.geocoder


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_uow() -> UnitOfWork:
    return UnitOfWork()


async def get_profile_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return ProfileGateway(session, uow)


async def get_listing_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return ListingGateway(session, uow)


async def get_chat_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return ChatGateway(session, uow)


async def get_message_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return MessageGateway(session, uow)


async def get_wishlist_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return WishlistGateway(session, uow)


async def get_news_gateway(
    session: AsyncSession = Depends(get_session), uow: UnitOfWork = Depends(get_uow)
):
    return NewsGateway(session, uow)


async def get_listing_interactor(
    config: AppConfig = Depends(get_config),
    logger: logging.Logger = Depends(get_logger),
    geocoder: Optional[MapboxGeocoder] = Depends(get_geocoder),
    listing_gateway: ListingGateway = Depends(get_listing_gateway),
    chat_gateway: ChatGateway = Depends(get_chat_gateway),
    profile_gateway: ProfileGateway = Depends(get_profile_gateway),
    wishlist_gateway: WishlistGateway = Depends(get_wishlist_gateway),
):
    return ListingInteractor(
        listing_gateway,
        chat_gateway,
        profile_gateway,
        wishlist_gateway,
        geocoder,
        logger,
        default_radius_miles=config.DEFAULT_SEARCH_RADIUS_MILES,
    )


async def get_chat_interactor(
    uow: UnitOfWork = Depends(get_uow),
    chat_gateway: ChatGateway = Depends(get_chat_gateway),
    listing_gateway: ListingGateway = Depends(get_listing_gateway),
    profile_gateway: ProfileGateway = Depends(get_profile_gateway),
    message_gateway: MessageGateway = Depends(get_message_gateway),
):
    return ChatInteractor(uow, chat_gateway, listing_gateway, profile_gateway, message_gateway)


async def get_message_interactor(
    uow: UnitOfWork = Depends(get_uow),
    message_gateway: MessageGateway = Depends(get_message_gateway),
    chat_gateway: ChatGateway = Depends(get_chat_gateway),
    listing_gateway: ListingGateway = Depends(get_listing_gateway),
    profile_gateway: ProfileGateway = Depends(get_profile_gateway),
):
    return MessageInteractor(
        uow, message_gateway, chat_gateway, listing_gateway, profile_gateway
    )


async def get_diversion_interactor(
    listing_gateway: ListingGateway = Depends(get_listing_gateway),
    chat_gateway: ChatGateway = Depends(get_chat_gateway),
    profile_gateway: ProfileGateway = Depends(get_profile_gateway),
):
    return DiversionInteractor(listing_gateway, chat_gateway, profile_gateway)


async def get_wishlist_interactor(
    wishlist_gateway: WishlistGateway = Depends(get_wishlist_gateway),
    listing_gateway: ListingGateway = Depends(get_listing_gateway),
):
    return WishlistInteractor(wishlist_gateway, listing_gateway)


async def get_profile_interactor(
    profile_gateway: ProfileGateway = Depends(get_profile_gateway),
    listing_gateway: ListingGateway = Depends(get_listing_gateway),
    wishlist_gateway: WishlistGateway = Depends(get_wishlist_gateway),
    chat_gateway: ChatGateway = Depends(get_chat_gateway),
):
    return ProfileInteractor(profile_gateway, listing_gateway, wishlist_gateway, chat_gateway)


async def get_news_interactor(
    news_gateway: NewsGateway = Depends(get_news_gateway),
    profile_gateway: ProfileGateway = Depends(get_profile_gateway),
):
    return NewsInteractor(news_gateway, profile_gateway)


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    security_service: SecurityService = Depends(get_security_service),
    profile_gateway: ProfileGateway = Depends(get_profile_gateway),
) -> AuthUser:
    if not token:
        raise _credentials_error("Not authenticated")
    user = security_service.decode_access_token(token)
    if user is None:
        raise _credentials_error("Could not validate credentials")
    await profile_gateway.ensure_profile(user)
    return user


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    security_service: SecurityService = Depends(get_security_service),
) -> Optional[AuthUser]:
    if not token:
        return None
    return security_service.decode_access_token(token)


async def require_maintenance_key(
    x_maintenance_key: Optional[str] = Header(default=None),
    config: AppConfig = Depends(get_config),
) -> None:
    expected = config.MAINTENANCE_KEY
    if not expected or not x_maintenance_key or not secrets.compare_digest(
        x_maintenance_key, expected
    ):
        raise HTTPException(status_code=403, detail="Maintenance key required")
