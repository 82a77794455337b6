# circularbuild/infrastructure/data_mappers.py

from typing import Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from circularbuild.infrastructure import models

ModelT_contra = TypeVar("ModelT_contra", contravariant=True)


class DataMapper(Protocol[ModelT_contra]):
    async def insert(self, model: ModelT_contra):
        raise NotImplementedError

    async def delete(self, model: ModelT_contra):
        raise NotImplementedError

    async def update(self, model: ModelT_contra):
        raise NotImplementedError


class SessionMapper(DataMapper[ModelT_contra]):
    """Writes rows through the request session; every call flushes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, model):
        self.session.add(model)
        await self.session.flush()

    async def delete(self, model):
        await self.session.delete(model)
        await self.session.flush()

    async def update(self, model):
        await self.session.merge(model)
        await self.session.flush()


class ProfileMapper(SessionMapper[models.Profile]):
    pass


class ListingMapper(SessionMapper[models.Listing]):
    pass


class ChatMapper(SessionMapper[models.Chat]):
    pass


class ChatParticipantMapper(SessionMapper[models.ChatParticipant]):
    pass


class MessageMapper(SessionMapper[models.Message]):
    pass


class WishlistMapper(SessionMapper[models.Wishlist]):
    pass


class NewsPostMapper(SessionMapper[models.NewsPost]):
    pass


class NewsCommentMapper(SessionMapper[models.NewsComment]):
    pass
