# circularbuild/gateways/news_gateway.py
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from circularbuild.domain.listing_rules import utc_now
from circularbuild.gateways.interfaces import INewsGateway
from circularbuild.infrastructure import models
from circularbuild.infrastructure.data_mappers import NewsCommentMapper, NewsPostMapper
from circularbuild.infrastructure.database import insert_or_ignore
from circularbuild.infrastructure.uow import UnitOfWork, UoWModel


class NewsGateway(INewsGateway):
    def __init__(self, session: AsyncSession, uow: UnitOfWork):
        self.session = session
        self.uow = uow
        uow.mappers[models.NewsPost] = NewsPostMapper(session)
        uow.mappers[models.NewsComment] = NewsCommentMapper(session)

    async def get_post(self, post_id: int) -> Optional[UoWModel]:
        stmt = select(models.NewsPost).filter(models.NewsPost.id == post_id)
        result = await self.session.execute(stmt)
        post = result.scalar_one_or_none()
        return UoWModel(post, self.uow) if post else None

    async def get_posts(self) -> List[models.NewsPost]:
        stmt = select(models.NewsPost).order_by(
            models.NewsPost.created_at.desc(), models.NewsPost.id.desc()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_post(self, values: Dict[str, Any]) -> UoWModel:
        db_post = models.NewsPost(**values)
        uow_post = self.uow.register_new(db_post)
        await self.uow.commit()
        return uow_post

    async def update_post(self, post: UoWModel, values: Dict[str, Any]) -> UoWModel:
        for key, value in values.items():
            setattr(post, key, value)
        post.updated_at = utc_now()
        await self.uow.commit()
        return post

    async def _count_by_post(self, column, post_ids: Sequence[int]) -> Dict[int, int]:
        if not post_ids:
            return {}
        stmt = (
            select(column, func.count().label("total"))
            .filter(column.in_(set(post_ids)))
            .group_by(column)
        )
        result = await self.session.execute(stmt)
        return {row[0]: row.total for row in result}

    async def get_like_counts(self, post_ids: Sequence[int]) -> Dict[int, int]:
        return await self._count_by_post(models.NewsLike.post_id, post_ids)

    async def get_comment_counts(self, post_ids: Sequence[int]) -> Dict[int, int]:
        return await self._count_by_post(models.NewsComment.post_id, post_ids)

    async def has_liked(self, post_id: int, user_id: str) -> bool:
        stmt = select(models.NewsLike.post_id).filter(
            models.NewsLike.post_id == post_id,
            models.NewsLike.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def add_like(self, post_id: int, user_id: str) -> None:
        stmt = insert_or_ignore(
            self.session,
            models.NewsLike,
            {"post_id": post_id, "user_id": user_id},
            ("post_id", "user_id"),
        )
        await self.session.execute(stmt)

    async def remove_like(self, post_id: int, user_id: str) -> None:
        stmt = delete(models.NewsLike).where(
            models.NewsLike.post_id == post_id,
            models.NewsLike.user_id == user_id,
        )
        await self.session.execute(stmt)

    async def add_comment(self, post_id: int, user_id: str, comment: str) -> UoWModel:
        db_comment = models.NewsComment(post_id=post_id, user_id=user_id, comment=comment)
        uow_comment = self.uow.register_new(db_comment)
        await self.uow.commit()
        return uow_comment

    async def get_comments(
        self, post_id: int
    ) -> List[Tuple[models.NewsComment, Optional[models.Profile]]]:
        stmt = (
            select(models.NewsComment, models.Profile)
            .outerjoin(models.Profile, models.Profile.id == models.NewsComment.user_id)
            .filter(models.NewsComment.post_id == post_id)
            .order_by(models.NewsComment.created_at, models.NewsComment.id)
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]
