# circularbuild/interactors/news_interactor.py
from typing import List, Optional

from circularbuild.domain.entities import AuthUser
from circularbuild.domain.errors import AuthorizationError, NotFoundError, ValidationError
from circularbuild.domain.news import build_excerpt, display_name, estimate_read_minutes
from circularbuild.gateways.news_gateway import NewsGateway
from circularbuild.gateways.profile_gateway import ProfileGateway
from circularbuild.infrastructure import schemas
from circularbuild.infrastructure.uow import UoWModel


def _post_values(post_in: schemas.NewsPostIn) -> dict:
    title = (post_in.title or "").strip()
    body = (post_in.body or "").strip()
    if not title or not body:
        raise ValidationError("Title and body are required.")
    cover = (post_in.cover_image_url or "").strip()
    return {"title": title, "body": body, "cover_image_url": cover or None}


class NewsInteractor:
    def __init__(self, news_gateway: NewsGateway, profile_gateway: ProfileGateway):
        self.news_gateway = news_gateway
        self.profile_gateway = profile_gateway

    async def _require_post(self, post_id: int) -> UoWModel:
        post = await self.news_gateway.get_post(post_id)
        if post is None:
            raise NotFoundError("Post not found.")
        return post

    async def list_posts(self) -> List[schemas.NewsPostSummary]:
        posts = await self.news_gateway.get_posts()
        post_ids = [post.id for post in posts]
        likes = await self.news_gateway.get_like_counts(post_ids)
        comments = await self.news_gateway.get_comment_counts(post_ids)
        return [
            schemas.NewsPostSummary(
                id=post.id,
                title=post.title,
                excerpt=build_excerpt(post.body),
                read_minutes=estimate_read_minutes(post.body),
                cover_image_url=post.cover_image_url,
                created_at=post.created_at,
                likes=likes.get(post.id, 0),
                comments=comments.get(post.id, 0),
            )
            for post in posts
        ]

    async def get_post_detail(
        self, post_id: int, viewer_id: Optional[str] = None
    ) -> schemas.NewsPostDetail:
        post = await self._require_post(post_id)
        likes = await self.news_gateway.get_like_counts([post_id])
        liked = bool(viewer_id) and await self.news_gateway.has_liked(post_id, viewer_id)
        comments = [
            schemas.NewsComment(
                id=comment.id,
                comment=comment.comment,
                created_at=comment.created_at,
                user_id=comment.user_id,
                user_name=display_name(profile.name if profile else None),
            )
            for comment, profile in await self.news_gateway.get_comments(post_id)
        ]
        return schemas.NewsPostDetail(
            post=schemas.NewsPost.model_validate(post),
            read_minutes=estimate_read_minutes(post.body),
            likes=likes.get(post_id, 0),
            liked=liked,
            comments=comments,
        )

    async def create_post(self, author_id: str, post_in: schemas.NewsPostIn) -> schemas.NewsPost:
        values = _post_values(post_in)
        values["author_id"] = author_id
        post = await self.news_gateway.create_post(values)
        return schemas.NewsPost.model_validate(post)

    async def update_post(
        self, post_id: int, author_id: str, post_in: schemas.NewsPostIn
    ) -> schemas.NewsPost:
        post = await self._require_post(post_id)
        if post.author_id != author_id:
            raise AuthorizationError("Only the author can edit this post.")
        post = await self.news_gateway.update_post(post, _post_values(post_in))
        return schemas.NewsPost.model_validate(post)

    async def add_comment(
        self, post_id: int, user: AuthUser, comment_in: schemas.NewsCommentIn
    ) -> schemas.NewsComment:
        text = (comment_in.comment or "").strip()
        if not text:
            raise ValidationError("Comment cannot be empty.")
        await self._require_post(post_id)

        comment = await self.news_gateway.add_comment(post_id, user.id, text)
        profile = await self.profile_gateway.get_profile(user.id)
        name = profile.name if profile else None
        return schemas.NewsComment(
            id=comment.id,
            comment=comment.comment,
            created_at=comment.created_at,
            user_id=user.id,
            user_name=display_name(name or user.name, user.email),
        )

    async def like(self, post_id: int, user_id: str) -> schemas.NewsLikeState:
        await self._require_post(post_id)
        await self.news_gateway.add_like(post_id, user_id)
        return await self._like_state(post_id, liked=True)

    async def unlike(self, post_id: int, user_id: str) -> schemas.NewsLikeState:
        await self._require_post(post_id)
        await self.news_gateway.remove_like(post_id, user_id)
        return await self._like_state(post_id, liked=False)

    async def _like_state(self, post_id: int, liked: bool) -> schemas.NewsLikeState:
        likes = await self.news_gateway.get_like_counts([post_id])
        return schemas.NewsLikeState(likes=likes.get(post_id, 0), liked=liked)
