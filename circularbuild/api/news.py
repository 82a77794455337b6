# circularbuild/api/news.py
from typing import List, Optional

from fastapi import APIRouter, Depends

from circularbuild.api.dependencies import (
    get_current_user,
    get_news_interactor,
    get_optional_user,
)
from circularbuild.domain.entities import AuthUser
from circularbuild.infrastructure import schemas
from circularbuild.interactors.news_interactor import NewsInteractor

router = APIRouter()


@router.get("/posts", response_model=List[schemas.NewsPostSummary])
async def read_posts(news_interactor: NewsInteractor = Depends(get_news_interactor)):
    return await news_interactor.list_posts()


@router.post("/posts", response_model=schemas.NewsPost, status_code=201)
async def create_post(
    post: schemas.NewsPostIn,
    news_interactor: NewsInteractor = Depends(get_news_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await news_interactor.create_post(current_user.id, post)


@router.get("/posts/{post_id}", response_model=schemas.NewsPostDetail)
async def read_post(
    post_id: int,
    news_interactor: NewsInteractor = Depends(get_news_interactor),
    viewer: Optional[AuthUser] = Depends(get_optional_user),
):
    return await news_interactor.get_post_detail(post_id, viewer.id if viewer else None)


@router.put("/posts/{post_id}", response_model=schemas.NewsPost)
async def update_post(
    post_id: int,
    post: schemas.NewsPostIn,
    news_interactor: NewsInteractor = Depends(get_news_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await news_interactor.update_post(post_id, current_user.id, post)


@router.post("/posts/{post_id}/comments", response_model=schemas.NewsComment, status_code=201)
async def add_comment(
    post_id: int,
    comment: schemas.NewsCommentIn,
    news_interactor: NewsInteractor = Depends(get_news_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await news_interactor.add_comment(post_id, current_user, comment)


@router.post("/posts/{post_id}/like", response_model=schemas.NewsLikeState)
async def like_post(
    post_id: int,
    news_interactor: NewsInteractor = Depends(get_news_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await news_interactor.like(post_id, current_user.id)


@router.delete("/posts/{post_id}/like", response_model=schemas.NewsLikeState)
async def unlike_post(
    post_id: int,
    news_interactor: NewsInteractor = Depends(get_news_interactor),
    current_user: AuthUser = Depends(get_current_user),
):
    return await news_interactor.unlike(post_id, current_user.id)
