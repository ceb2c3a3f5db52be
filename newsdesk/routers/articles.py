from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.database import get_db
from newsdesk.dependencies import PaginationParams, get_current_user
from newsdesk.models import User
from newsdesk.schemas import (
    ArticleCreate,
    ArticleDetail,
    ArticleUpdate,
    MessageResponse,
    PaginatedResponse,
)
from newsdesk.services import article_service

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])

@router.get("", response_model=PaginatedResponse)
async def list_articles(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.get_articles(
        db, pagination.page, pagination.page_size, pagination.sort_by, pagination.sort_order
    )

@router.get("/{slug}", response_model=ArticleDetail)
async def get_article(slug: str, db: AsyncSession = Depends(get_db)):
    return await article_service.get_article_by_slug(db, slug)

@router.post("", status_code=201, response_model=ArticleDetail)
async def create_article(
    data: ArticleCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.create_article(db, user, data)

@router.put("/{article_id}", response_model=ArticleDetail)
async def update_article(
    article_id: int,
    data: ArticleUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.update_article(db, user, article_id, data)

@router.patch("/{article_id}/publish", response_model=ArticleDetail)
async def publish_article(
    article_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.publish_article(db, user, article_id)

@router.patch("/{article_id}/unpublish", response_model=ArticleDetail)
async def unpublish_article(
    article_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.unpublish_article(db, user, article_id)

@router.delete("/{article_id}", response_model=MessageResponse)
async def delete_article(
    article_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await article_service.delete_article(db, user, article_id)
    return {"message": "Article deleted successfully"}
