from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.categories import CATEGORIES
from newsdesk.database import get_db
from newsdesk.schemas import ArticleResponse, CategoriesRequest, CategoryResponse
from newsdesk.services import article_service

router = APIRouter(prefix="/api/v1", tags=["categories"])

@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories():
    return CATEGORIES

@router.get("/category/{category_id}", response_model=list[ArticleResponse])
async def articles_by_category(category_id: str, db: AsyncSession = Depends(get_db)):
    return await article_service.get_articles_by_category(db, category_id)

@router.post("/categories", response_model=list[ArticleResponse])
async def articles_by_categories(data: CategoriesRequest, db: AsyncSession = Depends(get_db)):
    return await article_service.get_articles_by_categories(db, data.categories)
