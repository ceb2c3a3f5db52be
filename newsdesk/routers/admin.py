from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.database import get_db
from newsdesk.dependencies import require_admin
from newsdesk.models import User
from newsdesk.schemas import (
    ArticleDetail,
    ArticleResponse,
    DashboardResponse,
    MessageResponse,
    RoleUpdate,
    UserResponse,
)
from newsdesk.services import admin_service, user_service

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    limit: int | None = Query(None, ge=1, le=50),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.get_dashboard(db, admin, limit)

@router.get("/users", response_model=list[UserResponse])
async def list_users(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return await user_service.get_users(db)

@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    return await user_service.get_user_account(db, user_id)

@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: int,
    data: RoleUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_role(db, user_id, data.role)

@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    await user_service.delete_user(db, admin, user_id)
    return {"message": "User deleted successfully"}

@router.get("/articles", response_model=list[ArticleResponse])
async def list_all_articles(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return await admin_service.get_all_articles(db, admin)

@router.get("/articles/{article_id}", response_model=ArticleDetail)
async def get_article(
    article_id: int, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    return await admin_service.get_article(db, admin, article_id)
