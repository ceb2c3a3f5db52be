from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.database import get_db
from newsdesk.dependencies import get_current_user
from newsdesk.models import User
from newsdesk.schemas import CommentCreate, CommentResponse, CommentUpdate, MessageResponse
from newsdesk.services import comment_service

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])

@router.get("/article/{article_id}", response_model=list[CommentResponse])
async def list_article_comments(article_id: int, db: AsyncSession = Depends(get_db)):
    return await comment_service.get_article_comments(db, article_id)

@router.get("/{comment_id}/replies", response_model=list[CommentResponse])
async def list_replies(comment_id: int, db: AsyncSession = Depends(get_db)):
    return await comment_service.get_replies(db, comment_id)

@router.post("", status_code=201, response_model=CommentResponse)
async def create_comment(
    data: CommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.create_comment(
        db, user, data.content, data.article_id, data.parent_comment_id
    )

@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.update_comment(db, user, comment_id, data.content)

@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, user, comment_id)
    return {"message": "Comment deleted successfully"}

@router.post("/{comment_id}/like", response_model=CommentResponse)
async def toggle_like(
    comment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.toggle_like(db, user, comment_id)
