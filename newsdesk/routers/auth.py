from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.database import get_db
from newsdesk.dependencies import get_current_user
from newsdesk.models import User
from newsdesk.schemas import LoginRequest, MessageResponse, SignupRequest, TokenResponse, UserResponse
from newsdesk.security import create_access_token
from newsdesk.services import user_service

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _issue_token(response: Response, user: User) -> dict:
    token = create_access_token(user.id, user.role)
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.APP_ENV == "production",
    )
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": user_service.user_to_dict(user),
    }

@router.post("/signup", status_code=201, response_model=TokenResponse)
async def signup(data: SignupRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user = await user_service.create_user(db, data)
    return _issue_token(response, user)

@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate(db, data.email, data.password)
    return _issue_token(response, user)

@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return {"message": "Logged out"}

@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return user_service.user_to_dict(user)
