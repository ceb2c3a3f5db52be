from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newsdesk.categories import CATEGORY_NAMES


def _check_category(value: str | None) -> str | None:
    if value is not None and value not in CATEGORY_NAMES:
        raise ValueError(f"Unknown category: {value}")
    return value


# --- Tag ---

class TagResponse(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


# --- User / auth ---

class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    email: str = Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6, max_length=128)
    profile_picture: str | None = Field(None, max_length=500)


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    name: str | None
    email: str
    role: str
    profile_picture: str | None = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class UserDetail(UserResponse):
    articles: list["ArticleResponse"] = []


class AuthorSummary(BaseModel):
    id: int
    name: str | None
    profile_picture: str | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class RoleUpdate(BaseModel):
    role: str


# --- Comment ---

class CommentCreate(BaseModel):
    content: str = Field(max_length=5000)
    article_id: int
    parent_comment_id: int | None = None


class CommentUpdate(BaseModel):
    content: str = Field(max_length=5000)


class CommentResponse(BaseModel):
    id: int
    content: str
    article_id: int
    parent_comment_id: int | None
    author: AuthorSummary | None
    likes: list[int]
    created_at: datetime
    updated_at: datetime


# --- Article ---

class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    original_source: str | None = Field(None, max_length=1000)
    summary: str | None = None
    explanation: str | None = None
    tags: list[str] = []
    category: str
    cover_image: str | None = Field(None, max_length=1000)
    published: bool = False

    @field_validator("category")
    @classmethod
    def check_category(cls, value):
        return _check_category(value)


class ArticleUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    original_source: str | None = Field(None, max_length=1000)
    summary: str | None = None
    explanation: str | None = None
    tags: list[str] | None = None
    category: str | None = None
    cover_image: str | None = Field(None, max_length=1000)

    @field_validator("category")
    @classmethod
    def check_category(cls, value):
        return _check_category(value)


class ArticleResponse(BaseModel):
    id: int
    title: str
    slug: str
    original_source: str | None
    summary: str | None
    category: str
    cover_image: str | None
    published: bool
    published_at: datetime | None
    created_at: datetime
    updated_at: datetime
    user_id: int | None
    author: AuthorSummary | None = None
    tags: list[TagResponse] = []


class ArticleDetail(ArticleResponse):
    explanation: str | None


class CategoriesRequest(BaseModel):
    categories: list[str]


class CategoryResponse(BaseModel):
    id: str
    name: str
    emoji: str


# --- Pagination ---

class PaginatedResponse(BaseModel):
    items: list  # Will be typed in router
    total: int
    page: int
    page_size: int
    pages: int


# --- Admin ---

class DashboardStatistics(BaseModel):
    total_users: int
    admin_users: int
    author_users: int
    total_articles: int
    published_articles: int
    unpublished_articles: int
    total_comments: int


class DashboardResponse(BaseModel):
    statistics: DashboardStatistics
    recent_articles: list[ArticleResponse]
    recent_users: list[UserResponse]


class MessageResponse(BaseModel):
    message: str


# Required for forward-reference resolution (UserDetail.articles)
UserDetail.model_rebuild()
