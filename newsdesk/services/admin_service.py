"""
Admin service: read-only rollups for the dashboard.

Every function takes the calling identity and rejects non-admins even
when the router already applied ``require_admin``.  Nothing here writes.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.errors import InternalError, NotFound, Unauthenticated, Unauthorized
from newsdesk.models import Article, Comment, User, UserRole
from newsdesk.services.article_service import article_to_dict, with_author_and_tags
from newsdesk.services.user_service import user_to_dict

logger = logging.getLogger(__name__)


def _require_admin(user: User | None) -> None:
    if user is None:
        raise Unauthenticated()
    if not user.is_admin:
        raise Unauthorized("Access denied. Admin privileges required.")


async def _count(db: AsyncSession, model, *criteria) -> int:
    q = select(func.count()).select_from(model)
    if criteria:
        q = q.where(*criteria)
    return (await db.execute(q)).scalar_one()


async def get_dashboard(db: AsyncSession, admin: User, limit: int | None = None) -> dict:
    """
    Return identity/article counts plus the *limit* most recent articles
    and users (``settings.ADMIN_RECENT_LIMIT`` by default).
    """
    _require_admin(admin)
    try:
        return await _dashboard(db, limit or settings.ADMIN_RECENT_LIMIT)
    except SQLAlchemyError as exc:
        logger.exception("Dashboard aggregation failed")
        raise InternalError("Error fetching dashboard data", error=str(exc))


async def _dashboard(db: AsyncSession, limit: int) -> dict:
    total_articles = await _count(db, Article)
    published_articles = await _count(db, Article, Article.published.is_(True))
    statistics = {
        "total_users": await _count(db, User),
        "admin_users": await _count(db, User, User.role == UserRole.ADMIN.value),
        "author_users": await _count(db, User, User.role == UserRole.AUTHOR.value),
        "total_articles": total_articles,
        "published_articles": published_articles,
        "unpublished_articles": total_articles - published_articles,
        "total_comments": await _count(db, Comment),
    }

    recent_articles = (
        await db.execute(
            with_author_and_tags()
            .order_by(Article.created_at.desc(), Article.id.desc())
            .limit(limit)
        )
    ).unique().scalars().all()
    recent_users = (
        await db.execute(
            select(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit)
        )
    ).scalars().all()

    return {
        "statistics": statistics,
        "recent_articles": [article_to_dict(a) for a in recent_articles],
        "recent_users": [user_to_dict(u) for u in recent_users],
    }


async def get_all_articles(db: AsyncSession, admin: User) -> list[dict]:
    """Every article, drafts included, newest first."""
    _require_admin(admin)
    q = with_author_and_tags().order_by(Article.created_at.desc(), Article.id.desc())
    result = await db.execute(q)
    return [article_to_dict(a) for a in result.unique().scalars().all()]


async def get_article(db: AsyncSession, admin: User, article_id: int) -> dict:
    """Any article by id, drafts included, with its body text."""
    _require_admin(admin)
    result = await db.execute(with_author_and_tags().where(Article.id == article_id))
    article = result.unique().scalar_one_or_none()
    if article is None:
        raise NotFound("Article not found")
    return article_to_dict(article, detail=True)
