"""
Article service — business logic for the Article aggregate.

Design notes
------------
- Slugs are derived from the title only (lowercase, accents folded to
  ASCII, everything but letters/digits/hyphens dropped).  There is no
  suffixing on collision: a second article with the same slug is rejected
  with ConflictError.
- ``published_at`` mirrors the publish toggle: publish stamps it, unpublish
  clears it.
- Mutations go through ``ensure_authorized`` (owner or admin).
- Eager loading via ``joinedload`` (author) and ``selectinload`` (tags) is
  used throughout; relationships are ``noload`` by default.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency in the router layer.
"""
import logging
import math
import re
import unicodedata
from datetime import datetime, timezone

from sqlalchemy import asc, delete, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from newsdesk.authorization import Action, ensure_authorized
from newsdesk.categories import category_name
from newsdesk.errors import ConflictError, NotFound, ValidationError
from newsdesk.models import Article, Comment, Tag, User, article_tags
from newsdesk.schemas import ArticleCreate, ArticleUpdate, PaginatedResponse
from newsdesk.services import comment_service

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACE_RE = re.compile(r"\s+")
_SLUG_DASH_RE = re.compile(r"-+")

# Columns that are safe to sort by; guards against arbitrary attribute access.
_SORTABLE_COLUMNS: frozenset[str] = frozenset({"published_at", "created_at", "title"})

# Columns that cannot be cleared through an update payload.
_REQUIRED_FIELDS: frozenset[str] = frozenset({"title", "category"})


def slugify(text: str) -> str:
    """Return a URL-safe, lowercase ASCII slug derived from *text*."""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = _SLUG_STRIP_RE.sub("", text.lower().strip())
    text = _SLUG_SPACE_RE.sub("-", text)
    return _SLUG_DASH_RE.sub("-", text).strip("-")


def _slug_for(title: str) -> str:
    slug = slugify(title)
    if not slug:
        raise ValidationError("Title must contain at least one letter or digit")
    return slug


def _resolve_sort_column(sort_by: str):
    if sort_by in _SORTABLE_COLUMNS:
        return getattr(Article, sort_by)
    return Article.published_at


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _author_summary(author: User | None) -> dict | None:
    if author is None:
        return None
    return {"id": author.id, "name": author.name, "profile_picture": author.profile_picture}


def article_to_dict(article: Article, detail: bool = False) -> dict:
    """Serialise an Article; *detail* adds the body text."""
    data = {
        "id": article.id,
        "title": article.title,
        "slug": article.slug,
        "original_source": article.original_source,
        "summary": article.summary,
        "category": article.category,
        "cover_image": article.cover_image,
        "published": article.published,
        "published_at": _iso(article.published_at),
        "created_at": _iso(article.created_at),
        "updated_at": _iso(article.updated_at),
        "user_id": article.user_id,
        "author": _author_summary(article.author),
        "tags": [{"id": t.id, "name": t.name} for t in article.tags],
    }
    if detail:
        data["explanation"] = article.explanation
    return data


def with_author_and_tags():
    return select(Article).options(joinedload(Article.author), selectinload(Article.tags))


# ---------------------------------------------------------------------------
# Tag resolution helper (used by create / update)
# ---------------------------------------------------------------------------

async def _resolve_tags(db: AsyncSession, tag_names: list[str]) -> list[Tag]:
    """
    Return Tag instances for each distinct, non-blank name in *tag_names*,
    creating any that do not yet exist.
    """
    tags: list[Tag] = []
    seen: set[str] = set()
    for raw in tag_names:
        name = raw.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        result = await db.execute(select(Tag).where(Tag.name == name))
        tag = result.scalar_one_or_none()
        if not tag:
            tag = Tag(name=name)
            db.add(tag)
            await db.flush()
        tags.append(tag)
    return tags


async def _ensure_slug_free(db: AsyncSession, slug: str, article_id: int | None = None) -> None:
    q = select(Article.id).where(Article.slug == slug)
    if article_id is not None:
        q = q.where(Article.id != article_id)
    if (await db.execute(q)).first() is not None:
        raise ConflictError(f"An article with slug '{slug}' already exists")


async def _flush_or_conflict(db: AsyncSession, slug: str) -> None:
    # The pre-check can lose a race; the unique index is the final word.
    try:
        await db.flush()
    except IntegrityError:
        raise ConflictError(f"An article with slug '{slug}' already exists")


async def _load_article(db: AsyncSession, article_id: int) -> Article | None:
    q = (
        with_author_and_tags()
        .where(Article.id == article_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    return result.unique().scalar_one_or_none()


async def _get_or_404(db: AsyncSession, article_id: int) -> Article:
    article = await db.get(Article, article_id)
    if article is None:
        raise NotFound("Article not found")
    return article


# ---------------------------------------------------------------------------
# Public reads
# ---------------------------------------------------------------------------

async def get_articles(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "published_at",
    sort_order: str = "desc",
) -> PaginatedResponse:
    """Return a page of published articles (newest publication first by default)."""
    count_q = select(func.count()).select_from(Article).where(Article.published.is_(True))
    total: int = (await db.execute(count_q)).scalar_one()

    sort_col = _resolve_sort_column(sort_by)
    if sort_order == "desc":
        order_by = (desc(sort_col), desc(Article.id))
    else:
        order_by = (asc(sort_col), asc(Article.id))

    q = (
        with_author_and_tags()
        .where(Article.published.is_(True))
        .order_by(*order_by)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(q)
    articles = result.unique().scalars().all()

    return PaginatedResponse(
        items=[article_to_dict(a) for a in articles],
        total=total,
        page=page,
        page_size=page_size,
        pages=math.ceil(total / page_size) if total > 0 else 0,
    )


async def get_article_by_slug(db: AsyncSession, slug: str) -> dict:
    result = await db.execute(with_author_and_tags().where(Article.slug == slug))
    article = result.unique().scalar_one_or_none()
    if article is None:
        raise NotFound("Article not found")
    return article_to_dict(article, detail=True)


async def get_articles_by_category(db: AsyncSession, category_id: str) -> list[dict]:
    """
    Return the published articles of one category, newest first.

    *category_id* is the URL form (``real-estate``); an unknown id raises
    NotFound, a known category without articles yields an empty list.
    """
    name = category_name(category_id)
    if name is None:
        raise NotFound(f"Unknown category: {category_id}")
    return await _published_in(db, [name])


async def get_articles_by_categories(db: AsyncSession, category_ids: list[str]) -> list[dict]:
    """Published articles in any of *category_ids*; unknown ids are ignored."""
    names = [n for n in (category_name(c) for c in category_ids) if n is not None]
    if not names:
        return []
    return await _published_in(db, names)


async def _published_in(db: AsyncSession, names: list[str]) -> list[dict]:
    q = (
        with_author_and_tags()
        .where(Article.category.in_(names), Article.published.is_(True))
        .order_by(Article.created_at.desc(), Article.id.desc())
    )
    result = await db.execute(q)
    return [article_to_dict(a) for a in result.unique().scalars().all()]


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def create_article(db: AsyncSession, user: User, data: ArticleCreate) -> dict:
    """Create an article owned by *user* and return its detail dict."""
    slug = _slug_for(data.title)
    await _ensure_slug_free(db, slug)

    article = Article(
        title=data.title,
        slug=slug,
        original_source=data.original_source,
        summary=data.summary,
        explanation=data.explanation,
        category=data.category,
        cover_image=data.cover_image,
        published=data.published,
        published_at=datetime.now(timezone.utc) if data.published else None,
        user_id=user.id,
    )
    if data.tags:
        article.tags = await _resolve_tags(db, data.tags)

    db.add(article)
    await _flush_or_conflict(db, slug)
    logger.info("User %s created article %s (%s)", user.id, article.id, slug)

    return article_to_dict(await _load_article(db, article.id), detail=True)


async def update_article(
    db: AsyncSession, user: User, article_id: int, data: ArticleUpdate
) -> dict:
    """
    Partially update an article.  Only fields present in the payload are
    touched; a new title regenerates the slug.
    """
    article = await _load_article(db, article_id)
    if article is None:
        raise NotFound("Article not found")
    ensure_authorized(user, article, Action.UPDATE)

    update_data = data.model_dump(exclude_unset=True)
    tags_data: list[str] | None = update_data.pop("tags", None)

    for field, value in update_data.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(article, field, value)

    if update_data.get("title"):
        slug = _slug_for(update_data["title"])
        if slug != article.slug:
            await _ensure_slug_free(db, slug, article_id)
            article.slug = slug

    if tags_data is not None:
        article.tags = await _resolve_tags(db, tags_data)

    await _flush_or_conflict(db, article.slug)
    logger.info("User %s updated article %s", user.id, article_id)
    return article_to_dict(await _load_article(db, article_id), detail=True)


async def publish_article(db: AsyncSession, user: User, article_id: int) -> dict:
    article = await _get_or_404(db, article_id)
    ensure_authorized(user, article, Action.PUBLISH)

    article.published = True
    article.published_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("User %s published article %s", user.id, article_id)
    return article_to_dict(await _load_article(db, article_id), detail=True)


async def unpublish_article(db: AsyncSession, user: User, article_id: int) -> dict:
    article = await _get_or_404(db, article_id)
    ensure_authorized(user, article, Action.UNPUBLISH)

    article.published = False
    article.published_at = None
    await db.flush()
    logger.info("User %s unpublished article %s", user.id, article_id)
    return article_to_dict(await _load_article(db, article_id), detail=True)


async def delete_article(db: AsyncSession, user: User, article_id: int) -> None:
    """Delete an article together with its comments, likes and tag links."""
    article = await _get_or_404(db, article_id)
    ensure_authorized(user, article, Action.DELETE)

    await remove_articles(db, [article_id])
    logger.info("User %s deleted article %s", user.id, article_id)


async def remove_articles(db: AsyncSession, article_ids: list[int]) -> None:
    """
    Delete *article_ids* and everything hanging off them without relying on
    database-level cascades (SQLite does not enforce them by default).
    """
    if not article_ids:
        return
    await comment_service.delete_comments_where(db, Comment.article_id.in_(article_ids))
    await db.execute(article_tags.delete().where(article_tags.c.article_id.in_(article_ids)))
    await db.execute(delete(Article).where(Article.id.in_(article_ids)))
    await db.flush()
