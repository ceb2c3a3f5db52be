"""
Comment service — threaded, likeable comments on articles.

Design notes
------------
- Comments are one level deep: a reply points at its parent through
  ``parent_comment_id``; listings never walk the tree.
- Top-level comments are listed newest first, replies oldest first so a
  thread reads chronologically.
- Edit and delete are author-only (see ``newsdesk.authorization``); any
  signed-in user, the author included, may toggle a like.
- The like toggle is a set-membership mutation done in SQL (DELETE the
  ``(comment, user)`` row, INSERT it if nothing was deleted) rather than a
  read-modify-write of a list, so concurrent toggles by different users
  never overwrite each other.
- Service functions flush but do not commit; the transaction boundary is
  owned by the ``get_db`` dependency.
"""
import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from newsdesk.authorization import Action, ensure_authorized
from newsdesk.errors import ConflictError, NotFound, ValidationError
from newsdesk.models import Article, Comment, CommentLike, User

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _author_to_dict(author: User | None) -> dict | None:
    if author is None:
        return None
    return {
        "id": author.id,
        "name": author.name,
        "profile_picture": author.profile_picture,
    }


def _comment_to_dict(comment: Comment) -> dict:
    """Serialise a Comment with its author fields and ordered liker ids."""
    return {
        "id": comment.id,
        "content": comment.content,
        "article_id": comment.article_id,
        "parent_comment_id": comment.parent_comment_id,
        "author": _author_to_dict(comment.author),
        "likes": [like.user_id for like in comment.likes],
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
        "updated_at": comment.updated_at.isoformat() if comment.updated_at else None,
    }


def _clean_content(content: str | None) -> str:
    cleaned = (content or "").strip()
    if not cleaned:
        raise ValidationError("Comment content cannot be empty")
    return cleaned


def _populated():
    return select(Comment).options(joinedload(Comment.author), selectinload(Comment.likes))


async def _load_comment(db: AsyncSession, comment_id: int) -> Comment | None:
    """
    Fetch *comment_id* with author and likes loaded.

    ``populate_existing`` refreshes an instance already in the identity map
    so likes written by bulk statements in this transaction are visible.
    """
    q = _populated().where(Comment.id == comment_id).execution_options(populate_existing=True)
    result = await db.execute(q)
    return result.unique().scalar_one_or_none()


async def _get_or_404(db: AsyncSession, comment_id: int) -> Comment:
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    return comment


# ---------------------------------------------------------------------------
# Reads (public)
# ---------------------------------------------------------------------------

async def get_article_comments(db: AsyncSession, article_id: int) -> list[dict]:
    """Return the top-level comments of *article_id*, newest first."""
    q = (
        _populated()
        .where(Comment.article_id == article_id, Comment.parent_comment_id.is_(None))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    result = await db.execute(q)
    return [_comment_to_dict(c) for c in result.unique().scalars().all()]


async def get_replies(db: AsyncSession, comment_id: int) -> list[dict]:
    """
    Return the direct replies to *comment_id*, oldest first.

    The parent is not looked up: an unknown id simply has no replies.
    """
    q = (
        _populated()
        .where(Comment.parent_comment_id == comment_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    result = await db.execute(q)
    return [_comment_to_dict(c) for c in result.unique().scalars().all()]


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def create_comment(
    db: AsyncSession,
    user: User,
    content: str,
    article_id: int,
    parent_comment_id: int | None = None,
) -> dict:
    """
    Create a comment (or a reply when *parent_comment_id* is given) by *user*.

    Raises ValidationError for blank content before anything else is
    checked, NotFound when the article or parent comment does not exist and
    ValidationError when the parent belongs to a different article.
    """
    cleaned = _clean_content(content)

    if await db.get(Article, article_id) is None:
        raise NotFound("Article not found")

    if parent_comment_id is not None:
        parent = await db.get(Comment, parent_comment_id)
        if parent is None:
            raise NotFound("Parent comment not found")
        if parent.article_id != article_id:
            raise ValidationError("Parent comment belongs to a different article")

    comment = Comment(
        content=cleaned,
        article_id=article_id,
        user_id=user.id,
        parent_comment_id=parent_comment_id,
    )
    db.add(comment)
    await db.flush()
    logger.info("User %s commented %s on article %s", user.id, comment.id, article_id)

    return _comment_to_dict(await _load_comment(db, comment.id))


async def update_comment(db: AsyncSession, user: User, comment_id: int, content: str) -> dict:
    """Replace the content of *comment_id*; only its author may do this."""
    comment = await _get_or_404(db, comment_id)
    ensure_authorized(user, comment, Action.UPDATE)

    comment.content = _clean_content(content)
    await db.flush()
    logger.info("User %s edited comment %s", user.id, comment_id)

    return _comment_to_dict(await _load_comment(db, comment_id))


async def delete_comment(db: AsyncSession, user: User, comment_id: int) -> None:
    """
    Permanently remove *comment_id*; only its author may do this.

    Replies are kept: their parent reference is cleared, which makes them
    top-level comments of the same article.
    """
    comment = await _get_or_404(db, comment_id)
    ensure_authorized(user, comment, Action.DELETE)

    await detach_replies(db, [comment_id])
    await db.execute(delete(CommentLike).where(CommentLike.comment_id == comment_id))
    await db.delete(comment)
    await db.flush()
    logger.info("User %s deleted comment %s", user.id, comment_id)


async def toggle_like(db: AsyncSession, user: User, comment_id: int) -> dict:
    """
    Flip *user*'s membership in the likes of *comment_id*.

    Calling it twice restores the original state; there is no separate
    "unlike" operation.
    """
    comment = await _get_or_404(db, comment_id)
    ensure_authorized(user, comment, Action.LIKE)

    removed = await db.execute(
        delete(CommentLike).where(
            CommentLike.comment_id == comment_id, CommentLike.user_id == user.id
        )
    )
    if removed.rowcount:
        logger.info("User %s unliked comment %s", user.id, comment_id)
    else:
        db.add(CommentLike(comment_id=comment_id, user_id=user.id))
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("Like was changed concurrently, try again")
        logger.info("User %s liked comment %s", user.id, comment_id)

    return _comment_to_dict(await _load_comment(db, comment_id))


# ---------------------------------------------------------------------------
# Bulk helpers used by article and user deletion
# ---------------------------------------------------------------------------

async def detach_replies(db: AsyncSession, parent_ids: list[int]) -> None:
    """Clear the parent reference of every reply to one of *parent_ids*."""
    if not parent_ids:
        return
    await db.execute(
        update(Comment)
        .where(Comment.parent_comment_id.in_(parent_ids))
        .values(parent_comment_id=None)
    )


async def delete_comments_where(db: AsyncSession, *criteria) -> int:
    """
    Delete every comment matching *criteria* together with its likes,
    detaching surviving replies first.  Returns the number removed.
    """
    ids = list((await db.execute(select(Comment.id).where(*criteria))).scalars().all())
    if not ids:
        return 0
    await detach_replies(db, ids)
    await db.execute(delete(CommentLike).where(CommentLike.comment_id.in_(ids)))
    await db.execute(delete(Comment).where(Comment.id.in_(ids)))
    return len(ids)
