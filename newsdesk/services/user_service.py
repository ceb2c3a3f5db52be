"""
User service: accounts, sign-in and admin user management.

Email uniqueness is checked up front and enforced again by the unique
index; both paths surface as ConflictError.  Deleting a user applies the
configured ``ON_USER_DELETE`` policy to the articles and comments they
authored.
"""
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.errors import ConflictError, NotFound, Unauthenticated, ValidationError
from newsdesk.models import Article, Comment, CommentLike, User, UserRole
from newsdesk.schemas import SignupRequest
from newsdesk.security import hash_password, verify_password
from newsdesk.services import article_service, comment_service

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def user_to_dict(user: User) -> dict:
    """Serialise a User without its password hash."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "profile_picture": user.profile_picture,
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "updated_at": user.updated_at.isoformat() if user.updated_at else None,
    }


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def _get_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

async def create_user(db: AsyncSession, data: SignupRequest, role: UserRole = UserRole.AUTHOR) -> User:
    """Register a new account; new sign-ups are always authors."""
    email = _normalize_email(data.email)
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.first() is not None:
        raise ConflictError("A user with this email already exists")

    user = User(
        name=data.name.strip(),
        email=email,
        password_hash=await hash_password(data.password),
        role=role.value,
        profile_picture=data.profile_picture,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        raise ConflictError("A user with this email already exists")
    logger.info("Registered user %s (%s)", user.id, user.role)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    result = await db.execute(select(User).where(User.email == _normalize_email(email)))
    user = result.scalar_one_or_none()
    if user is None or not await verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise Unauthenticated("Invalid email or password")
    return user


async def get_user(db: AsyncSession, user_id: int) -> dict:
    """Public profile: the user plus their published articles, newest first."""
    user = await _get_or_404(db, user_id)
    q = (
        article_service.with_author_and_tags()
        .where(Article.user_id == user_id, Article.published.is_(True))
        .order_by(Article.published_at.desc(), Article.id.desc())
    )
    articles = (await db.execute(q)).unique().scalars().all()

    data = user_to_dict(user)
    data["articles"] = [article_service.article_to_dict(a) for a in articles]
    return data


# ---------------------------------------------------------------------------
# Admin management
# ---------------------------------------------------------------------------

async def get_users(db: AsyncSession) -> list[dict]:
    """Return all users ordered by creation date (newest first)."""
    q = select(User).order_by(User.created_at.desc(), User.id.desc())
    result = await db.execute(q)
    return [user_to_dict(u) for u in result.scalars().all()]


async def get_user_account(db: AsyncSession, user_id: int) -> dict:
    return user_to_dict(await _get_or_404(db, user_id))


async def update_role(db: AsyncSession, user_id: int, role: str) -> dict:
    try:
        new_role = UserRole(role)
    except ValueError:
        raise ValidationError("Invalid role")

    user = await _get_or_404(db, user_id)
    user.role = new_role.value
    await db.flush()
    logger.info("User %s is now %s", user_id, new_role.value)
    return user_to_dict(user)


async def delete_user(
    db: AsyncSession, acting_admin: User, user_id: int, policy: str | None = None
) -> None:
    """
    Delete *user_id* according to *policy* (defaults to
    ``settings.ON_USER_DELETE``):

    ``cascade``  remove their articles (with comments) and their comments.
    ``orphan``   keep articles and comments with a null author.
    ``block``    refuse while they still own articles or comments.

    Likes given by the user are removed in every case.
    """
    policy = policy or settings.ON_USER_DELETE
    if user_id == acting_admin.id:
        raise ValidationError("Cannot delete your own account")
    user = await _get_or_404(db, user_id)

    if policy == "block":
        articles = (
            await db.execute(select(func.count()).select_from(Article).where(Article.user_id == user_id))
        ).scalar_one()
        comments = (
            await db.execute(select(func.count()).select_from(Comment).where(Comment.user_id == user_id))
        ).scalar_one()
        if articles or comments:
            raise ConflictError(
                f"User still owns {articles} article(s) and {comments} comment(s)"
            )
    elif policy == "cascade":
        article_ids = list(
            (await db.execute(select(Article.id).where(Article.user_id == user_id))).scalars().all()
        )
        await article_service.remove_articles(db, article_ids)
        await comment_service.delete_comments_where(db, Comment.user_id == user_id)
    elif policy == "orphan":
        await db.execute(update(Article).where(Article.user_id == user_id).values(user_id=None))
        await db.execute(update(Comment).where(Comment.user_id == user_id).values(user_id=None))
    else:
        raise ValidationError(f"Unknown user deletion policy: {policy}")

    await db.execute(delete(CommentLike).where(CommentLike.user_id == user_id))
    await db.delete(user)
    await db.flush()
    logger.info("Admin %s deleted user %s (policy=%s)", acting_admin.id, user_id, policy)
