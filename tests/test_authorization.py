"""Unit tests for the authorization gate; no database involved."""
import pytest

from newsdesk.authorization import Action, authorize, ensure_authorized, record_kind, RecordKind
from newsdesk.errors import Unauthenticated, Unauthorized
from newsdesk.models import Article, Comment, User, UserRole

OWNER = User(id=1, name="Owner", email="owner@example.com", password_hash="x", role=UserRole.AUTHOR.value)
OTHER = User(id=2, name="Other", email="other@example.com", password_hash="x", role=UserRole.AUTHOR.value)
ADMIN = User(id=3, name="Admin", email="admin@example.com", password_hash="x", role=UserRole.ADMIN.value)

ARTICLE_MUTATIONS = [Action.UPDATE, Action.DELETE, Action.PUBLISH, Action.UNPUBLISH]
COMMENT_MUTATIONS = [Action.UPDATE, Action.DELETE]


def _article(user_id=1) -> Article:
    return Article(id=10, title="t", slug="t", category="World", user_id=user_id)


def _comment(user_id=1) -> Comment:
    return Comment(id=20, content="c", article_id=10, user_id=user_id)


def test_record_kind():
    assert record_kind(_article()) is RecordKind.ARTICLE
    assert record_kind(_comment()) is RecordKind.COMMENT
    with pytest.raises(TypeError):
        record_kind(OWNER)


@pytest.mark.parametrize("action", ARTICLE_MUTATIONS)
def test_article_owner_or_admin(action):
    assert authorize(OWNER, _article(), action)
    assert authorize(ADMIN, _article(), action)
    assert not authorize(OTHER, _article(), action)


@pytest.mark.parametrize("action", ARTICLE_MUTATIONS)
def test_authorless_article_is_admin_only(action):
    assert authorize(ADMIN, _article(user_id=None), action)
    assert not authorize(OWNER, _article(user_id=None), action)


@pytest.mark.parametrize("action", COMMENT_MUTATIONS)
def test_comment_author_only(action):
    assert authorize(OWNER, _comment(), action)
    assert not authorize(OTHER, _comment(), action)
    assert not authorize(ADMIN, _comment(), action)


@pytest.mark.parametrize("user", [OWNER, OTHER, ADMIN])
def test_anyone_signed_in_may_like(user):
    assert authorize(user, _comment(), Action.LIKE)


def test_unlisted_pairs_are_denied():
    assert not authorize(ADMIN, _article(), Action.LIKE)
    assert not authorize(OWNER, _comment(), Action.PUBLISH)


def test_anonymous_is_denied():
    assert not authorize(None, _comment(), Action.LIKE)
    with pytest.raises(Unauthenticated):
        ensure_authorized(None, _comment(), Action.LIKE)


def test_ensure_authorized_raises_unauthorized():
    with pytest.raises(Unauthorized) as exc_info:
        ensure_authorized(OTHER, _comment(), Action.DELETE)
    assert exc_info.value.status_code == 403
    ensure_authorized(OWNER, _comment(), Action.DELETE)
