"""
Authorization gate.

A single decision function, ``authorize(identity, record, action)``, looks
up the rule for the ``(record kind, action)`` pair in ``_POLICIES``.
Articles may be mutated by their owner or by an admin; comments may only be
edited or deleted by their author (admins get no override) but may be liked
by anyone who is signed in.  Pairs missing from the table are denied.
"""
import enum
import logging
from typing import Callable

from newsdesk.errors import Unauthenticated, Unauthorized
from newsdesk.models import Article, Comment, User

logger = logging.getLogger(__name__)


class RecordKind(str, enum.Enum):
    ARTICLE = "article"
    COMMENT = "comment"


class Action(str, enum.Enum):
    UPDATE = "update"
    DELETE = "delete"
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    LIKE = "like"


Rule = Callable[[User, Article | Comment], bool]


def _is_owner(identity: User, record: Article | Comment) -> bool:
    return record.user_id is not None and record.user_id == identity.id


def _owner_or_admin(identity: User, record: Article | Comment) -> bool:
    return identity.is_admin or _is_owner(identity, record)


def _any_identity(identity: User, record: Article | Comment) -> bool:
    return True


_POLICIES: dict[tuple[RecordKind, Action], Rule] = {
    (RecordKind.ARTICLE, Action.UPDATE): _owner_or_admin,
    (RecordKind.ARTICLE, Action.DELETE): _owner_or_admin,
    (RecordKind.ARTICLE, Action.PUBLISH): _owner_or_admin,
    (RecordKind.ARTICLE, Action.UNPUBLISH): _owner_or_admin,
    (RecordKind.COMMENT, Action.UPDATE): _is_owner,
    (RecordKind.COMMENT, Action.DELETE): _is_owner,
    (RecordKind.COMMENT, Action.LIKE): _any_identity,
}


def record_kind(record: Article | Comment) -> RecordKind:
    if isinstance(record, Article):
        return RecordKind.ARTICLE
    if isinstance(record, Comment):
        return RecordKind.COMMENT
    raise TypeError(f"No authorization policy for {type(record).__name__}")


def authorize(identity: User | None, record: Article | Comment, action: Action) -> bool:
    """Return True when *identity* may perform *action* on *record*."""
    if identity is None:
        return False
    rule = _POLICIES.get((record_kind(record), action))
    return rule is not None and rule(identity, record)


def ensure_authorized(identity: User | None, record: Article | Comment, action: Action) -> None:
    """Raise Unauthenticated / Unauthorized unless ``authorize`` allows the action."""
    if identity is None:
        raise Unauthenticated()
    if not authorize(identity, record, action):
        kind = record_kind(record)
        logger.warning(
            "Denied %s on %s %s for user %s", action.value, kind.value, record.id, identity.id
        )
        raise Unauthorized(f"Not authorized to {action.value} this {kind.value}")
