"""Logging setup, called once from the application lifespan."""
import logging
import sys

from newsdesk.config import settings

# Third-party loggers that get their own level instead of the root one.
_SQL_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "asyncpg")
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> None:
    root = logging.getLogger()
    root.setLevel(_parse_level(settings.LOG_LEVEL))

    # Avoid stacking handlers when the app is created more than once (tests, reload).
    if not any(getattr(h, "_newsdesk", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._newsdesk = True
        root.addHandler(handler)

    sql_level = _parse_level(settings.LOG_LEVEL_SQL)
    for name in _SQL_LOGGERS:
        logging.getLogger(name).setLevel(sql_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
