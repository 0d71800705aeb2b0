"""Structured logging — structlog events rendered through stdlib handlers.

Every module logs with ``structlog.get_logger(__name__)`` and event-style
names (``query.filter_skipped``, ``order.status_changed``).  Records from
third-party libraries go through the same formatter, so one stream carries
both.
"""

from __future__ import annotations

import logging.config
import os

import structlog

# Third-party loggers and the level they are held at.
_QUIET_LOGGERS: dict[str, str] = {
    "uvicorn.access": "WARNING",
    "uvicorn.error": "INFO",
    "sqlalchemy.engine": "WARNING",
    "asyncpg": "WARNING",
    "aiosqlite": "WARNING",
}


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(fmt: str) -> structlog.types.Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    query_level: str | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Arguments override the environment:
        ORDERHUB_LOG_LEVEL        — application level (default: INFO)
        ORDERHUB_LOG_FORMAT       — console | json (default: console)
        ORDERHUB_QUERY_LOG_LEVEL  — ``orderhub.query`` level (default: app level);
                                    set DEBUG to see skipped filters and sorts
    """
    level = (level or os.environ.get("ORDERHUB_LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.environ.get("ORDERHUB_LOG_FORMAT", "console")).lower()
    query_level = (query_level or os.environ.get("ORDERHUB_QUERY_LOG_LEVEL", level)).upper()

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    loggers = {name: {"level": lvl} for name, lvl in _QUIET_LOGGERS.items()}
    loggers["orderhub"] = {"level": level}
    loggers["orderhub.query"] = {"level": query_level}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(fmt),
                    ],
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "structlog",
                },
            },
            "root": {"handlers": ["stdout"], "level": level},
            "loggers": loggers,
        }
    )
