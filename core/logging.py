from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: str | int = "INFO", *, json: bool = True) -> None:
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stdout,
    )
    # SQLAlchemy echoes through its own logger; keep it at WARNING unless asked
    logging.getLogger("sqlalchemy.engine").setLevel(max(level, logging.WARNING))

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_user(user_id: int) -> None:
    """Attach ``user_id`` to every log line emitted by the current task."""
    structlog.contextvars.bind_contextvars(user_id=user_id)
