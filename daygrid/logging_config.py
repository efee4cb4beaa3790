import logging
import sys

import structlog

from daygrid.config import settings


def setup_logging(level: str | None = None):
    # stdout carries the rendered grid; log lines go to stderr.
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        force=True,
        level=getattr(logging, (level or settings.LOG_LEVEL), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
