# storefront/utils/logging.py
import logging

import structlog

from storefront.utils.settings import LOG_LEVEL

_configured = False


def _configure() -> None:
    global _configured

    logging.basicConfig(format="%(message)s", level=LOG_LEVEL)

    # biblioteki sa glosne na INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("celery").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(LOG_LEVEL)
        ),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str):
    if not _configured:
        _configure()
    return structlog.get_logger(name)
