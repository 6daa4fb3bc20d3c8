import logging
import sys
from typing import Dict

import structlog
from masjid_directory.core.config import settings

# Third-party loggers that log every outbound call or connection at INFO
CHATTY_LOGGERS = ("httpx", "httpcore", "redis")


def log_levels() -> Dict[str, int]:
    """
    Levels applied by `configure_logging`, keyed by logger name ("" is root).

    Development logs everything at INFO. Elsewhere the root defaults to
    WARNING, but request lines and this package's own INFO events (new
    masajid, geocoding results, token checks) are kept.
    """
    is_local = settings.ENV.lower() == "development"
    default = "INFO" if is_local else "WARNING"
    root = logging.getLevelName((settings.LOG_LEVEL or default).upper())
    if not isinstance(root, int):
        raise ValueError(f"Unknown LOG_LEVEL: {settings.LOG_LEVEL!r}")

    levels = {"": root, "masjid_directory": min(root, logging.INFO)}
    for name in CHATTY_LOGGERS:
        levels[name] = root if is_local else max(root, logging.WARNING)
    # LoggingMiddleware already emits one line per request
    levels["uvicorn.access"] = logging.WARNING
    return levels


def configure_logging():
    """
    Routes stdlib and structlog output through one pipeline: console lines in
    development, JSON with structured tracebacks elsewhere.
    """
    is_local = settings.ENV.lower() == "development"

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
    ]

    if is_local:
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]
    else:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    levels = log_levels()
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=levels[""])
    for name, level in levels.items():
        logging.getLogger(name or None).setLevel(level)

    # uvicorn installs its own handlers; hand its records to the root logger
    for _log in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        logger = logging.getLogger(_log)
        logger.handlers = []
        logger.propagate = True
