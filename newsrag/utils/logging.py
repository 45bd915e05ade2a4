"""Structured logging setup using structlog.

One shared processor chain feeds a coloured ConsoleRenderer in development
and a JSONRenderer in production.  The caller passes ``log_level`` and
``app_env`` from :class:`~newsrag.config.settings.Settings`; this module
never reads the environment itself.

Standard-library ``logging`` (uvicorn, httpx, openai, aiosqlite) is routed
through the same chain.  Client libraries that log once per request are
held at WARNING unless the configured level is DEBUG.
"""

import logging
import sys

import structlog

PRODUCTION_ENV = "production"

_PER_REQUEST_LOGGERS = ("httpx", "httpcore", "openai", "aiosqlite", "faker")


def configure_logging(log_level: str = "INFO", app_env: str = "development") -> structlog.BoundLogger:
    """Configure structlog and the stdlib bridge for *app_env*.

    Args:
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
        app_env: ``Settings.app_env``; ``"production"`` selects JSON output.

    Returns:
        A configured structlog BoundLogger.
    """
    level = log_level.upper()
    use_json = app_env == PRODUCTION_ENV

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if use_json:
        # JSON cannot carry a live traceback object.
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *shared_processors,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    library_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _PER_REQUEST_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a named structlog logger, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
