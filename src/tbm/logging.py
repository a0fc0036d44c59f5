"""Logging for tbm: structlog events on stderr, apart from user messages.

User-facing messages go through the ``output`` callable of the command line
interface (stdout by default). Log events never share that stream: as a
library only warnings and errors reach stderr, and ``main()`` switches to
``setup_logging`` driven by ``TBM_LOG_LEVEL``, ``TBM_LOG_JSON`` and
``TBM_LOG_FILE``.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import Processor

DEFAULT_LEVEL = logging.WARNING

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# handlers added by setup_logging, replaced on the next call
_handlers: list[logging.Handler] = []


def parse_level(level: str | None) -> int | None:
    """Map a level name such as ``"info"`` to a logging level.

    Args:
        level: Level name, case-insensitive; empty means the default

    Returns:
        Numeric level, or None if the name is not a logging level
    """
    if level is None or not level.strip():
        return DEFAULT_LEVEL
    # getLevelName maps unknown names to a "Level X" string
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else None


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # resolved per call so a replaced sys.stderr is picked up
    return structlog.PrintLogger(sys.stderr)


def configure_library_logging() -> None:
    """Route log events to stderr, dropping anything below WARNING.

    Installed when the package is imported, so calling ``parse_and_run`` from
    other code does not print log lines among its messages.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(DEFAULT_LEVEL),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def reset_handlers() -> None:
    """Remove and close the handlers installed by ``setup_logging``."""
    root_logger = logging.getLogger()
    while _handlers:
        handler = _handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()


def setup_logging(
    level: str | None = None,
    json_format: bool = False,
    log_file: str | None = None,
) -> int:
    """Configure logging for the ``tbm`` command.

    Events go through the standard library root logger to stderr and,
    optionally, to ``log_file``. An unknown level name falls back to WARNING
    and is reported as a warning instead of failing the command.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Render events as JSON instead of console lines
        log_file: Optional file that also receives every event

    Returns:
        The numeric level in effect
    """
    log_level = parse_level(level)
    unknown_level = log_level is None
    if log_level is None:
        log_level = DEFAULT_LEVEL

    root_logger = logging.getLogger()
    reset_handlers()
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    _handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        _handlers.append(file_handler)

    for handler in _handlers:
        root_logger.addHandler(handler)

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    if unknown_level:
        get_logger(__name__).warning(
            "Unknown log level, using WARNING", level=level
        )
    return log_level


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]
