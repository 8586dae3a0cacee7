"""Structured logging for the console library and scripts.

structlog events and plain stdlib records (urllib3 connection warnings,
for instance) go through one ProcessorFormatter, so a kiosk's log stream
has a single format: coloured key=value lines on a terminal, JSON lines
when LOG_JSON is set. Everything is written to stderr; the scripts keep
stdout for their own output.

    log = get_logger(__name__)
    log.info("schedules_fetched", day="Monday", count=12)
"""

import logging
import sys

import structlog

# Applied to structlog events and foreign stdlib records alike.
_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=False),
]


def _renderer(json_output: bool) -> list:
    if json_output:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer()]


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Route structlog and stdlib logging to stderr through one formatter.

    Args:
        json_output: Render JSON lines instead of console output.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_renderer(json_output),
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    logging.getLogger("urllib3").setLevel(max(numeric_level, logging.WARNING))


def setup_logging_from_config(config) -> None:
    """Configure logging from a TimetableConfig instance."""
    setup_logging(json_output=config.log_json, log_level=config.log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
