import logging
import logging.config
import structlog
from typing import Optional
import sys

# Event keys whose values must never reach a log line
SECRET_KEYS = frozenset({
    "authorization",
    "password",
    "token",
    "access_token",
    "refresh_token",
    "refreshtoken",
    "newpassword",
})
REDACTED = "[redacted]"

_configured_with = None


def redact_secrets(logger, method_name, event_dict):
    """structlog processor masking credentials passed as log fields."""
    for key in list(event_dict.keys()):
        if key.lower().replace("-", "_") in SECRET_KEYS and event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure structured logging for the client.

    Calling it again with the same arguments is a no-op, so both the client
    factory and the command line can call it.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path. If None, logs to stderr only.
    """
    global _configured_with
    logger = structlog.get_logger("vehicleprep")
    if _configured_with == (log_level, log_file):
        return logger

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            redact_secrets,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stderr keeps stdout free for command output
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "plain",
            "stream": sys.stderr
        }
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "plain",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            # Records are already JSON-rendered by structlog
            "plain": {"format": "%(message)s"}
        },
        "handlers": handlers,
        "loggers": {
            "vehicleprep": {
                "level": log_level,
                "handlers": list(handlers),
                "propagate": False
            }
        }
    })

    _configured_with = (log_level, log_file)
    logger.info("Logging configured", level=log_level, file=log_file)
    return logger


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
