"""
Logging configuration for CineGrok.

Every module logs through get_logger("<area>.<module>"), so all records sit
under the "cinegrok" namespace and share one stdout handler.
"""
import logging
import sys

from cinegrok.app.core.config import settings

# Client libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "boto3", "urllib3", "openai")


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure root logging once per process and return the cinegrok logger."""
    level_val = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=level_val,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level_val, logging.WARNING))
    app_logger = logging.getLogger("cinegrok")
    app_logger.setLevel(level_val)
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for an area of the app, e.g. get_logger("api.filmmakers")."""
    return logging.getLogger(f"cinegrok.{name}")
