import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from toolrelay.config.schema import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Capped at WARNING: these log every request at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore")


def _file_handler(config: LoggingConfig) -> logging.Handler:
    log_path = Path(config.file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(log_path, maxBytes=config.max_bytes, backupCount=config.backup_count)


def setup_logging(config: LoggingConfig) -> None:
    """Configure root logger with console output and an optional rotating file."""
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(_file_handler(config))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
