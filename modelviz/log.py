"""Logging configuration for the modelviz metrics engine."""

import logging
import logging.handlers
import sys
from pathlib import Path

import colorlog

BASE_LOG_FORMAT = (
    "%(asctime)s %(levelname)8s %(message)s (%(name)s@%(filename)s:%(lineno)d)"
)
DATE_FORMAT = "%m-%d %H:%M:%S"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "uvicorn.access")


def setup_logging(
    level: int | str = logging.INFO,
    use_colors: bool = True,
    enable_file_logging: bool = False,
    log_dir: Path | None = None,
    is_test_env: bool = False,
) -> None:
    """Configure root logging for the metrics engine.

    Args:
        level: Logging level, either a ``logging`` constant or its name
        use_colors: Whether to colorize console output
        enable_file_logging: Whether to also write to a log file
        log_dir: Directory for log files (defaults to ./logs or ./logs/test)
        is_test_env: Whether this is a test environment
    """
    resolved_level = _resolve_level(level)

    handlers = [_create_console_handler(use_colors)]
    if enable_file_logging:
        if log_dir is None:
            log_dir = Path("logs", "test") if is_test_env else Path("logs")
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_create_file_handler(log_dir, is_test_env))

    logging.basicConfig(level=resolved_level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))


def _resolve_level(level: int | str) -> int:
    """Turn a level name such as ``"debug"`` into its numeric value."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def _create_console_handler(use_colors: bool) -> logging.Handler:
    console_handler = logging.StreamHandler(sys.stdout)

    if use_colors:
        console_formatter: logging.Formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)8s%(reset)s %(message)s "
            "\033[90m(%(name)s@%(filename)s:%(lineno)d)\033[0m",
            datefmt=DATE_FORMAT,
            log_colors=LOG_COLORS,
            style="%",
        )
    else:
        console_formatter = logging.Formatter(BASE_LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler.setFormatter(console_formatter)
    return console_handler


def _create_file_handler(log_dir: Path, is_test_env: bool) -> logging.Handler:
    """Test runs overwrite a single file, other runs rotate at 5MB."""
    if is_test_env:
        file_handler: logging.Handler = logging.FileHandler(
            log_dir / "test.log", mode="w", encoding="utf-8"
        )
    else:
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "modelviz.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=4,
            encoding="utf-8",
        )

    file_handler.setFormatter(logging.Formatter(BASE_LOG_FORMAT, datefmt=DATE_FORMAT))
    return file_handler


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_production_logging(level: int | str = logging.INFO) -> None:
    """Console plus rotating file logging for long-running processes."""
    setup_logging(level=level, enable_file_logging=True, is_test_env=False)


def setup_test_logging(level: int | str = logging.DEBUG) -> None:
    """Uncolored console plus an overwritten test log file."""
    setup_logging(
        level=level,
        use_colors=False,
        enable_file_logging=True,
        is_test_env=True,
    )
