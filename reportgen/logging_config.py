"""Logging setup for generate_data runs.

Diagnostics always go to stderr; the output file only ever holds rows.
Level, format and an optional log file can come from the environment:

    REPORTGEN_LOG_LEVEL   DEBUG / INFO / WARNING / ERROR / CRITICAL (falls back to LOG_LEVEL)
    REPORTGEN_LOG_FORMAT  human / json / simple
    REPORTGEN_LOG_FILE    path of a rotating JSON log file
"""

import logging
import logging.handlers
import json
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from pathlib import Path

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]

LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'WARN': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

# LogRecord attributes that are not caller-supplied `extra=` fields
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; `extra=` fields (report, column...) are kept."""

    def __init__(self, include_context: bool = False):
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            'timestamp': created.strftime('%Y-%m-%dT%H:%M:%S.%f') + 'Z',
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if self.include_context:
            payload['location'] = f"{record.module}.{record.funcName}:{record.lineno}"
        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)
        payload.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS
        )
        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """`[LEVEL] time - logger - message`, colored by level on a terminal."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = False):
        super().__init__(
            fmt='[%(levelname)s] %(asctime)s - %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if not self.use_colors:
            return formatted
        return f"{self.COLORS.get(record.levelname, '')}{formatted}{self.RESET}"


def get_log_level_from_env() -> int:
    """REPORTGEN_LOG_LEVEL, then LOG_LEVEL; unknown names mean INFO."""
    name = os.environ.get('REPORTGEN_LOG_LEVEL') or os.environ.get('LOG_LEVEL', 'INFO')
    return LEVELS.get(name.upper(), logging.INFO)


def _console_formatter(format_type: str, use_colors: bool) -> logging.Formatter:
    if format_type == 'json':
        return JSONFormatter()
    if format_type == 'simple':
        return logging.Formatter('%(levelname)s: %(message)s')
    return HumanReadableFormatter(use_colors=use_colors)


def setup_logging(
    level: Optional[int] = None,
    format_type: Optional[str] = None,
    log_file: Optional[Path] = None,
    use_colors: bool = False,
) -> None:
    """
    Replace the root handlers with a stderr console handler and, when a log
    file is given (or REPORTGEN_LOG_FILE is set), a rotating JSON file handler.

    Args:
        level: Logging level (defaults to the environment, then INFO)
        format_type: 'human', 'json' or 'simple' (defaults to REPORTGEN_LOG_FORMAT)
        log_file: Optional path to a log file
        use_colors: Color console lines when stderr is a terminal
    """
    if level is None:
        level = get_log_level_from_env()
    if format_type is None:
        format_type = os.environ.get('REPORTGEN_LOG_FORMAT', 'human').lower()
    if log_file is None and os.environ.get('REPORTGEN_LOG_FILE'):
        log_file = Path(os.environ['REPORTGEN_LOG_FILE'])

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(_console_formatter(format_type, use_colors))
    root.addHandler(console)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # 10MB max, 5 backups
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(JSONFormatter(include_context=True))
        root.addHandler(file_handler)


def log_exception(logger: LoggerLike, message: str, exc: Exception) -> None:
    """Log `message: exc` at ERROR; the traceback only shows at DEBUG."""
    logger.error(
        f"{message}: {exc}",
        exc_info=logger.isEnabledFor(logging.DEBUG),
        extra={'exception_type': type(exc).__name__},
    )


def log_performance(logger: LoggerLike, operation: str, duration_seconds: float, **metrics: Any) -> None:
    """Log how long `operation` took, with counters as `extra=` fields."""
    logger.info(
        f"Performance: {operation} completed in {duration_seconds:.2f}s",
        extra={'operation': operation, 'duration_seconds': duration_seconds, **metrics},
    )
