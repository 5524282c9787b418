"""Centralized logging configuration for the hedger."""

import json
import logging
import logging.handlers
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional


class LogFormat(Enum):
    """Log format types."""

    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format_type: LogFormat = LogFormat.DETAILED
    log_file: Optional[Path] = None
    max_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5
    colorize_console: bool = True
    sensitive_fields: List[str] = field(
        default_factory=lambda: ["password", "secret", "private_key", "token", "api_key"]
    )


LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[1m\033[31m",
}
RESET = "\033[0m"


class SensitiveDataFilter(logging.Filter):
    """Redacts ``field=value`` / ``"field": "value"`` pairs for secret-looking fields."""

    def __init__(self, sensitive_fields: List[str]):
        super().__init__()
        self._patterns = [
            re.compile(rf'({name}["\']?\s*[:=]\s*["\']?)([^"\'\s,}}\]]+)', re.IGNORECASE)
            for name in sensitive_fields
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            for pattern in self._patterns:
                record.msg = pattern.sub(r"\1[REDACTED]", record.msg)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields land under ``extra``."""

    _standard_keys = set(
        logging.LogRecord("", 0, "", 0, "", (), None).__dict__
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {
            k: v for k, v in record.__dict__.items()
            if k not in self._standard_keys and not k.startswith("_")
        }
        if extra:
            log_data["extra"] = extra

        # Fixed-point ints exceed JSON number precision in most readers
        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        color = LEVEL_COLORS.get(original, "")
        record.levelname = f"{color}{original}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _build_formatter(config: LoggingConfig, for_console: bool) -> logging.Formatter:
    if config.format_type == LogFormat.JSON:
        return JsonFormatter()

    fmt = SIMPLE_FORMAT if config.format_type == LogFormat.SIMPLE else DETAILED_FORMAT
    if for_console and config.colorize_console:
        return ColoredFormatter(fmt, datefmt=DATE_FORMAT)
    return logging.Formatter(fmt, datefmt=DATE_FORMAT)


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Install console (and optional rotating file) handlers on the root logger.

    Calling it again replaces the handlers installed by a previous call.

    Returns:
        The root logger
    """
    config = config or LoggingConfig()
    level = getattr(logging, config.level.upper())

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_build_formatter(config, for_console=True))
    root.addHandler(console)

    if config.log_file:
        log_file = Path(config.log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(_build_formatter(config, for_console=False))
        root.addHandler(file_handler)

    redactor = SensitiveDataFilter(config.sensitive_fields)
    for handler in root.handlers:
        handler.setLevel(level)
        handler.addFilter(redactor)

    return root


def logging_config_from_settings(settings) -> LoggingConfig:
    """Build a LoggingConfig from a HedgerConfig."""
    return LoggingConfig(
        level=settings.log_level,
        format_type=LogFormat(settings.log_format.value),
        log_file=settings.log_file,
    )
