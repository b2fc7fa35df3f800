"""
Structured JSON logging for the DemandRank pipeline.

Every component logs to its own JSONL file (``<logs_dir>/<name>.jsonl``,
DEBUG+, rotated at 10 MB with 5 backups) and to stdout at the configured
console level (INFO by default).

Structured fields ride along with a message through ``extra``:

    logger.info("Partition settled", extra={"context": {"chunk": 3, "loaded": 4}})

They are merged into the JSON line and appended to the console line.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

_MAX_BYTES = 10 * 1024 * 1024   # 10 MB
_BACKUP_COUNT = 5
_CONSOLE_FMT = "%(asctime)s | %(name)-16s | %(levelname)-7s | %(message)s%(context_suffix)s"
_RESERVED = {"timestamp", "level", "logger", "message", "location"}


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, structured context fields inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for key, value in _context(record).items():
            entry[f"ctx_{key}" if key in _RESERVED else key] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable line with ``key=value`` context appended."""

    def __init__(self):
        super().__init__(_CONSOLE_FMT)

    def format(self, record: logging.LogRecord) -> str:
        context = _context(record)
        record.context_suffix = (
            " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]" if context else ""
        )
        return super().format(record)


# Settings read once from config.json
_settings: Optional[Dict[str, Any]] = None


def _read_settings() -> Dict[str, Any]:
    """
    Logs directory and console level from config.json.

    Read directly rather than through demand_core.config, which itself logs
    through this module.
    """
    global _settings
    if _settings is not None:
        return _settings

    raw: Dict[str, Any] = {}
    config_file = Path("config.json")
    if config_file.exists():
        try:
            with open(config_file, "r") as fh:
                loaded = json.load(fh)
            if isinstance(loaded, dict):
                raw = loaded
        except (OSError, ValueError) as e:
            print(f"Ignoring unreadable config.json for logging: {e}", file=sys.stderr)

    log_dir = Path(raw.get("paths", {}).get("logs_dir") or "logs")
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        log_dir = Path("logs")
        log_dir.mkdir(parents=True, exist_ok=True)

    level_name = str(raw.get("logging", {}).get("console_level", "INFO")).upper()
    console_level = logging.getLevelName(level_name)
    if not isinstance(console_level, int):
        console_level = logging.INFO

    _settings = {"log_dir": log_dir, "console_level": console_level}
    return _settings


def get_logger(name: str, *, console: bool = True) -> logging.Logger:
    """
    Logger for one pipeline component.

    Idempotent: repeated calls with the same *name* return the same logger
    without adding handlers twice.

    Args:
        name: Short component label; also the JSONL file name.
        console: Whether to echo to stdout.

    Returns:
        Configured logging.Logger instance.
    """
    logger = logging.getLogger(f"demandrank.{name}")
    if logger.handlers:
        return logger

    settings = _read_settings()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    file_handler = RotatingFileHandler(
        settings["log_dir"] / f"{name}.jsonl",
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(settings["console_level"])
        console_handler.setFormatter(ConsoleFormatter())
        logger.addHandler(console_handler)

    return logger
