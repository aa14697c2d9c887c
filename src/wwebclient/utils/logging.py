"""Logging setup for the client, the CLI and the room endpoints."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

from ..config import LoggingConfig

_LOGGER_NAME = "wwebclient"
LOG_FILE_NAME = "wwebclient.log"
TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
BACKUP_DAYS = 7
PREVIEW_LIMIT = 50
PREVIEW_EDGE = 20

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_active_config: LoggingConfig | None = None


class _JsonFormatter(logging.Formatter):
    """One JSON object per line, with ``extra`` fields (session_id, endpoint...) merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        for key, value in extras.items():
            entry.setdefault(key, value)
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _build_formatter(cfg: LoggingConfig) -> logging.Formatter:
    if cfg.json_format:
        return _JsonFormatter()
    return logging.Formatter(TEXT_FORMAT, DATE_FORMAT)


def _build_file_handler(log_dir: str, rotate_daily: bool) -> logging.Handler:
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = str(directory / LOG_FILE_NAME)
    if rotate_daily:
        return TimedRotatingFileHandler(path, when="midnight", backupCount=BACKUP_DAYS, encoding="utf-8")
    return logging.FileHandler(path, encoding="utf-8")


def configure_logging(config: LoggingConfig | None = None, *, force: bool = False) -> None:
    """Install console (and optional file) handlers on the root logger.

    Calling again with an equal config is a no-op unless ``force`` is set,
    so the CLI and the web app factory can both call it safely.
    """
    global _active_config

    cfg = config or LoggingConfig()
    if not force and _active_config == cfg:
        return

    level = logging.getLevelName(str(cfg.level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if cfg.log_dir:
        handlers.append(_build_file_handler(cfg.log_dir, cfg.rotate_daily))
    formatter = _build_formatter(cfg)

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger(_LOGGER_NAME).setLevel(level)

    _active_config = LoggingConfig(**vars(cfg))
    logging.getLogger(__name__).debug("Logging ready (%s, file=%s)", logging.getLevelName(level), cfg.log_dir or "none")


def format_payload_preview(payload: Any) -> str:
    """Shorten a request payload for debug logs.

    Media payloads carry whole base64 files; past ``PREVIEW_LIMIT``
    characters only the length and both ends are kept.
    """
    text = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False, default=str)
    if len(text) <= PREVIEW_LIMIT:
        return text
    return f"<len={len(text)} head={text[:PREVIEW_EDGE]!r} tail={text[-PREVIEW_EDGE:]!r}>"
