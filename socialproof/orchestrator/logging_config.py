"""
SocialProof Logging
===================

Two output styles for the same records:
- JSON lines for log aggregation (``LOG_JSON=true``)
- a console format for operators, with the review context appended

Both carry the context fields passed by the pipeline through ``extra``
(platform, product_code, provider, review_id, duration).

Usage:
    from socialproof.orchestrator.logging_config import setup_logging

    setup_logging(level="DEBUG", log_file="logs/socialproof.log")
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

CONTEXT_FIELDS = ("platform", "product_code", "provider", "review_id", "duration")

# SDK and HTTP client loggers are chatty at INFO
QUIET_LOGGERS = ("urllib3", "requests", "httpx", "anthropic", "openai", "redis")

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s%(context)s"
CONSOLE_DATEFMT = "%H:%M:%S"


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Context fields present on a record, in a fixed order."""
    context = {}
    for key in CONTEXT_FIELDS:
        value = getattr(record, key, None)
        if value is not None:
            context[key] = value
    return context


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

        {"ts": "...", "level": "WARNING", "logger": "socialproof.ai.resolution_chain",
         "msg": "AI analysis failed, falling back: ...", "product_code": "P001", "provider": "ai"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(record_context(record))
        return json.dumps(entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Readable lines ending in ``[platform=YOUTUBE product_code=P001]``."""

    def __init__(self):
        super().__init__(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        context = record_context(record)
        record.context = (
            " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]" if context else ""
        )
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """
    Configure the root logger.

    Console output goes to stderr so CLI output on stdout stays parseable.
    ``log_file`` adds a size-rotated file with the same formatter.
    """
    formatter = JSONFormatter() if json_output else ConsoleFormatter()

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        rotating.setFormatter(formatter)
        root.addHandler(rotating)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        f"Logging ready (level={level}, json={json_output}, file={log_file or 'none'})"
    )
