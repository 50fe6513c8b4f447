"""Logging configuration.

Usage:
    ```python
    from semantic_qa.logging_config import setup_logging

    setup_logging(level="DEBUG")
    setup_logging(json_output=True)
    ```
"""

import json
import logging
import sys
from datetime import datetime, timezone

# Extra record attributes copied into JSON output when present
EXTRA_FIELDS = ("tier", "similarity", "question_id", "source", "provider")


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines.

    Output format:
        {"ts": "2026-...", "level": "INFO", "logger": "semantic_qa...", "msg": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure the root logger.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Emit JSON lines instead of human-readable text
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    if json_output:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # Quiet noisy third-party loggers
    for name in ("httpx", "httpcore", "sentence_transformers"):
        logging.getLogger(name).setLevel(logging.WARNING)
