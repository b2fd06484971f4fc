"""Structured Logging — JSON log lines carrying ledger identifiers.

Invariants:
    - Every line has timestamp, level, logger name and message
    - Ledger fields (user_id, task_id, transaction_id, referral_id, withdrawal_id,
      reward, amount, ...) are surfaced when passed via `extra`
    - Money values are written as strings, never floats
    - setup_logging is idempotent: repeated lifespans do not duplicate handlers

Design Decisions:
    - Whitelisted extra keys: arbitrary `extra` payloads (request bodies,
      passwords) never reach the log sink
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_KEYS = (
    "user_id", "task_id", "transaction_id", "referral_id", "referrer_id",
    "withdrawal_id", "reward", "amount", "outcome", "error_code", "path",
)

NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncpg")

_HANDLER_NAME = "earnledger"


def _jsonable(value: object) -> object:
    if isinstance(value, (bool, int, float)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            key: _jsonable(record.__dict__[key])
            for key in EXTRA_KEYS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the earnledger handler on the root logger (JSON or plain text)."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
