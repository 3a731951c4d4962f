"""Logging setup and actor correlation.

Message handlers run one thread per inbound event. ``bind_actor`` puts the
hashed actor key in a context variable for the duration of a unit of work,
and ``ActorIdFilter`` copies it onto every record emitted meanwhile, so rate
limit decisions and playback transitions of one user can be grepped together
without the raw user id ever reaching the logs.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from botcore.core.config import LogSettings, settings

_actor_id_var: ContextVar[str | None] = ContextVar("actor_id", default=None)

REDACTED = "[REDACTED]"

SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "actor_key",
        "user_id",
        "api_key",
        "authorization",
        "token",
        "discord_token",
        "openrouter_api_key",
        "password",
        "secret",
    }
)

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


def hash_actor_key(actor_key: str) -> str:
    """Short, stable digest of an actor key that is safe to log."""
    return hashlib.sha256(actor_key.encode()).hexdigest()[:16]


def get_actor_id() -> str | None:
    return _actor_id_var.get()


@contextmanager
def bind_actor(actor_key: str) -> Iterator[str]:
    """Tag log records emitted inside the block with the hashed actor key."""

    token = _actor_id_var.set(hash_actor_key(actor_key))
    try:
        yield _actor_id_var.get()  # type: ignore[misc]
    finally:
        _actor_id_var.reset(token)


def _redact(value: Any, sensitive_keys: frozenset[str]) -> Any:
    if isinstance(value, Mapping):
        return {
            k: REDACTED if str(k).lower() in sensitive_keys else _redact(v, sensitive_keys)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(v, sensitive_keys) for v in value)
    return value


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class ActorIdFilter(logging.Filter):
    """Copy the bound actor id onto records that do not carry one."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if getattr(record, "actor_id", None) is None:
            actor_id = get_actor_id()
            if actor_id:
                record.actor_id = actor_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Replace secret-looking extra fields, at any depth, with a marker."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        redacted = _redact(_extra_fields(record), self.sensitive_keys)
        for key, value in redacted.items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record: level, logger, event name and extras."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/botcore.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if log_settings.max_bytes:
        return RotatingFileHandler(
            file_path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(file_path, encoding="utf-8")


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install a single root handler with actor tagging and redaction.

    Args:
        log_settings: Optional log settings; defaults to the environment ones.
    """

    cfg = log_settings or settings.log

    handler = _build_handler(cfg)
    handler.addFilter(ActorIdFilter())
    handler.addFilter(SensitiveDataFilter())
    if cfg.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, cfg.level.upper(), logging.INFO))
