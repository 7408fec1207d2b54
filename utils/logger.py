"""
utils/logger.py
───────────────
Loguru logger shared by every module.

Sinks
─────
  stderr      human-readable, carries the request id of the current HTTP call
  log_file    JSON lines (or plain text with LOG_JSON=false), rotated
  audit_file  sign-in events only: OTP issued / verified / refused, token rejected

Records bound with ``console_only=True`` (the mock mail transport, which logs
plaintext codes) go to stderr only.

Usage
─────
  from utils.logger import logger, audit_logger

  logger.info("Profile store ready")
  audit_logger.info("OTP issued", email=masked)   # also lands in the audit file

Records produced inside ``logger.contextualize(request_id=...)`` (see the
request middleware in backend/main.py) carry that id on every sink.
"""

import sys

from loguru import logger

from config.settings import Settings, get_settings

NO_REQUEST = "-"
MASKED = "***MASKED***"
SENSITIVE_KEYS = frozenset({"code", "otp", "token", "secret", "password", "authorization"})

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def _is_sensitive(key: str) -> bool:
    key = key.lower()
    return any(
        key == word or key.startswith(f"{word}_") or key.endswith(f"_{word}")
        for word in SENSITIVE_KEYS
    )


def mask_sensitive_extra(record: dict) -> None:
    """Patcher: blank out bound values whose key names a credential."""
    extra = record["extra"]
    for key in list(extra):
        if _is_sensitive(key):
            extra[key] = MASKED


def _is_audit(record: dict) -> bool:
    return bool(record["extra"].get("audit")) and is_persistable(record)


def is_persistable(record: dict) -> bool:
    """Records bound with console_only=True never reach a file sink."""
    return not record["extra"].get("console_only")


def setup_logger(settings: Settings | None = None) -> None:
    settings = settings or get_settings()

    logger.remove()
    logger.configure(extra={"request_id": NO_REQUEST}, patcher=mask_sensitive_extra)

    logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT, colorize=True)

    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(settings.log_file),
        level="DEBUG",
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        serialize=settings.log_json,
        filter=is_persistable,
        enqueue=True,
    )

    settings.audit_log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(settings.audit_log_file),
        level="INFO",
        filter=_is_audit,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        serialize=True,
        enqueue=True,
    )


setup_logger()

audit_logger = logger.bind(audit=True)

__all__ = ["logger", "audit_logger", "setup_logger"]
