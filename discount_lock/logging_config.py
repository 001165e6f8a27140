import json
import logging
import os
import re
import sys
from datetime import UTC, datetime

EMAIL_REGEX = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# Shopify access tokens and shared secrets
SHOPIFY_TOKEN_REGEX = re.compile(r"\b(shpat|shpca|shppa|shpss)_([a-fA-F0-9]{16,})\b")
MASK_STRING = "[REDACTED]"

# Keys in `extra["props"]` whose values are never logged
SENSITIVE_FIELD_NAMES = {
    "access_token",
    "api_secret",
    "client_secret",
    "code",
    "hmac",
    "secret",
    "session_token",
    "state",
    "token",
}


def mask_text(value: str) -> str:
    masked = EMAIL_REGEX.sub(MASK_STRING, value)
    return SHOPIFY_TOKEN_REGEX.sub(lambda m: m.group(1) + "_" + MASK_STRING, masked)


class SecretMaskingFilter(logging.Filter):
    """Redacts tokens and emails from the message and from ``props``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.masked_message = mask_text(record.getMessage())

        props = getattr(record, "props", None)
        if isinstance(props, dict):
            masked_props = {}
            for key, value in props.items():
                if key.lower() in SENSITIVE_FIELD_NAMES:
                    masked_props[key] = MASK_STRING
                elif isinstance(value, str):
                    masked_props[key] = mask_text(value)
                else:
                    masked_props[key] = value
            record.props = masked_props
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "message": getattr(record, "masked_message", record.getMessage()),
            "logger_name": record.name,
            "func_name": record.funcName,
            "line_no": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        props = getattr(record, "props", None)
        if isinstance(props, dict):
            log_entry.update(props)
        return json.dumps(log_entry, default=str)


def setup_logging(level: str | None = None):
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter())
    console_handler.addFilter(SecretMaskingFilter())
    root_logger.addHandler(console_handler)

    # Library noise
    logging.getLogger("uvicorn.error").propagate = False
    logging.getLogger("uvicorn.access").propagate = False
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    # logger.info("Subscription created", extra={"props": {"shop": shop}})
