"""
Structured audit logging for account and social-graph events.

Events are written as one JSON object per line on the ``security.audit``
logger: signup_success, signup_failed, login_success, login_failed,
logout, token_rejected, profile_updated, profile_update_rejected,
follow, unfollow, follow_compensated, csrf_failure.

Passwords, password hashes and session tokens are never passed in.
"""

import json
import logging
import re
import time
from typing import Any, Dict

AUDIT_LOGGER = 'security.audit'

# Context keys copied from the LogRecord into the JSON entry.
CONTEXT_FIELDS = (
    'ip',
    'user_agent',
    'request_id',
    'email',
    'user_id',
    'target_id',
    'reason',
)

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def sanitize_log_value(value: Any, max_length: int = 256) -> str:
    """Strip control characters and truncate, so input cannot forge log lines."""
    return _CONTROL_CHARS.sub('', str(value))[:max_length]


class SecurityAuditFormatter(logging.Formatter):
    """Render audit records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            'level': record.levelname,
            'event': getattr(record, 'event', 'unknown'),
            'message': record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = sanitize_log_value(value)
        return json.dumps(entry)


def setup_audit_logging(app) -> logging.Logger:
    """
    Attach a JSON stderr handler to the audit logger.

    Safe to call once per ``create_app``; the handler is added only once
    per process.
    """
    logger = logging.getLogger(AUDIT_LOGGER)
    logger.setLevel(logging.DEBUG if app.debug else logging.INFO)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(SecurityAuditFormatter())
    logger.addHandler(handler)
    return logger


def audit_log(event: str, message: str, level: int = logging.INFO, **context) -> None:
    """
    Emit one audit event.

    Args:
        event: Event type, e.g. 'login_success' or 'follow'.
        message: Human-readable description.
        level: Logging level; failures that need an operator use WARNING/ERROR.
        **context: Any of CONTEXT_FIELDS.
    """
    extra = {'event': event}
    extra.update(context)
    logging.getLogger(AUDIT_LOGGER).log(level, message, extra=extra)
