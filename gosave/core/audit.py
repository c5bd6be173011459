"""Audit trail written to the ``gosave.audit`` logger. Never fails the caller."""

import logging
from typing import Any, Optional

logger = logging.getLogger("gosave.audit")


def log_access(user_id: Optional[str], resource: str, action: str, success: bool = True) -> None:
    try:
        logger.info(
            "[AUDIT] user=%s action=%s resource=%s result=%s",
            user_id, action, resource, "SUCCESS" if success else "FAILED",
        )
    except Exception:
        pass


def log_security_event(user_id: Optional[str], event: str, details: Any) -> None:
    try:
        logger.warning("[SECURITY] user=%s event=%s details=%s", user_id, event, details)
    except Exception:
        pass
