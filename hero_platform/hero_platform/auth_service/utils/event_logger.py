"""
Logging setup and audit lines for authentication events.
"""
from datetime import datetime, timezone
from typing import Optional
from fastapi import Request
import sys
import logging
import os

from ..config import Settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"

ALLOWED_EVENT_TYPES = {
    "signup",
    "signup_conflict",
    "login_success",
    "login_failure",
    "token_refresh",
    "refresh_failure",
    "account_deleted",
    "account_delete_failure",
    "sessions_revoked",
}


def configure_logging(settings: Settings) -> bool:
    """
    Send logs to stdout, and to LOG_DIR/auth_events.log when LOG_DIR is usable.

    Leaves an already configured root logger alone, so building several apps
    in one process does not open handlers that are never attached.

    Returns:
        bool: True if handlers were installed by this call
    """
    if logging.getLogger().handlers:
        return False

    handlers = [logging.StreamHandler(sys.stdout)]

    if settings.LOG_DIR:
        # Continue without file logging if the directory is not writable
        try:
            os.makedirs(settings.LOG_DIR, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "auth_events.log")))
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    return True


def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    if request.client:
        return request.client.host
    # X-Forwarded-For can contain multiple IPs, take the first one
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return None


def log_auth_event(
    event_type: str,
    *,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    request: Optional[Request] = None,
    **metadata,
) -> None:
    """
    Write one audit line for an authentication event.

    Args:
        event_type: One of ALLOWED_EVENT_TYPES
        user_id: Id of the user involved, when known
        email: Email the caller presented, when there is no user id
        request: FastAPI Request the event came from
        **metadata: Extra key=value context (never passwords or tokens)

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    extra = "".join(f" {key}={value}" for key, value in sorted(metadata.items()))
    logger.info(
        "AUTH %s user_id=%s email=%s ip=%s timestamp=%s%s",
        event_type, user_id, email, client_ip(request), datetime.now(timezone.utc).isoformat(), extra
    )
