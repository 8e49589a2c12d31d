"""
services/webhook_service.py — Polka payment-provider webhook.

Only the "user.upgraded" event does anything; every other event type is
acknowledged and ignored so Polka stops retrying it.
"""

from __future__ import annotations

import hmac

from flask import current_app
from sqlalchemy.orm import Session

from backend.app.errors import ErrorCode, UnauthorizedError, ValidationError
from backend.app.services import user_service

USER_UPGRADED_EVENT = "user.upgraded"


def check_api_key(api_key: str, expected_key: str) -> None:
    """Raises UnauthorizedError(INVALID_API_KEY) unless the keys match."""
    if not hmac.compare_digest(api_key.encode("utf-8"), expected_key.encode("utf-8")):
        raise UnauthorizedError("Invalid API Key", code=ErrorCode.INVALID_API_KEY)


def handle_subscription_event(
        api_key: str,
        event: str,
        user_id: str | None,
        expected_key: str,
        session: Session,
) -> bool:
    """
    Applies a webhook event.

    Raises:
      UnauthorizedError(INVALID_API_KEY) — key does not match
      ValidationError(MISSING_FIELD)     — upgrade event without a user id
      NotFoundError(USER_NOT_FOUND)      — unknown user

    Returns: True if a user was upgraded, False for an ignored event type.
    """
    check_api_key(api_key, expected_key)

    if event != USER_UPGRADED_EVENT:
        current_app.logger.debug("Ignoring webhook event %r", event)
        return False

    if not user_id:
        raise ValidationError("User ID is required", code=ErrorCode.MISSING_FIELD)

    user_service.set_subscription_flag(user_id, session)
    return True
