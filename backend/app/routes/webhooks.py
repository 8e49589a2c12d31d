"""
routes/webhooks.py — inbound webhooks.

Endpoints (url_prefix=/api/polka):
  POST   /api/polka/webhooks  → 204  (Authorization: ApiKey <key>)
"""

from __future__ import annotations

from flask import Blueprint, current_app, request

from backend.app.extensions import db
from backend.app.middleware.auth_middleware import extract_api_key
from backend.app.routes.helpers import load_json_body
from backend.app.schemas.webhook_schema import WebhookEventSchema
from backend.app.services import webhook_service

webhooks_bp = Blueprint("webhooks", __name__)


@webhooks_bp.route("/webhooks", methods=["POST"])
def polka_webhook():
    """POST /api/polka/webhooks — Subscription events from Polka."""
    api_key = extract_api_key(request.headers)
    webhook_service.check_api_key(api_key, current_app.config["POLKA_KEY"])
    data = load_json_body(WebhookEventSchema())

    upgraded = webhook_service.handle_subscription_event(
        api_key=api_key,
        event=data["event"],
        user_id=data["data"].get("user_id"),
        expected_key=current_app.config["POLKA_KEY"],
        session=db.session,
    )
    if upgraded:
        db.session.commit()
    return "", 204
