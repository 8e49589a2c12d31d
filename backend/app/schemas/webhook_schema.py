"""
schemas/webhook_schema.py — Polka webhook payload.

    {"event": "user.upgraded", "data": {"user_id": "<uuid>"}}

Everything is optional at this layer: an unknown or missing event is ignored
by webhook_service, and a missing user_id only matters for upgrade events.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class WebhookDataSchema(Schema):

    class Meta:
        unknown = EXCLUDE

    user_id = fields.Str(load_default=None, allow_none=True)


class WebhookEventSchema(Schema):

    class Meta:
        unknown = EXCLUDE

    event = fields.Str(load_default="")
    data = fields.Nested(WebhookDataSchema, load_default=dict)
