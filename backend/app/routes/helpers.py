"""
routes/helpers.py — request-body parsing shared by every blueprint.
"""

from __future__ import annotations

from flask import request
from marshmallow import Schema

from backend.app.errors import ErrorCode, ValidationError

JSON_MIMETYPE = "application/json"


def load_json_body(schema: Schema) -> dict:
    """
    Parses the request body with `schema`.

    Raises:
      ValidationError(INVALID_CONTENT_TYPE) — Content-Type is not application/json
      ValidationError(INVALID_JSON)         — body is not a JSON object
      marshmallow.ValidationError           — schema rules (global handler → 400)
    """
    if request.mimetype != JSON_MIMETYPE:
        raise ValidationError(
            f"content type ({request.content_type or ''}) is not 'application/json'",
            code=ErrorCode.INVALID_CONTENT_TYPE,
        )

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON", code=ErrorCode.INVALID_JSON)

    return schema.load(payload)
