"""
schemas/chirp_schema.py — Marshmallow schemas for chirp endpoints.

The 140-character limit is deliberately NOT a schema rule: chirp_service
owns it so that create, update and validate share one implementation.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class ChirpBodySchema(Schema):
    """POST /api/chirps and POST /api/validate_chirp"""

    class Meta:
        unknown = EXCLUDE

    body = fields.Str(required=True)


class UpdateChirpSchema(Schema):
    """
    PUT /api/chirps

    A missing id is not a schema error; it simply matches no chirp (404).
    """

    class Meta:
        unknown = EXCLUDE

    id = fields.Str(load_default="")
    body = fields.Str(required=True)
