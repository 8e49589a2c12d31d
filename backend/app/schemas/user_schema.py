"""
schemas/user_schema.py — Marshmallow schemas for user and login endpoints.

Validation responsibility:
  - This file: field presence, types, formats.
  - services/user_service.py: uniqueness (DB-level) and credential checks.

All schemas inherit from marshmallow.Schema directly so they can be used in
unit tests without a Flask app context. Unknown keys are ignored.
"""

from __future__ import annotations

from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    validate,
    validates,
    validates_schema,
)

# bcrypt only hashes the first 72 bytes; longer passwords are rejected up front.
MAX_PASSWORD_BYTES = 72

# Ten years. Longer lifetimes overflow datetime arithmetic.
MAX_EXPIRES_IN_SECONDS = 10 * 365 * 24 * 60 * 60


def _check_password_bytes(value: str) -> None:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes long."
        )


class CreateUserSchema(Schema):
    """POST /api/users"""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=255))
    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=1, error="Password is required."),
    )

    @validates("password")
    def validate_password_length(self, value: str, **kwargs) -> None:
        _check_password_bytes(value)


class LoginSchema(Schema):
    """
    POST /api/login

    expires_in_seconds is optional; 0 or missing means the configured default
    (one hour). Credential correctness is checked in user_service.
    """

    class Meta:
        unknown = EXCLUDE

    email = fields.Str(required=True)
    password = fields.Str(required=True, load_only=True)
    expires_in_seconds = fields.Int(
        load_default=0,
        validate=validate.Range(
            min=0,
            max=MAX_EXPIRES_IN_SECONDS,
            error="expires_in_seconds must be between {min} and {max}.",
        ),
    )


class UpdateUserSchema(Schema):
    """
    PUT /api/users

    Each field is optional, but at least one must be non-empty. The check
    runs at load time so a bodiless request is rejected before the caller is
    authenticated.
    """

    class Meta:
        unknown = EXCLUDE

    email = fields.Str(load_default="")
    password = fields.Str(load_default="", load_only=True)

    @validates("email")
    def validate_email(self, value: str, **kwargs) -> None:
        if value:
            validate.Email()(value)

    @validates("password")
    def validate_password_length(self, value: str, **kwargs) -> None:
        _check_password_bytes(value)

    @validates_schema
    def validate_has_changes(self, data: dict, **kwargs) -> None:
        if not data.get("email") and not data.get("password"):
            raise ValidationError("Email or password are required")
