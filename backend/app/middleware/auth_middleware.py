"""
middleware/auth_middleware.py — credential extraction and the @require_auth decorator.

The @require_auth decorator:
  1. Reads the Authorization header (expected: "Bearer <token>")
  2. Validates the session token via token_service
  3. Rejects the nil UUID subject
  4. Attaches user_id (str) to flask.g for the duration of the request

Responsibility boundary:
  - This module answers "who is calling?" (401) only.
  - Ownership checks (403) belong to the service layer.
  - Services receive user_id as a plain argument, with no knowledge of JWT or
    HTTP headers.
"""

from __future__ import annotations

import functools
import uuid
from typing import Callable, Mapping

from flask import current_app, g, request

from backend.app.errors import AuthHeaderError, ErrorCode, InvalidTokenError
from backend.app.services.token_service import validate_session_token

BEARER_SCHEME = "Bearer"
API_KEY_SCHEME = "ApiKey"


def _extract_credential(headers: Mapping[str, str], scheme: str) -> str:
    header = headers.get("Authorization", "")
    if not header:
        raise AuthHeaderError(f"No {scheme} credential found in the Authorization header.")
    if not header.startswith(scheme):
        raise AuthHeaderError(
            f"Authorization header must be in the format: {scheme} <credential>.",
            code=ErrorCode.TOKEN_INVALID,
        )
    credential = header[len(scheme):].strip()
    if not credential:
        raise AuthHeaderError(
            f"Empty {scheme} credential in the Authorization header.",
            code=ErrorCode.TOKEN_INVALID,
        )
    return credential


def extract_bearer(headers: Mapping[str, str]) -> str:
    """Returns the token from "Authorization: Bearer <token>"."""
    return _extract_credential(headers, BEARER_SCHEME)


def extract_api_key(headers: Mapping[str, str]) -> str:
    """Returns the key from "Authorization: ApiKey <key>"."""
    return _extract_credential(headers, API_KEY_SCHEME)


def authenticate(
        headers: Mapping[str, str],
        secret: str,
        algorithm: str = "HS256",
) -> str:
    """
    Resolves the bearer session token in `headers` to a user id.

    Raises AuthHeaderError or InvalidTokenError (both 401).
    """
    token = extract_bearer(headers)
    user_id = validate_session_token(token, secret, algorithm)
    if uuid.UUID(user_id) == uuid.UUID(int=0):
        raise InvalidTokenError("Invalid token")
    return user_id


def require_auth(f: Callable) -> Callable:
    """
    Route decorator that enforces session-token authentication.

    Attaches the authenticated user's ID to flask.g.user_id. Raises AppError
    subclasses for all auth failures; the global error handler converts them
    to JSON. Routes never catch them.

    Usage:
        @chirps_bp.route("", methods=["POST"])
        @require_auth
        def create_chirp():
            user_id = g.user_id
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        g.user_id = authenticate(
            request.headers,
            current_app.config["JWT_SECRET_KEY"],
            current_app.config.get("JWT_ALGORITHM", "HS256"),
        )
        return f(*args, **kwargs)

    return decorated
