"""
routes/auth.py — login and refresh-token route handlers.

Endpoints (url_prefix=/api):
  POST   /api/login    → 200  user + token + refresh_token
  POST   /api/refresh  → 200  token + refresh_token   (Bearer <refresh token>)
  POST   /api/revoke   → 204                          (Bearer <refresh token>)

/refresh and /revoke read the refresh token from the Authorization header,
so they use extract_bearer() directly rather than @require_auth (which
expects a session token).
"""

from __future__ import annotations

from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request

from backend.app.extensions import db
from backend.app.middleware.auth_middleware import extract_bearer
from backend.app.routes.helpers import load_json_body
from backend.app.schemas.user_schema import LoginSchema
from backend.app.services import token_service, user_service

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["POST"])
def login():
    """POST /api/login — Authenticate; return user and tokens."""
    data = load_json_body(LoginSchema())

    expires_in = data["expires_in_seconds"]
    ttl = (
        timedelta(seconds=expires_in)
        if expires_in
        else current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    )

    result = user_service.authenticate_user(
        email=data["email"],
        password=data["password"],
        ttl=ttl,
        secret=current_app.config["JWT_SECRET_KEY"],
        session=db.session,
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )
    db.session.commit()
    return jsonify(result), 200


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    """POST /api/refresh — Exchange a refresh token for a new token pair."""
    raw_refresh_token = extract_bearer(request.headers)
    token, refresh_token = token_service.refresh_session(
        raw_refresh_token,
        current_app.config["JWT_SECRET_KEY"],
        db.session,
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )
    db.session.commit()
    return jsonify({"token": token, "refresh_token": refresh_token}), 200


@auth_bp.route("/revoke", methods=["POST"])
def revoke():
    """POST /api/revoke — Revoke a refresh token."""
    raw_refresh_token = extract_bearer(request.headers)
    token_service.revoke_refresh_token(raw_refresh_token, db.session)
    db.session.commit()
    current_app.logger.info("Refresh token revoked")
    return "", 204
