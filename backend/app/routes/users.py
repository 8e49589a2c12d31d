"""
routes/users.py — user account route handlers.

Routes parse the body, call exactly ONE service function, commit the DB
session and return JSON. No business logic, no DB queries. AppError
propagates to the global error handler in app/__init__.py.

Endpoints (url_prefix=/api/users):
  POST   /api/users  → 201
  PUT    /api/users  → 200 (bearer)
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from backend.app.extensions import db
from backend.app.middleware.auth_middleware import authenticate
from backend.app.routes.helpers import load_json_body
from backend.app.schemas.user_schema import CreateUserSchema, UpdateUserSchema
from backend.app.services import user_service

users_bp = Blueprint("users", __name__)


@users_bp.route("", methods=["POST"])
def create_user():
    """POST /api/users — Register; returns the user without credentials."""
    data = load_json_body(CreateUserSchema())
    result = user_service.register_user(
        email=data["email"],
        password=data["password"],
        session=db.session,
    )
    db.session.commit()
    return jsonify(result), 201


@users_bp.route("", methods=["PUT"])
def update_user():
    """
    PUT /api/users — Change the caller's email and/or password.

    The body is validated before the session token, so an empty update is a
    400 even without credentials.
    """
    data = load_json_body(UpdateUserSchema())
    user_id = authenticate(
        request.headers,
        current_app.config["JWT_SECRET_KEY"],
        current_app.config.get("JWT_ALGORITHM", "HS256"),
    )
    result = user_service.update_profile(
        user_id=user_id,
        email=data["email"],
        password=data["password"],
        session=db.session,
    )
    db.session.commit()
    return jsonify(result), 200
