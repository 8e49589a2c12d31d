"""
routes/chirps.py — chirp route handlers.

Endpoints (url_prefix=/api):
  GET    /api/chirps            → 200  list; ?author_id=<uuid>&sort=asc|desc
  GET    /api/chirps/<id>       → 200
  POST   /api/chirps            → 201  (bearer)
  PUT    /api/chirps            → 200  body {"id", "body"}; no auth
  DELETE /api/chirps/<id>       → 204  (bearer, author only)
  POST   /api/validate_chirp    → 200  {"cleaned_body"}
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from backend.app.extensions import db
from backend.app.middleware.auth_middleware import require_auth
from backend.app.routes.helpers import load_json_body
from backend.app.schemas.chirp_schema import ChirpBodySchema, UpdateChirpSchema
from backend.app.services import chirp_service

chirps_bp = Blueprint("chirps", __name__)


@chirps_bp.route("/chirps", methods=["GET"])
def list_chirps():
    result = chirp_service.list_chirps(
        session=db.session,
        author_id=request.args.get("author_id", ""),
        sort_order=request.args.get("sort", ""),
    )
    return jsonify(result), 200


@chirps_bp.route("/chirps/<chirp_id>", methods=["GET"])
def get_chirp(chirp_id: str):
    return jsonify(chirp_service.get_chirp(chirp_id.strip(), db.session)), 200


@chirps_bp.route("/chirps", methods=["POST"])
@require_auth
def create_chirp():
    data = load_json_body(ChirpBodySchema())
    result = chirp_service.create_chirp(
        user_id=g.user_id,
        body=data["body"],
        session=db.session,
    )
    db.session.commit()
    return jsonify(result), 201


@chirps_bp.route("/chirps", methods=["PUT"])
def update_chirp():
    data = load_json_body(UpdateChirpSchema())
    result = chirp_service.update_chirp(
        chirp_id=data["id"],
        body=data["body"],
        session=db.session,
    )
    db.session.commit()
    return jsonify(result), 200


@chirps_bp.route("/chirps/<chirp_id>", methods=["DELETE"])
@require_auth
def delete_chirp(chirp_id: str):
    chirp_service.delete_chirp(
        chirp_id=chirp_id.strip(),
        caller_user_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return "", 204


@chirps_bp.route("/validate_chirp", methods=["POST"])
def validate_chirp():
    data = load_json_body(ChirpBodySchema())
    return jsonify(chirp_service.validate_chirp(data["body"])), 200
