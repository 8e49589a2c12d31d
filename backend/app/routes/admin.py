"""
routes/admin.py — health check, metrics page, dev-only reset, /app file server.

Endpoints:
  GET    /api/healthz     → 200 text "OK"
  GET    /admin/metrics   → 200 html hit count
  POST   /admin/reset     → 200 text "OK"; 403 unless PLATFORM == "dev"
  GET    /app/<path>      → static file from FILESERVER_ROOT, counted as a hit
"""

from __future__ import annotations

from flask import Blueprint, current_app, send_from_directory

from backend.app.extensions import db
from backend.app.middleware.metrics_middleware import count_hits
from backend.app.services import user_service
from backend.app.services.metrics_service import get_hit_counter, render_admin_metrics

health_bp = Blueprint("health", __name__)
admin_bp = Blueprint("admin", __name__)
fileserver_bp = Blueprint("fileserver", __name__)

_TEXT = {"Content-Type": "text/plain; charset=utf-8"}
_HTML = {"Content-Type": "text/html; charset=utf-8"}


@health_bp.route("/healthz", methods=["GET"])
def healthz():
    return "OK", 200, _TEXT


@admin_bp.route("/metrics", methods=["GET"])
def metrics():
    return render_admin_metrics(get_hit_counter().read()), 200, _HTML


@admin_bp.route("/reset", methods=["POST"])
def reset():
    """
    Zeroes the hit counter AND deletes every user (with their chirps and
    refresh tokens). Development databases only.
    """
    if current_app.config.get("PLATFORM") != "dev":
        return "Forbidden", 403, _TEXT

    get_hit_counter().reset()
    user_service.delete_all_users(db.session)
    db.session.commit()
    return "OK", 200, _TEXT


@fileserver_bp.route("/", defaults={"path": "index.html"}, methods=["GET"])
@fileserver_bp.route("/<path:path>", methods=["GET"])
@count_hits
def serve_app(path: str):
    return send_from_directory(current_app.config["FILESERVER_ROOT"], path)
