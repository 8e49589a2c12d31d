"""
backend/wsgi.py — WSGI entry point.

    flask --app backend.wsgi run --port 8080
"""

import os

from backend.app import create_app

app = create_app(os.getenv("FLASK_ENV", "development"))
