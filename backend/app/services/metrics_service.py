"""
services/metrics_service.py — file-server hit counter and the admin page.

One HitCounter is created per app in create_app() and stored in
app.extensions["hit_counter"]; nothing here is a module-level global.
"""

from __future__ import annotations

import threading

from flask import current_app

EXTENSION_KEY = "hit_counter"

ADMIN_METRICS_TEMPLATE = """<html>
  <body>
    <h1>Welcome, Chirpy Admin</h1>
    <p>Chirpy has been visited {hits} times!</p>
  </body>
</html>"""


class HitCounter:
    """Process-wide request counter. Safe under concurrent callers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits = 0

    def increment(self) -> int:
        with self._lock:
            self._hits += 1
            return self._hits

    def read(self) -> int:
        with self._lock:
            return self._hits

    def reset(self) -> None:
        with self._lock:
            self._hits = 0


def get_hit_counter() -> HitCounter:
    """The counter registered on the current app."""
    return current_app.extensions[EXTENSION_KEY]


def render_admin_metrics(hits: int) -> str:
    return ADMIN_METRICS_TEMPLATE.format(hits=hits)
