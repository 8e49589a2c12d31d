"""
middleware/metrics_middleware.py — @count_hits decorator.

Wraps a view so every request to it bumps the app's HitCounter before the
view runs, whatever the view's outcome.
"""

from __future__ import annotations

import functools
from typing import Callable

from flask import current_app

from backend.app.services.metrics_service import get_hit_counter


def count_hits(f: Callable) -> Callable:
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        hits = get_hit_counter().increment()
        current_app.logger.debug("new hit count %d", hits)
        return f(*args, **kwargs)

    return decorated
