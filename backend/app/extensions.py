"""
extensions.py — Flask extension singletons.

Creates the SQLAlchemy object at module level so it can be imported anywhere
without circular dependencies:

    1. Create the extension object here (no app attached yet).
    2. Call init_app(app) inside the app factory in app/__init__.py.
    3. Import `db` from here wherever needed.

Do not pass the app object directly to SQLAlchemy() at import time; that
would prevent running tests with a separate test app instance.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
