"""
Unit tests for user_service branches that are awkward to reach over HTTP.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from backend.app.errors import (
    ErrorCode,
    NotFoundError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from backend.app.services import password_service, token_service, user_service

CREATED = datetime(2020, 1, 1, tzinfo=timezone.utc)


def _user(user_id="u-1", email="alice@example.com", password="Password1"):
    return SimpleNamespace(
        id=user_id,
        email=email,
        hashed_password=password_service.hash_password(password, rounds=4),
        is_chirpy_red=False,
        created_at=CREATED,
        updated_at=CREATED,
    )


def _session_with_candidates(*users):
    session = MagicMock()
    session.execute.return_value.scalars.return_value.all.return_value = list(users)
    return session


def test_serialize_user_hides_password():
    result = user_service.serialize_user(_user())
    assert result == {
        "id": "u-1",
        "created_at": CREATED.isoformat(),
        "updated_at": CREATED.isoformat(),
        "email": "alice@example.com",
        "is_chirpy_red": False,
    }


def test_register_duplicate_becomes_storage_error(app_context):
    session = MagicMock()
    session.flush.side_effect = SQLAlchemyError("UNIQUE constraint failed: users.email")

    with pytest.raises(StorageError) as exc_info:
        user_service.register_user("alice@example.com", "Password1", session)

    assert exc_info.value.http_status == 500
    session.rollback.assert_called_once()


def test_register_stores_hash_not_password(app_context):
    session = MagicMock()

    user_service.register_user("alice@example.com", "Password1", session)

    stored = session.add.call_args.args[0]
    assert stored.hashed_password != "Password1"
    assert password_service.verify_password("Password1", stored.hashed_password)
    assert stored.is_chirpy_red is False


def test_authenticate_unknown_email():
    with pytest.raises(UnauthorizedError) as exc_info:
        user_service.authenticate_user(
            "nobody@example.com", "Password1", timedelta(hours=1), "s",
            _session_with_candidates(),
        )

    assert exc_info.value.code == ErrorCode.INVALID_CREDENTIALS


def test_authenticate_wrong_password():
    with pytest.raises(UnauthorizedError):
        user_service.authenticate_user(
            "alice@example.com", "nope", timedelta(hours=1), "s",
            _session_with_candidates(_user()),
        )


def test_authenticate_first_matching_candidate_wins(app_context):
    stale = _user(user_id="u-old", password="Other1")
    current = _user(user_id="0b6c2a0e-5c1f-4d7e-9a43-0f5b0d3e6c11")
    session = _session_with_candidates(stale, current)

    result = user_service.authenticate_user(
        "alice@example.com", "Password1", timedelta(minutes=10), "secret", session,
    )

    assert result["id"] == current.id
    assert token_service.validate_session_token(result["token"], "secret") == current.id
    stored = session.add.call_args.args[0]
    assert stored.token_hash == token_service._hash_token(result["refresh_token"])


def test_update_requires_a_field():
    session = MagicMock()
    with pytest.raises(ValidationError) as exc_info:
        user_service.update_profile("u-1", session)

    assert exc_info.value.message == "Email or password are required"
    session.get.assert_not_called()


def test_update_missing_user():
    session = MagicMock()
    session.get.return_value = None

    with pytest.raises(NotFoundError):
        user_service.update_profile("u-1", session, email="new@example.com")


def test_update_email_leaves_password(app_context):
    user = _user()
    old_hash = user.hashed_password
    session = MagicMock()
    session.get.return_value = user

    result = user_service.update_profile("u-1", session, email="new@example.com")

    assert result["email"] == "new@example.com"
    assert user.hashed_password == old_hash
    assert user.updated_at > CREATED


def test_set_subscription_flag(app_context):
    user = _user()
    session = MagicMock()
    session.get.return_value = user

    assert user_service.set_subscription_flag("u-1", session)["is_chirpy_red"] is True
