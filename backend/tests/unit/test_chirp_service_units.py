"""
Unit tests for chirp moderation, ordering and the service-level
authorization rules, with MagicMock sessions.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from backend.app.errors import ErrorCode, ForbiddenError, NotFoundError, ValidationError
from backend.app.services import chirp_service


# ── sanitize_body ──────────────────────────────────────────────────────────

@pytest.mark.parametrize("body, expected", [
    ("I had something interesting for breakfast",
     "I had something interesting for breakfast"),
    ("I hear Mastodon is better than Chirpy. sharbert I need to migrate",
     "I hear Mastodon is better than Chirpy. **** I need to migrate"),
    ("I really need a kerfuffle to go to bed sooner, Fornax !",
     "I really need a **** to go to bed sooner, **** !"),
    ("KERFUFFLE", "****"),
    ("Sharbert!", "****"),
    ("kerfuffles everywhere", "**** everywhere"),
    ("fornax fornax", "**** ****"),
    ("", ""),
])
def test_sanitize_body(body, expected):
    assert chirp_service.sanitize_body(body) == expected


def test_validate_chirp_boundary():
    assert chirp_service.validate_chirp("a" * 140) == {"cleaned_body": "a" * 140}

    with pytest.raises(ValidationError) as exc_info:
        chirp_service.validate_chirp("a" * 141)

    assert exc_info.value.code == ErrorCode.CHIRP_TOO_LONG
    assert exc_info.value.message == "Chirp is too long"


def test_length_is_counted_in_characters_not_bytes():
    # 140 two-byte characters
    assert chirp_service.validate_chirp("é" * 140)["cleaned_body"] == "é" * 140


# ── sort_chirps ────────────────────────────────────────────────────────────

def _chirps():
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return [
        SimpleNamespace(id="b", created_at=base + timedelta(minutes=2)),
        SimpleNamespace(id="a", created_at=base + timedelta(minutes=1)),
        # naive, as SQLite returns it
        SimpleNamespace(id="c", created_at=(base + timedelta(minutes=3)).replace(tzinfo=None)),
    ]


@pytest.mark.parametrize("sort_order", ["asc", "", None, "random"])
def test_sort_ascending_by_default(sort_order):
    ids = [c.id for c in chirp_service.sort_chirps(_chirps(), sort_order)]
    assert ids == ["a", "b", "c"]


def test_sort_descending():
    ids = [c.id for c in chirp_service.sort_chirps(_chirps(), "desc")]
    assert ids == ["c", "b", "a"]


def test_sort_is_stable_for_equal_timestamps():
    moment = datetime(2026, 1, 1, tzinfo=timezone.utc)
    chirps = [SimpleNamespace(id=str(i), created_at=moment) for i in range(4)]
    assert [c.id for c in chirp_service.sort_chirps(chirps, "asc")] == ["0", "1", "2", "3"]


# ── Service functions ──────────────────────────────────────────────────────

def test_create_chirp_too_long_touches_nothing():
    session = MagicMock()

    with pytest.raises(ValidationError):
        chirp_service.create_chirp("user-1", "x" * 141, session)

    session.add.assert_not_called()


def test_create_chirp_for_missing_user():
    session = MagicMock()
    session.get.return_value = None

    with pytest.raises(NotFoundError) as exc_info:
        chirp_service.create_chirp("ghost", "hello", session)

    assert exc_info.value.code == ErrorCode.USER_NOT_FOUND
    session.add.assert_not_called()


def test_create_chirp_stores_sanitized_body(app_context):
    session = MagicMock()
    session.get.return_value = SimpleNamespace(id="user-1")

    result = chirp_service.create_chirp("user-1", "no fornax here", session)

    stored = session.add.call_args.args[0]
    assert stored.body == "no **** here"
    assert stored.user_id == "user-1"
    assert result["body"] == "no **** here"
    assert result["created_at"] == result["updated_at"]


def test_delete_by_non_author_is_forbidden():
    session = MagicMock()
    session.get.return_value = SimpleNamespace(id="chirp-1", user_id="alice")

    with pytest.raises(ForbiddenError) as exc_info:
        chirp_service.delete_chirp("chirp-1", caller_user_id="bob", session=session)

    assert exc_info.value.http_status == 403
    session.delete.assert_not_called()


def test_delete_missing_chirp():
    session = MagicMock()
    session.get.return_value = None

    with pytest.raises(NotFoundError) as exc_info:
        chirp_service.delete_chirp("nope", caller_user_id="alice", session=session)

    assert exc_info.value.code == ErrorCode.CHIRP_NOT_FOUND


def test_update_has_no_owner_check():
    created = datetime(2020, 1, 1, tzinfo=timezone.utc)
    chirp = SimpleNamespace(
        id="chirp-1", user_id="alice", body="old",
        created_at=created, updated_at=created,
    )
    session = MagicMock()
    session.get.return_value = chirp

    result = chirp_service.update_chirp("chirp-1", "new kerfuffle", session)

    assert chirp.body == "new ****"
    assert chirp.updated_at > created
    assert result["user_id"] == "alice"
    session.flush.assert_called_once()
