"""
errors.py — AppError hierarchy and error code registry.

Every error returned by the Chirpy API is an AppError subclass. Do not raise
strings or generic exceptions from service or route code.

Rules:
  - Error codes are a contract. They do not change once published.
  - Error messages are human-readable prose and are what the client sees:
    every error body is {"error": "<message>"}.
  - Never conflate 401 (unauthenticated) with 403 (authenticated, not owner).
"""

from __future__ import annotations


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Input Errors (400) ─────────────────────────────────────────────────
    MISSING_FIELD           = "MISSING_FIELD"
    INVALID_FIELD           = "INVALID_FIELD"
    INVALID_CONTENT_TYPE    = "INVALID_CONTENT_TYPE"
    INVALID_JSON            = "INVALID_JSON"
    CHIRP_TOO_LONG          = "CHIRP_TOO_LONG"

    # ── Auth Errors ────────────────────────────────────────────────────────
    # 401 = we do not know who you are
    # 403 = we know who you are, but the row is not yours
    UNAUTHORIZED            = "UNAUTHORIZED"             # 401
    INVALID_CREDENTIALS     = "INVALID_CREDENTIALS"      # 401
    INVALID_API_KEY         = "INVALID_API_KEY"          # 401
    TOKEN_MISSING           = "TOKEN_MISSING"            # 401
    TOKEN_INVALID           = "TOKEN_INVALID"            # 401
    TOKEN_EXPIRED           = "TOKEN_EXPIRED"            # 401
    REFRESH_TOKEN_EXPIRED   = "REFRESH_TOKEN_EXPIRED"    # 401
    REFRESH_TOKEN_REVOKED   = "REFRESH_TOKEN_REVOKED"    # 401
    FORBIDDEN               = "FORBIDDEN"                # 403

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    NOT_FOUND               = "NOT_FOUND"
    USER_NOT_FOUND          = "USER_NOT_FOUND"
    CHIRP_NOT_FOUND         = "CHIRP_NOT_FOUND"
    REFRESH_TOKEN_NOT_FOUND = "REFRESH_TOKEN_NOT_FOUND"

    # ── System Errors (500) ────────────────────────────────────────────────
    STORAGE_ERROR           = "STORAGE_ERROR"
    HASHING_ERROR           = "HASHING_ERROR"
    RANDOMNESS_ERROR        = "RANDOMNESS_ERROR"
    INTERNAL_ERROR          = "INTERNAL_ERROR"


class AppError(Exception):

    http_status: int = 500
    default_code: str = ErrorCode.INTERNAL_ERROR

    def __init__(
            self,
            message: str,
            code: str | None = None,
            http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message     = message
        self.code        = code or self.default_code
        if http_status is not None:
            self.http_status = http_status

    def to_dict(self) -> dict:
        return {"error": self.message}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


# ── 400 ────────────────────────────────────────────────────────────────────

class ValidationError(AppError):
    """Malformed, missing or oversized input."""
    http_status = 400
    default_code = ErrorCode.INVALID_FIELD


# ── 401 ────────────────────────────────────────────────────────────────────

class UnauthorizedError(AppError):
    """Missing or bad credentials."""
    http_status = 401
    default_code = ErrorCode.UNAUTHORIZED


class AuthHeaderError(UnauthorizedError):
    """Authorization header absent, wrong scheme, or empty."""
    default_code = ErrorCode.TOKEN_MISSING


class InvalidTokenError(UnauthorizedError):
    """Session token failed signature, payload, or expiry checks."""
    default_code = ErrorCode.TOKEN_INVALID


class ExpiredError(UnauthorizedError):
    """Refresh token is past its expiry."""
    default_code = ErrorCode.REFRESH_TOKEN_EXPIRED


class RevokedError(UnauthorizedError):
    """Refresh token has been revoked."""
    default_code = ErrorCode.REFRESH_TOKEN_REVOKED


# ── 403 ────────────────────────────────────────────────────────────────────

class ForbiddenError(AppError):
    http_status = 403
    default_code = ErrorCode.FORBIDDEN


# ── 404 ────────────────────────────────────────────────────────────────────

class NotFoundError(AppError):
    http_status = 404
    default_code = ErrorCode.NOT_FOUND


# ── 500 ────────────────────────────────────────────────────────────────────

class StorageError(AppError):
    http_status = 500
    default_code = ErrorCode.STORAGE_ERROR


class HashingError(AppError):
    http_status = 500
    default_code = ErrorCode.HASHING_ERROR


class RandomnessError(AppError):
    http_status = 500
    default_code = ErrorCode.RANDOMNESS_ERROR
