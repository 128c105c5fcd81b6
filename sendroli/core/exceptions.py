"""
Authentication & session errors.

Every error carries an HTTP status, a machine-readable `code` and a
human-readable `message`.  A single handler registered in `main.py`
renders them as `{"success": false, "message": ..., "code": ...}` so
clients can branch on `code` without parsing prose.

Ordinary CRUD failures (404, duplicate fields) keep using
`fastapi.HTTPException`.
"""

from fastapi import status


class AuthError(Exception):
    status_code: int = status.HTTP_401_UNAUTHORIZED
    code: str = "UNAUTHORIZED"
    message: str = "Not authorized to access this route"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    # Same text for unknown user and wrong password.
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class AccountDeactivated(AuthError):
    code = "ACCOUNT_DEACTIVATED"
    message = "Account has been deactivated."


class MissingToken(AuthError):
    code = "NO_TOKEN"
    message = "Access denied. No token provided."


class InvalidToken(AuthError):
    code = "INVALID_TOKEN"
    message = "Invalid or expired token. Please login again."


class TokenInvalidated(AuthError):
    code = "TOKEN_INVALIDATED"
    message = "This session was replaced by a newer login. Please login again."


class SessionInvalidated(AuthError):
    code = "SESSION_INVALIDATED"
    message = "Session is no longer valid. Please login again."


class RoleForbidden(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN_ROLE"
    message = "Your role is not authorized to access this route"


class SessionContention(AuthError):
    status_code = status.HTTP_409_CONFLICT
    code = "SESSION_CONTENTION"
    message = "Concurrent logins for this account. Please try again."
