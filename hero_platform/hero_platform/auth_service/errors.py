"""
Caller-facing error taxonomy for the Auth Service.

Each error carries a public ``code`` and ``message`` that are safe to return
to clients, and the HTTP status the transport maps it to. Internal detail
stays on the chained ``__cause__`` and in the logs.
"""
from typing import Optional

from fastapi import status


class PublicErrors:
    USER_DUPLICATED = "USER_DUPLICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHORIZED = "UNAUTHORIZED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AuthError(Exception):
    code = PublicErrors.INTERNAL_ERROR
    message = "Internal server error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class UserAlreadyExists(AuthError):
    code = PublicErrors.USER_DUPLICATED
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} already used.")


class InvalidCredentials(AuthError):
    """Wrong email or wrong password; the two are never told apart."""
    code = PublicErrors.INVALID_CREDENTIALS
    message = "Invalid credentials"
    status_code = status.HTTP_401_UNAUTHORIZED


class Unauthorized(AuthError):
    """Bad, expired, forged or revoked token; the reason is never exposed."""
    code = PublicErrors.UNAUTHORIZED
    message = "Unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class InternalError(AuthError):
    pass


class InvalidToken(Exception):
    """Raised by the token issuer when a token fails verification or decoding."""
