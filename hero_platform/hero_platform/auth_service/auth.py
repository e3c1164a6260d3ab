from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
import jwt

from .config import Settings
from .errors import InvalidToken

ACCESS = "access"
REFRESH = "refresh"
USER_ID_CLAIM = "userId"


class PasswordHasher:
    """Salted one-way password hashing with a configurable cost factor."""

    def __init__(self, rounds: int):
        # pbkdf2_sha256 avoids external bcrypt backend issues in some environments
        self._context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=rounds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(settings.PASSWORD_HASH_ROUNDS)

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        return self._context.verify(plain_password, hashed_password)

    def dummy_verify(self) -> bool:
        """Burn the time of a real verify when there is no stored hash to check."""
        return self._context.dummy_verify()


class TokenIssuer:
    """Signs and verifies the access/refresh JWT pair.

    Both tokens carry the same ``userId`` claim but are signed with distinct
    secrets, so a token of one kind never verifies as the other.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expires_in: int,
        refresh_expires_in: int,
        algorithm: str = "HS256",
    ):
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self._lifetimes = {
            ACCESS: timedelta(seconds=access_expires_in),
            REFRESH: timedelta(seconds=refresh_expires_in),
        }
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            access_secret=settings.JWT_ACCESS_SECRET,
            refresh_secret=settings.JWT_REFRESH_SECRET,
            access_expires_in=settings.JWT_ACCESS_EXPIRES_IN,
            refresh_expires_in=settings.JWT_REFRESH_EXPIRES_IN,
            algorithm=settings.JWT_ALGORITHM,
        )

    def issue_access_token(self, user_id: str, version: int = 0) -> str:
        return self._sign(ACCESS, user_id, version)

    def issue_refresh_token(self, user_id: str, version: int = 0) -> str:
        return self._sign(REFRESH, user_id, version)

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        return self._verify(ACCESS, token)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        return self._verify(REFRESH, token)

    def decode_unverified(self, token: str) -> Dict[str, Any]:
        """
        Read the claims without checking signature or expiry.

        Never feed the result into an authorization decision.
        """
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as exc:
            raise InvalidToken(str(exc)) from exc
        if USER_ID_CLAIM not in claims:
            raise InvalidToken(f"missing {USER_ID_CLAIM} claim")
        return claims

    def _sign(self, kind: str, user_id: str, version: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            USER_ID_CLAIM: user_id,
            "typ": kind,
            "ver": version,
            "iat": now,
            "exp": now + self._lifetimes[kind],
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)

    def _verify(self, kind: str, token: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self._algorithm],
                options={"require": ["exp", USER_ID_CLAIM]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken(str(exc)) from exc
        if claims.get("typ") != kind:
            raise InvalidToken(f"not a {kind} token")
        return claims
