"""
Authentication service: signup, login, token refresh and account deletion.
"""
from typing import Optional
import logging

from sqlalchemy.exc import SQLAlchemyError

from .auth import PasswordHasher, TokenIssuer, USER_ID_CLAIM
from .errors import InternalError, InvalidCredentials, InvalidToken, Unauthorized, UserAlreadyExists
from .models import Language, User
from .repository import UniqueViolation, UserRepository
from .schemas import AuthPayload, OkResponse, SignupInput, Token, UserOut

logger = logging.getLogger(__name__)


class AuthService:
    """
    Orchestrates the credential store, password hasher and token issuer.

    Every operation is a stateless transition: nothing about a session is
    kept server-side except the per-user ``token_version`` that lets all of
    a user's tokens be revoked at once.
    """

    def __init__(self, users: UserRepository, hasher: PasswordHasher, issuer: TokenIssuer):
        self.users = users
        self.hasher = hasher
        self.issuer = issuer

    def signup(self, payload: SignupInput, language: Language = Language.EN) -> Token:
        hashed_password = self.hash_password(payload.password)

        # No existence pre-check: the unique constraint settles concurrent signups
        try:
            user = self.users.create(
                email=payload.email,
                password=hashed_password,
                firstname=payload.firstname,
                lastname=payload.lastname,
                language=language,
            )
        except UniqueViolation as e:
            raise UserAlreadyExists(payload.email) from e
        except SQLAlchemyError as e:
            logger.error("Signup failed for email=%s: %s", payload.email, e)
            raise InternalError() from e

        logger.info("User created: user_id=%s", user.id)
        return self.generate_tokens(user.id, user.token_version)

    def login(self, email: str, password: str) -> AuthPayload:
        user = self.users.find_by_email(email)
        if not user:
            self.hasher.dummy_verify()
            raise InvalidCredentials()

        if not self.validate_password(password, user.password):
            raise InvalidCredentials()

        tokens = self.generate_tokens(user.id, user.token_version)
        return AuthPayload(**tokens.model_dump(), user=UserOut.model_validate(user))

    def delete_account(self, user: User, password: str) -> OkResponse:
        # The caller is already authenticated; this re-checks the password
        if not self.validate_password(password, user.password):
            raise InvalidCredentials()

        try:
            self.users.delete(user.id)
        except SQLAlchemyError as e:
            logger.error("Account deletion failed for user_id=%s: %s", user.id, e)
            raise InternalError() from e

        logger.info("User deleted: user_id=%s", user.id)
        return OkResponse(ok=True)

    def refresh_token(self, token: str) -> Token:
        try:
            claims = self.issuer.verify_refresh_token(token)
        except InvalidToken as e:
            logger.debug("Refresh token rejected: %s", e)
            raise Unauthorized() from e

        user = self._current_holder(claims)
        return self.generate_tokens(user.id, user.token_version)

    def revoke_sessions(self, user: User) -> OkResponse:
        """Invalidate every token issued to ``user`` so far."""
        try:
            version = self.users.bump_token_version(user)
        except SQLAlchemyError as e:
            logger.error("Session revocation failed for user_id=%s: %s", user.id, e)
            raise InternalError() from e
        logger.info("Sessions revoked: user_id=%s token_version=%s", user.id, version)
        return OkResponse(ok=True)

    def generate_tokens(self, user_id: str, version: int = 0) -> Token:
        return Token(
            access_token=self.issuer.issue_access_token(user_id, version),
            refresh_token=self.issuer.issue_refresh_token(user_id, version),
        )

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.find_by_id(user_id)

    def get_user_from_token(self, token: str) -> Optional[User]:
        """
        Look up the user named by an access token WITHOUT verifying it.

        Only use this where the signature has already been checked upstream,
        or for lookups that grant nothing. Authorization must go through
        ``get_user_from_access_token``.
        """
        try:
            claims = self.issuer.decode_unverified(token)
        except InvalidToken:
            return None
        return self.get_user(claims[USER_ID_CLAIM])

    def get_user_from_access_token(self, token: str) -> User:
        try:
            claims = self.issuer.verify_access_token(token)
        except InvalidToken as e:
            logger.debug("Access token rejected: %s", e)
            raise Unauthorized() from e
        return self._current_holder(claims)

    def hash_password(self, password: str) -> str:
        try:
            return self.hasher.hash(password)
        except (ValueError, TypeError) as e:
            logger.error("Password hashing failed: %s", e)
            raise InternalError() from e

    def validate_password(self, password: str, hashed_password: str) -> bool:
        # A stored value passlib cannot identify is corrupt data, not a mismatch
        try:
            return self.hasher.verify(password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.error("Password verification failed: %s", e)
            raise InternalError() from e

    def _current_holder(self, claims: dict) -> User:
        """The user a verified token belongs to, provided it was not revoked."""
        user = self.get_user(claims[USER_ID_CLAIM])
        if user is None or claims.get("ver", 0) != user.token_version:
            raise Unauthorized()
        return user
