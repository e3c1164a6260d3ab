"""
Credential store: persistence of User records over a SQLAlchemy session.
"""
from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .models import User

logger = logging.getLogger(__name__)

# Markers the supported drivers put in unique-constraint violations
_UNIQUE_MARKERS = ("unique constraint", "duplicate key", "duplicate entry")
_PG_UNIQUE_VIOLATION = "23505"


class UniqueViolation(Exception):
    """A create collided with an existing unique value (e.g. email)."""

    def __init__(self, field: str, value: str):
        super().__init__(f"{field} already exists")
        self.field = field
        self.value = value


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == _PG_UNIQUE_VIOLATION:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in _UNIQUE_MARKERS)


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        return self.db.get(User, user_id)

    def create(self, **fields) -> User:
        """
        Insert a new user and commit.

        Raises:
            UniqueViolation: the email is already registered
            SQLAlchemyError: any other store failure
        """
        user = User(**fields)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e):
                raise UniqueViolation("email", fields.get("email")) from e
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def delete(self, user_id: str) -> bool:
        user = self.find_by_id(user_id)
        if user is None:
            return False
        self.db.delete(user)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.debug("Deleted user_id=%s", user_id)
        return True

    def bump_token_version(self, user: User) -> int:
        user.token_version = (user.token_version or 0) + 1
        self.db.add(user)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user.token_version
