from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from .db import get_db
from .errors import Unauthorized
from .models import User
from .repository import UserRepository
from .service import AuthService


def get_auth_service(request: Request, db: Session = Depends(get_db)) -> AuthService:
    """Build an AuthService over this request's session and the app-wide collaborators."""
    return AuthService(
        users=UserRepository(db),
        hasher=request.app.state.hasher,
        issuer=request.app.state.issuer,
    )


def get_bearer_token(authorization: Optional[str] = Header(default=None, alias="Authorization")) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthorized()
    return authorization.split(" ", 1)[1].strip()


def get_current_user(
    token: str = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    # Verified decode only; never the unverified lookup
    return auth.get_user_from_access_token(token)
