"""
Auth router - signup, login, token refresh and account management endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status

from ..deps import get_auth_service, get_current_user
from ..errors import InvalidCredentials, Unauthorized, UserAlreadyExists
from ..models import Language, User
from ..schemas import (
    AuthPayload,
    DeleteAccountInput,
    ErrorResponse,
    LoginInput,
    OkResponse,
    RefreshTokenInput,
    SignupInput,
    Token,
    UserOut,
)
from ..service import AuthService
from ..utils.event_logger import log_auth_event

router = APIRouter(prefix="/auth", tags=["auth"])

UNAUTHORIZED_RESPONSE = {401: {"model": ErrorResponse}}


def resolve_language(requested: Optional[Language], accept_language: Optional[str]) -> Language:
    """The body's language if given, else the first supported Accept-Language tag, else EN."""
    if requested is not None:
        return requested
    if not accept_language:
        return Language.EN
    for part in accept_language.split(","):
        tag = part.split(";")[0].strip().split("-")[0].upper()
        if tag in Language.__members__:
            return Language[tag]
    return Language.EN


@router.post(
    "/signup",
    response_model=Token,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
def signup(
    payload: SignupInput,
    request: Request,
    accept_language: Optional[str] = Header(default=None, alias="Accept-Language"),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        tokens = auth.signup(payload, resolve_language(payload.language, accept_language))
    except UserAlreadyExists:
        log_auth_event("signup_conflict", email=payload.email, request=request)
        raise
    log_auth_event("signup", email=payload.email, request=request)
    return tokens


@router.post("/login", response_model=AuthPayload, responses=UNAUTHORIZED_RESPONSE)
def login(credentials: LoginInput, request: Request, auth: AuthService = Depends(get_auth_service)):
    try:
        result = auth.login(credentials.email, credentials.password)
    except InvalidCredentials:
        log_auth_event("login_failure", email=credentials.email, request=request)
        raise
    log_auth_event("login_success", user_id=result.user.id, email=result.user.email, request=request)
    return result


@router.post("/refresh", response_model=Token, responses=UNAUTHORIZED_RESPONSE)
def refresh(payload: RefreshTokenInput, request: Request, auth: AuthService = Depends(get_auth_service)):
    try:
        tokens = auth.refresh_token(payload.refresh_token)
    except Unauthorized:
        log_auth_event("refresh_failure", request=request)
        raise
    log_auth_event("token_refresh", request=request)
    return tokens


@router.post("/delete-account", response_model=OkResponse, responses=UNAUTHORIZED_RESPONSE)
def delete_account(
    payload: DeleteAccountInput,
    request: Request,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    user_id, email = user.id, user.email
    try:
        result = auth.delete_account(user, payload.password)
    except InvalidCredentials:
        log_auth_event("account_delete_failure", user_id=user_id, email=email, request=request)
        raise
    log_auth_event("account_deleted", user_id=user_id, email=email, request=request)
    return result


@router.post("/logout-all", response_model=OkResponse, responses=UNAUTHORIZED_RESPONSE)
def logout_all(request: Request, user: User = Depends(get_current_user), auth: AuthService = Depends(get_auth_service)):
    result = auth.revoke_sessions(user)
    log_auth_event("sessions_revoked", user_id=user.id, email=user.email, request=request)
    return result


@router.get("/me", response_model=UserOut, responses=UNAUTHORIZED_RESPONSE)
def me(user: User = Depends(get_current_user)):
    return user
