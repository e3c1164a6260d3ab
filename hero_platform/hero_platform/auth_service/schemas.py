from pydantic import BaseModel, ConfigDict, Field, field_validator

from datetime import datetime
from typing import Optional
import re

from .models import Language

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
PASSWORD_PATTERN = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d]{4,}")


class SignupInput(BaseModel):
    email: str
    password: str = Field(..., min_length=4)
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    language: Optional[Language] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.fullmatch(v):
            raise ValueError("email must be a valid email address")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not PASSWORD_PATTERN.fullmatch(v):
            raise ValueError("password is too weak")
        return v


class LoginInput(BaseModel):
    email: str
    password: str


class RefreshTokenInput(BaseModel):
    refresh_token: str


class DeleteAccountInput(BaseModel):
    password: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserOut(BaseModel):
    """Public view of a user. Only these fields ever leave the service."""
    id: str
    email: str
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    language: Language
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AuthPayload(Token):
    user: UserOut


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    code: str
    message: str
