"""
Configuration management for the Auth Service
"""
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Auth Service configuration loaded from environment variables.

    Built once at startup and passed by reference to everything that needs it.
    Instances are frozen so secrets and lifetimes cannot change after boot.
    """

    # Server Configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None
    CORS_ORIGINS: List[str] = ["*"]

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./app.db"

    # Token signing
    JWT_ACCESS_SECRET: str = Field(default="change-this-access-secret-in-prod", min_length=1)
    JWT_REFRESH_SECRET: str = Field(default="change-this-refresh-secret-in-prod", min_length=1)
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_EXPIRES_IN: int = Field(default=900, gt=0)  # 15 minutes
    JWT_REFRESH_EXPIRES_IN: int = Field(default=604800, gt=0)  # 7 days

    # Password hashing cost factor (pbkdf2_sha256 rounds)
    PASSWORD_HASH_ROUNDS: int = Field(default=29000, ge=1000)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="after")
    def check_distinct_secrets(self) -> "Settings":
        """Access and refresh tokens must not be verifiable with each other's key"""
        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        if self.JWT_REFRESH_EXPIRES_IN < self.JWT_ACCESS_EXPIRES_IN:
            raise ValueError("JWT_REFRESH_EXPIRES_IN must not be shorter than JWT_ACCESS_EXPIRES_IN")
        return self
