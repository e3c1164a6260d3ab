"""
Auth Service - FastAPI application and composition root
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import PasswordHasher, TokenIssuer
from .config import Settings
from .db import build_engine, build_session_factory, init_db
from .errors import AuthError, InternalError, Unauthorized
from .routes import auth, health
from .utils.event_logger import configure_logging

logger = logging.getLogger(__name__)


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application with its collaborators wired from ``settings``.

    The engine, session factory, hasher and token issuer are created once
    here and shared by every request through ``app.state``.
    """
    settings = settings or Settings()
    configure_logging(settings)

    engine = build_engine(settings.DATABASE_URL, echo=settings.LOG_LEVEL.upper() == "DEBUG")

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        """Initialize database on startup"""
        init_db(engine)
        yield
        engine.dispose()

    app = FastAPI(
        title="Hero Platform Auth Service",
        description="Signup, login, JWT refresh and account deletion",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.hasher = PasswordHasher.from_settings(settings)
    app.state.issuer = TokenIssuer.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthError, auth_error_handler)

    app.include_router(auth.router)
    app.include_router(health.router)

    return app


app = create_app()
