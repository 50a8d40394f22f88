"""HTTP API exposing player state to external tools."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..app import BotApp
from ..domain.exceptions import GameNotFound, RpgForgeError, StorageError, UnknownItem, UnknownQuest
from .routes import API_VERSION, admin_router, items_router, public_router, users_router

logger = logging.getLogger(__name__)

__all__ = ["create_api", "error_status"]


def error_status(exc: RpgForgeError) -> int:
    if isinstance(exc, (UnknownItem, UnknownQuest, GameNotFound)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, StorageError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


def create_api(app: BotApp, *, manage_backend: bool = True) -> FastAPI:
    """Build the FastAPI application bound to ``app``.

    With ``manage_backend`` the lifespan initializes storage on startup and
    disposes it on shutdown.
    """

    @asynccontextmanager
    async def lifespan(_api: FastAPI):
        if manage_backend:
            await app.init_backend()
        try:
            yield
        finally:
            if manage_backend:
                await app.close()

    api = FastAPI(
        title=f"{app.config.dispatch.bot_name} API",
        version=API_VERSION,
        lifespan=lifespan,
    )
    api.state.rpg = app

    @api.exception_handler(RpgForgeError)
    async def handle_domain_error(_request: Request, exc: RpgForgeError) -> JSONResponse:
        code = error_status(exc)
        if code >= 500:
            logger.error("Storage failure while serving API request: %s", exc)
            message = "Internal server error"
        else:
            message = str(exc)
        return JSONResponse(status_code=code, content={"success": False, "message": message})

    @api.exception_handler(StarletteHTTPException)
    async def handle_http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
        )

    @api.exception_handler(RequestValidationError)
    async def handle_request_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "Invalid request",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    api.include_router(public_router)
    api.include_router(users_router)
    api.include_router(items_router)
    api.include_router(admin_router)
    return api
