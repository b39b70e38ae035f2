"""FastAPI adapter for GachaForge."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..app import GachaApp
from .routes import PlayerResolver, build_router, header_player_id


def create_app(gacha: GachaApp, *, identify: PlayerResolver = header_player_id) -> FastAPI:
    """Wrap a GachaApp into an ASGI application."""

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        await gacha.init_backend()
        try:
            yield
        finally:
            await gacha.shutdown()

    api = FastAPI(title="GachaForge", lifespan=lifespan)
    api.state.gacha = gacha
    api.include_router(build_router(gacha, identify=identify))

    @api.exception_handler(RequestValidationError)
    async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(
            status_code=400, content={"error": "ValidationError", "message": details}
        )

    return api


__all__ = ["build_router", "create_app", "header_player_id"]
