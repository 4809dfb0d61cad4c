from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from imagebot.config import Settings, get_settings
from imagebot.handlers import webhook_handler
from imagebot.services import BotServices, build_services


def create_app(settings: Settings | None = None, services: BotServices | None = None) -> FastAPI:
    settings = settings or get_settings()
    services = services or build_services(settings)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await services.aclose()

    app = FastAPI(title="ImageBot API", lifespan=lifespan)
    app.state.services = services
    app.include_router(webhook_handler.router)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app


app = create_app()
