from __future__ import annotations

import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from foodbank.api.v1.inventory import router as inventory_router
from foodbank.api.v1.recipes import router as recipes_router
from foodbank.app_logging import configure_logging
from foodbank.config import Settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure data dirs exist so repos can write
    settings = Settings()
    configure_logging(settings.log_level)
    os.makedirs(settings.data_dir, exist_ok=True)
    os.makedirs(settings.inventory_dir, exist_ok=True)
    yield


def create_app() -> FastAPI:
    settings = Settings()
    app = FastAPI(title="Food Bank Pantry API", version="1.0", lifespan=lifespan)

    # CORS (narrow it down in .env via CORS_ALLOW_ORIGINS if you want)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(inventory_router)
    app.include_router(recipes_router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz():
        return {"status": "ready"}

    return app

app = create_app()
